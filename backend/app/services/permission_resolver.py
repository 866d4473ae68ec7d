"""
Permission Resolver

Decides whether the current user may view or edit one frontend element.
Rules are ordered and the first match wins:

  1. Resolve the principal; no active user → deny
  2. Admin / super admin → allow anything
  3. Caseworker + element in the caseworker list → allow (view and edit)
  4. Citizen + element key starting with "citizen" → allow (view and edit)
  5. Otherwise the grant table: registry element → (role, element) row →
     can_view / can_edit, default deny

Internally every step yields a `Decision`; lookup failures are carried as
its `error` and the public `check_permission` only ever returns a bool.
Nothing is cached: each check re-resolves the principal.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import Principal
from app.auth.errors import AccessControlError, PrincipalResolutionError, StoreLookupError
from app.auth.permissions import PermissionType, result_key
from app.auth.roles import DEFAULT_SHORTCUT_RULES, ShortcutRules
from app.middleware.metrics import permission_bulk_check_size, permission_checks_total
from app.services.permission_store import PermissionStore
from app.services.principal_service import get_current_user_info

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: str  # admin | caseworker | citizen | grant | no_principal | error
    error: AccessControlError | None = None

    @classmethod
    def allow(cls, rule: str) -> "Decision":
        return cls(allowed=True, rule=rule)

    @classmethod
    def deny(cls, rule: str, error: AccessControlError | None = None) -> "Decision":
        return cls(allowed=False, rule=rule, error=error)


def _unexpected(exc: Exception) -> AccessControlError:
    error = AccessControlError(f"Unexpected {type(exc).__name__}: {exc}")
    error.__cause__ = exc
    return error


@dataclass(frozen=True)
class PermissionCheck:
    element_key: str
    permission_type: PermissionType = PermissionType.VIEW

    def __post_init__(self):
        object.__setattr__(self, "permission_type", PermissionType(self.permission_type))


class PermissionResolver:
    """Combines role shortcuts with the data-driven grant table."""

    def __init__(self, session: AsyncSession, shortcuts: ShortcutRules = DEFAULT_SHORTCUT_RULES):
        self.session = session
        self.shortcuts = shortcuts
        self.store = PermissionStore(session)

    async def check_permission(
        self,
        auth_user_id: str | None,
        element_key: str,
        permission_type: PermissionType | str = PermissionType.VIEW,
    ) -> bool:
        """Public edge: always a bool, never raises."""
        try:
            decision = await self.resolve(auth_user_id, element_key, PermissionType(permission_type))
        except Exception as exc:
            decision = Decision.deny("error", _unexpected(exc))
        self._record(decision, element_key, permission_type)
        return decision.allowed

    async def bulk_check_permissions(
        self,
        auth_user_id: str | None,
        checks: Iterable[PermissionCheck],
    ) -> dict[str, bool]:
        """
        Run many checks for one user. The principal is resolved once; each
        item is decided in isolation and a failure maps only that item to False.
        """
        checks = list(checks)
        permission_bulk_check_size.observe(len(checks))
        logger.debug("Bulk checking %d permissions for %s", len(checks), auth_user_id)

        principal_or_denial = await self._load_principal(auth_user_id)

        results: dict[str, bool] = {}
        for check in checks:
            key = result_key(check.element_key, check.permission_type)
            if isinstance(principal_or_denial, Decision):
                decision = principal_or_denial
            else:
                try:
                    decision = await self.decide(principal_or_denial, check.element_key, check.permission_type)
                except Exception as exc:
                    decision = Decision.deny("error", _unexpected(exc))
            self._record(decision, check.element_key, check.permission_type)
            results[key] = decision.allowed
        return results

    async def resolve(
        self,
        auth_user_id: str | None,
        element_key: str,
        permission_type: PermissionType = PermissionType.VIEW,
    ) -> Decision:
        principal_or_denial = await self._load_principal(auth_user_id)
        if isinstance(principal_or_denial, Decision):
            return principal_or_denial
        return await self.decide(principal_or_denial, element_key, permission_type)

    async def decide(
        self,
        principal: Principal,
        element_key: str,
        permission_type: PermissionType = PermissionType.VIEW,
    ) -> Decision:
        """Apply rules 2-5 for an already resolved principal."""
        if principal.is_admin or principal.is_super_admin:
            return Decision.allow("admin")

        # Shortcuts ignore permission_type and the grant table
        if principal.is_case_worker and self.shortcuts.caseworker_allows(element_key):
            return Decision.allow("caseworker")

        if principal.is_citizen and self.shortcuts.citizen_allows(element_key):
            return Decision.allow("citizen")

        # A failed statement aborts the whole transaction on PostgreSQL; the
        # savepoint keeps later checks on this session usable.
        try:
            async with self.session.begin_nested():
                granted = await self.store.has_frontend_permission(principal.role_id, element_key, permission_type)
        except StoreLookupError as exc:
            exc.element_key = exc.element_key or element_key
            exc.permission_type = exc.permission_type or permission_type.value
            return Decision.deny("error", exc)

        return Decision.allow("grant") if granted else Decision.deny("grant")

    async def _load_principal(self, auth_user_id: str | None) -> Principal | Decision:
        if not auth_user_id:
            return Decision.deny("no_principal", PrincipalResolutionError("No authenticated user"))
        try:
            principal = await get_current_user_info(self.session, auth_user_id)
        except PrincipalResolutionError as exc:
            return Decision.deny("no_principal", exc)
        if principal is None:
            return Decision.deny(
                "no_principal",
                PrincipalResolutionError(f"No active user for {auth_user_id}"),
            )
        return principal

    def _record(self, decision: Decision, element_key: str, permission_type: PermissionType | str) -> None:
        permission_checks_total.labels(rule=decision.rule, allowed=str(decision.allowed).lower()).inc()
        permission_type = getattr(permission_type, "value", permission_type)
        if decision.error is not None:
            if isinstance(decision.error, PrincipalResolutionError):
                logger.warning("Denied %s (%s): %s", element_key, permission_type, decision.error)
            else:
                logger.error(
                    "Denied %s (%s) after error: %s", element_key, permission_type, decision.error,
                    exc_info=decision.error,
                )
        else:
            logger.debug(
                "%s %s (%s) via %s",
                "Allowed" if decision.allowed else "Denied", element_key, permission_type, decision.rule,
            )
