"""
Permission Store — data access for the registry, roles and grants.

Thin, filtered CRUD over three tables (frontend_registry, roles,
permissions). Every read failure surfaces as `StoreLookupError`, so
callers can decide between fail-closed (the resolver) and fail-loud
(the bootstrapper).

`has_frontend_permission` is the one non-CRUD query: element lookup by
key, then the grant row for `(role_id, element.id)`, defaulting to False
when either is missing.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.errors import StoreLookupError
from app.auth.permissions import PermissionType
from app.models import Permission, RegistryElement, Role

logger = logging.getLogger(__name__)


class PermissionStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Registry ──

    async def registry_has_rows(self) -> bool:
        """Existence probe: is at least one element registered?"""
        try:
            result = await self.session.execute(select(RegistryElement.id).limit(1))
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Registry probe failed: {exc}") from exc
        return result.first() is not None

    async def list_elements(self, module: str | None = None) -> list[RegistryElement]:
        query = select(RegistryElement).order_by(RegistryElement.module, RegistryElement.element_key)
        if module is not None:
            query = query.where(RegistryElement.module == module)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Listing registry elements failed: {exc}") from exc
        return list(result.scalars())

    async def get_element(self, element_key: str) -> RegistryElement | None:
        try:
            result = await self.session.execute(
                select(RegistryElement).where(RegistryElement.element_key == element_key)
            )
        except SQLAlchemyError as exc:
            raise StoreLookupError(
                f"Registry lookup failed: {exc}", element_key=element_key,
            ) from exc
        return result.scalar_one_or_none()

    async def insert_elements(self, rows: list[dict]) -> int:
        self.session.add_all(RegistryElement(**row) for row in rows)
        await self.session.flush()
        return len(rows)

    async def count_elements(self) -> int:
        result = await self.session.execute(select(func.count(RegistryElement.id)))
        return result.scalar_one()

    # ── Roles ──

    async def list_roles(self) -> list[Role]:
        try:
            result = await self.session.execute(select(Role).order_by(Role.name))
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Listing roles failed: {exc}") from exc
        return list(result.scalars())

    async def get_role(self, role_id: str) -> Role | None:
        try:
            result = await self.session.execute(select(Role).where(Role.id == role_id))
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Role lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    # ── Permissions ──

    async def list_permission_identities(self) -> set[tuple[str, str]]:
        """All existing `(role_id, frontend_registry_id)` pairs."""
        try:
            result = await self.session.execute(
                select(Permission.role_id, Permission.frontend_registry_id)
            )
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Listing permissions failed: {exc}") from exc
        return {(role_id, element_id) for role_id, element_id in result.all()}

    async def permissions_for_role(self, role_id: str) -> dict[str, Permission]:
        """Grant rows for one role, keyed by element key."""
        try:
            result = await self.session.execute(
                select(RegistryElement.element_key, Permission)
                .join(Permission, Permission.frontend_registry_id == RegistryElement.id)
                .where(Permission.role_id == role_id)
            )
        except SQLAlchemyError as exc:
            raise StoreLookupError(f"Listing permissions for role {role_id} failed: {exc}") from exc
        return {key: perm for key, perm in result.all()}

    async def insert_permissions(self, rows: list[dict]) -> int:
        self.session.add_all(Permission(**row) for row in rows)
        await self.session.flush()
        return len(rows)

    async def count_permissions(self) -> int:
        result = await self.session.execute(select(func.count(Permission.id)))
        return result.scalar_one()

    async def upsert_permission(
        self,
        role_id: str,
        element: RegistryElement,
        can_view: bool,
        can_edit: bool,
    ) -> Permission:
        """Create or update the single grant row for `(role_id, element)`."""
        existing = (await self.session.execute(
            select(Permission).where(
                Permission.role_id == role_id,
                Permission.frontend_registry_id == element.id,
            )
        )).scalar_one_or_none()

        if existing is None:
            existing = Permission(
                role_id=role_id,
                frontend_registry_id=element.id,
                can_view=can_view,
                can_edit=can_edit,
            )
            self.session.add(existing)
        else:
            existing.can_view = can_view
            existing.can_edit = can_edit
        await self.session.flush()
        return existing

    async def has_frontend_permission(
        self,
        role_id: str | None,
        element_key: str,
        permission_type: PermissionType,
    ) -> bool:
        """Grant-table decision for one role and element; False when nothing matches."""
        if role_id is None:
            return False

        element = await self.get_element(element_key)
        if element is None:
            return False

        try:
            result = await self.session.execute(
                select(Permission.can_view, Permission.can_edit).where(
                    Permission.role_id == role_id,
                    Permission.frontend_registry_id == element.id,
                )
            )
        except SQLAlchemyError as exc:
            raise StoreLookupError(
                f"Permission lookup failed: {exc}",
                element_key=element_key,
                permission_type=permission_type.value,
            ) from exc

        row = result.first()
        if row is None:
            return False
        can_view, can_edit = row
        return bool(can_edit if permission_type == PermissionType.EDIT else can_view)
