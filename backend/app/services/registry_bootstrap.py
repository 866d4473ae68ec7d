"""
Registry Bootstrapper

One-time population of the frontend registry and the default grants for
the built-in roles:

  1. Probe — if the registry holds any row, do nothing
  2. Insert the fixed element catalog (committed on its own)
  3. Stage a grant row per (known role, element) where the role's default
     map lists the element for view or edit
  4. Drop staged rows whose (role_id, element_id) already exists, insert
     the rest

The probe is an existence check, not a diff: an element added to the
catalog after the first run is never inserted into an already seeded
database. Registry failures raise BootstrapSeedError; grant seeding is
best effort and only logs.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.errors import BootstrapSeedError, StoreLookupError
from app.middleware.metrics import registry_bootstrap_runs_total
from app.seed.frontend_registry import DEFAULT_ROLE_PERMISSIONS, REGISTRY_ELEMENTS
from app.services.permission_store import PermissionStore

logger = logging.getLogger(__name__)


@dataclass
class BootstrapReport:
    skipped: bool = False
    elements_inserted: int = 0
    permissions_inserted: int = 0

    def to_dict(self) -> dict:
        return {
            "skipped": self.skipped,
            "elements_inserted": self.elements_inserted,
            "permissions_inserted": self.permissions_inserted,
        }


class RegistryBootstrapper:
    def __init__(
        self,
        session: AsyncSession,
        elements: list[dict] | None = None,
        role_defaults: dict[str, dict[str, list[str]]] | None = None,
    ):
        self.session = session
        self.store = PermissionStore(session)
        self.elements = elements if elements is not None else REGISTRY_ELEMENTS
        self.role_defaults = role_defaults if role_defaults is not None else DEFAULT_ROLE_PERMISSIONS

    async def initialize_registry(self) -> BootstrapReport:
        report = BootstrapReport()
        logger.info("Frontend registry: starting initialization")

        try:
            if await self.store.registry_has_rows():
                logger.info("Frontend registry already populated, skipping initialization")
                registry_bootstrap_runs_total.labels(outcome="skipped").inc()
                report.skipped = True
                return report

            logger.info("Frontend registry: inserting %d elements", len(self.elements))
            report.elements_inserted = await self.store.insert_elements(self.elements)
            await self.session.commit()
        except (StoreLookupError, SQLAlchemyError) as exc:
            await self.session.rollback()
            logger.error("Frontend registry initialization failed: %s", exc)
            registry_bootstrap_runs_total.labels(outcome="failed").inc()
            raise BootstrapSeedError(f"Registry seed failed: {exc}") from exc

        report.permissions_inserted = await self.seed_default_permissions()
        registry_bootstrap_runs_total.labels(outcome="seeded").inc()
        logger.info(
            "Frontend registry initialized: %d elements, %d default permissions",
            report.elements_inserted, report.permissions_inserted,
        )
        return report

    async def seed_default_permissions(self) -> int:
        """Best effort: errors are logged and seeding stops with what it has."""
        logger.info("Frontend registry: setting up default role permissions")
        try:
            roles = await self.store.list_roles()
            elements = await self.store.list_elements()
        except StoreLookupError as exc:
            await self.session.rollback()
            logger.error("Cannot seed default permissions, lookup failed: %s", exc)
            return 0

        staged = []
        for role in roles:
            defaults = self.role_defaults.get(role.name)
            if defaults is None:
                continue
            view_keys = set(defaults.get("view", []))
            edit_keys = set(defaults.get("edit", []))
            for element in elements:
                can_view = element.element_key in view_keys
                can_edit = element.element_key in edit_keys
                if can_view or can_edit:
                    staged.append({
                        "role_id": role.id,
                        "frontend_registry_id": element.id,
                        "can_view": can_view,
                        "can_edit": can_edit,
                    })

        try:
            existing = await self.store.list_permission_identities()
        except StoreLookupError as exc:
            await self.session.rollback()
            logger.error("Cannot check existing permissions: %s", exc)
            return 0

        new_rows = [
            row for row in staged
            if (row["role_id"], row["frontend_registry_id"]) not in existing
        ]
        if not new_rows:
            logger.info("Default permissions already exist, skipping")
            return 0

        try:
            inserted = await self.store.insert_permissions(new_rows)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Error inserting default permissions: %s", exc)
            return 0

        logger.info("Default permissions set for %d role/element pairs", inserted)
        return inserted
