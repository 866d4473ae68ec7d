"""Registry bootstrap: catalog insert, default grants, idempotence, failure modes."""

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.errors import BootstrapSeedError, StoreLookupError
from app.models import Permission, RegistryElement
from app.seed.frontend_registry import REGISTRY_ELEMENTS
from app.seed.registry import verify_data
from app.services.permission_store import PermissionStore
from app.services.registry_bootstrap import RegistryBootstrapper


async def _grants(session: AsyncSession, role_id: str) -> dict[str, tuple[bool, bool]]:
    rows = (await session.execute(
        select(RegistryElement.element_key, Permission.can_view, Permission.can_edit)
        .join(Permission, Permission.frontend_registry_id == RegistryElement.id)
        .where(Permission.role_id == role_id)
    )).all()
    return {key: (view, edit) for key, view, edit in rows}


@pytest.mark.asyncio
class TestInitializeRegistry:
    async def test_empty_database_is_seeded(self, db_session: AsyncSession):
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.skipped is False
        assert report.elements_inserted == len(REGISTRY_ELEMENTS) == 33
        assert report.permissions_inserted == 29

        store = PermissionStore(db_session)
        assert await store.count_elements() == 33
        assert await store.count_permissions() == 29

    async def test_default_grants_per_role(self, db_session: AsyncSession):
        await RegistryBootstrapper(db_session).initialize_registry()

        caseworker = await _grants(db_session, "role-caseworker")
        assert caseworker["dashboard"] == (True, False)
        assert caseworker["case_detail.add_notes"] == (False, True)
        assert len(caseworker) == 6

        admin = await _grants(db_session, "role-admin")
        assert admin["permissions_management"] == (True, False)
        assert admin["cases.create_case"] == (False, True)
        assert len(admin) == 19

        citizen = await _grants(db_session, "role-citizen")
        assert set(citizen) == {"citizen_dashboard", "citizen_cases", "citizen_notifications", "citizen_knowledge"}
        assert all(grant == (True, False) for grant in citizen.values())

    async def test_role_without_defaults_gets_nothing(self, db_session: AsyncSession):
        await RegistryBootstrapper(db_session).initialize_registry()
        assert await _grants(db_session, "role-supervisor") == {}

    async def test_second_run_is_skipped(self, db_session: AsyncSession):
        await RegistryBootstrapper(db_session).initialize_registry()
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.to_dict() == {"skipped": True, "elements_inserted": 0, "permissions_inserted": 0}
        store = PermissionStore(db_session)
        assert await store.count_elements() == 33
        assert await store.count_permissions() == 29

    async def test_any_existing_element_skips_the_whole_catalog(self, db_session: AsyncSession):
        # Existence probe, not a diff: later catalog additions are not picked up
        await RegistryBootstrapper(db_session, elements=REGISTRY_ELEMENTS[:1]).initialize_registry()
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.skipped is True
        assert await PermissionStore(db_session).count_elements() == 1

    async def test_registry_insert_failure_raises_and_persists_nothing(self, db_session: AsyncSession):
        duplicated = REGISTRY_ELEMENTS[:3] + REGISTRY_ELEMENTS[:1]
        with pytest.raises(BootstrapSeedError):
            await RegistryBootstrapper(db_session, elements=duplicated).initialize_registry()

        store = PermissionStore(db_session)
        assert await store.count_elements() == 0
        assert await store.count_permissions() == 0

    async def test_probe_failure_raises(self, db_session: AsyncSession, monkeypatch):
        async def _boom(self):
            raise StoreLookupError("registry unreachable")

        monkeypatch.setattr(PermissionStore, "registry_has_rows", _boom)
        with pytest.raises(BootstrapSeedError):
            await RegistryBootstrapper(db_session).initialize_registry()

    async def test_role_lookup_failure_is_not_fatal(self, db_session: AsyncSession, monkeypatch):
        async def _boom(self):
            raise StoreLookupError("roles table locked")

        monkeypatch.setattr(PermissionStore, "list_roles", _boom)
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.elements_inserted == 33
        assert report.permissions_inserted == 0
        assert await PermissionStore(db_session).count_elements() == 33

    async def test_permission_insert_failure_keeps_registry(self, db_session: AsyncSession, monkeypatch):
        async def _boom(self, rows):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(PermissionStore, "insert_permissions", _boom)
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.permissions_inserted == 0
        store = PermissionStore(db_session)
        assert await store.count_elements() == 33
        assert await store.count_permissions() == 0


@pytest.mark.asyncio
class TestSeedDefaultPermissions:
    async def test_rerun_inserts_nothing(self, seeded_session: AsyncSession):
        assert await RegistryBootstrapper(seeded_session).seed_default_permissions() == 0
        assert await PermissionStore(seeded_session).count_permissions() == 29

    async def test_only_missing_rows_are_restored(self, seeded_session: AsyncSession):
        await seeded_session.execute(delete(Permission).where(Permission.role_id == "role-citizen"))
        await seeded_session.commit()

        assert await RegistryBootstrapper(seeded_session).seed_default_permissions() == 4
        assert await PermissionStore(seeded_session).count_permissions() == 29

    async def test_existing_rows_are_not_overwritten(self, seeded_session: AsyncSession):
        store = PermissionStore(seeded_session)
        await store.upsert_permission("role-citizen", await store.get_element("citizen_cases"), False, False)
        await seeded_session.commit()

        await RegistryBootstrapper(seeded_session).seed_default_permissions()
        assert (await _grants(seeded_session, "role-citizen"))["citizen_cases"] == (False, False)

    async def test_custom_role_defaults(self, seeded_session: AsyncSession):
        bootstrapper = RegistryBootstrapper(
            seeded_session,
            role_defaults={"supervisor": {"view": ["reports", "insights"], "edit": ["reports"]}},
        )
        assert await bootstrapper.seed_default_permissions() == 2
        grants = await _grants(seeded_session, "role-supervisor")
        assert grants == {"reports": (True, True), "insights": (True, False)}

    async def test_role_query_failure_leaves_session_usable(
        self, db_session: AsyncSession, aborting_transactions,
    ):
        aborting_transactions.fail_next(
            lambda statement, params: statement.startswith("SELECT") and "FROM roles" in statement
        )
        report = await RegistryBootstrapper(db_session).initialize_registry()

        assert report.elements_inserted == 33
        assert report.permissions_inserted == 0
        assert await verify_data(db_session) is True
