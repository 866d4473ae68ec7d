"""
Seed the frontend registry and default role permissions.

Usage:
    python -m app.seed.registry            # Seed if the registry is empty
    python -m app.seed.registry --verify   # Just print current counts
"""

import asyncio
import sys
import time

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from app.config import settings
from app.auth.errors import BootstrapSeedError
from app.middleware.logging_config import configure_logging
from app.services.permission_store import PermissionStore
from app.services.registry_bootstrap import RegistryBootstrapper


async def verify_data(session: AsyncSession) -> bool:
    store = PermissionStore(session)
    elements = await store.count_elements()
    permissions = await store.count_permissions()
    roles = len(await store.list_roles())

    print("\n── Verification ──")
    print(f"  roles:             {roles:,}")
    print(f"  registry elements: {elements:,}")
    print(f"  permissions:       {permissions:,}")
    return elements > 0


async def run_seed() -> int:
    """Main seed entry point."""
    start = time.time()
    engine = create_async_engine(settings.database_url, echo=False)
    async_sess = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with async_sess() as session:
            if "--verify" in sys.argv:
                ok = await verify_data(session)
                return 0 if ok else 1

            print("=" * 60)
            print("Case Portal — Frontend Registry Seed")
            print("=" * 60)

            try:
                report = await RegistryBootstrapper(session).initialize_registry()
            except BootstrapSeedError as exc:
                print(f"\nRegistry seed FAILED: {exc}")
                return 1

            if report.skipped:
                print("Registry already seeded.")
            else:
                print(f"  {report.elements_inserted} elements, {report.permissions_inserted} permissions")

            ok = await verify_data(session)
    finally:
        await engine.dispose()

    print(f"\nDone in {time.time() - start:.1f}s")
    return 0 if ok else 1


if __name__ == "__main__":
    configure_logging(settings.log_level, settings.log_format)
    sys.exit(asyncio.run(run_seed()))
