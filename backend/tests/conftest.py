"""Shared test fixtures for backend tests."""

import os

os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "0")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import settings  # noqa: E402
from app.database import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.api.deps import get_db  # noqa: E402
from app.models import Role, User  # noqa: E402
from app.services.registry_bootstrap import RegistryBootstrapper  # noqa: E402


ROLES = [
    {"id": "role-admin", "name": "admin", "role_type": "admin", "is_system": True},
    {"id": "role-caseworker", "name": "caseworker", "role_type": "case_worker", "is_system": False},
    {"id": "role-citizen", "name": "citizen", "role_type": "citizen", "is_system": False},
    {"id": "role-supervisor", "name": "supervisor", "role_type": "custom", "is_system": False},
]

USERS = [
    {"auth_user_id": "auth-admin", "email": "admin@caseportal.test", "role_id": "role-admin"},
    {"auth_user_id": "auth-caseworker", "email": "worker@caseportal.test", "role_id": "role-caseworker"},
    {"auth_user_id": "auth-citizen", "email": "citizen@caseportal.test", "role_id": "role-citizen"},
    {"auth_user_id": "auth-supervisor", "email": "supervisor@caseportal.test", "role_id": "role-supervisor"},
    {"auth_user_id": "auth-superadmin", "email": "root@caseportal.test", "role_id": "role-supervisor",
     "is_super_admin": True},
    {"auth_user_id": "auth-inactive", "email": "gone@caseportal.test", "role_id": "role-supervisor",
     "is_active": False},
]


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test, built from the ORM metadata."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session with the built-in roles and one user per role."""
    async with session_factory() as session:
        session.add_all(Role(**role) for role in ROLES)
        await session.flush()
        session.add_all(User(**user) for user in USERS)
        await session.commit()
        yield session


@pytest_asyncio.fixture
async def seeded_session(db_session: AsyncSession) -> AsyncSession:
    """db_session with the registry catalog and default grants in place."""
    await RegistryBootstrapper(db_session).initialize_registry()
    return db_session


def make_token(auth_user_id: str, audience: str | None = None, expires_in: int = 3600) -> str:
    payload = {
        "sub": auth_user_id,
        "aud": audience or settings.jwt_audience,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_header(auth_user_id: str) -> dict:
    """Create an Authorization header with a valid JWT."""
    return {"Authorization": f"Bearer {make_token(auth_user_id)}"}


def _override_db(session: AsyncSession):
    """Create a dependency override for get_db."""
    async def _get_db():
        yield session
    return _get_db


@pytest_asyncio.fixture
async def client(seeded_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the seeded test database (no auth header)."""
    app.dependency_overrides[get_db] = _override_db(seeded_session)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class AbortingTransactions:
    """
    PostgreSQL transaction semantics on top of SQLite.

    After a failed statement every further statement fails until the
    transaction or the enclosing savepoint is rolled back. `fail_next(match)`
    makes the next statement accepted by `match(statement, parameters)` fail.
    """

    def __init__(self, sync_engine):
        self.sync_engine = sync_engine
        self.aborted = False
        self._match = None

    def fail_next(self, match) -> None:
        self._match = match

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany):
        if self.aborted and not statement.startswith("ROLLBACK"):
            raise OperationalError(statement, parameters, Exception("current transaction is aborted"))
        if self._match is not None and self._match(statement, parameters or ()):
            self._match = None
            self.aborted = True
            raise OperationalError(statement, parameters, Exception("canceling statement due to lock timeout"))

    def _on_error(self, context):
        self.aborted = True

    def _reset(self, conn, *args):
        self.aborted = False

    def install(self):
        event.listen(self.sync_engine, "before_cursor_execute", self._before_cursor_execute)
        event.listen(self.sync_engine, "handle_error", self._on_error)
        event.listen(self.sync_engine, "rollback", self._reset)
        event.listen(self.sync_engine, "rollback_savepoint", self._reset)

    def uninstall(self):
        event.remove(self.sync_engine, "before_cursor_execute", self._before_cursor_execute)
        event.remove(self.sync_engine, "handle_error", self._on_error)
        event.remove(self.sync_engine, "rollback", self._reset)
        event.remove(self.sync_engine, "rollback_savepoint", self._reset)


@pytest.fixture
def aborting_transactions(db_session: AsyncSession):
    guard = AbortingTransactions(db_session.bind.sync_engine)
    guard.install()
    yield guard
    guard.uninstall()
