"""Test fixtures — a fresh in-memory SQLite database per test.

1. Settings come from GREENLANDS_* env vars, so they are set before the
   app is imported: SQLite via aiosqlite, cheap bcrypt rounds.
2. Each test gets its own engine (StaticPool keeps the single in-memory
   connection alive), the schema is created from the ORM metadata, and
   the app's get_db is overridden to hand out one shared session.
3. Protected routes are called with real JWTs minted for fixture users,
   so the whole auth pipeline (token → user row → role check) runs.

Redis is not started: rate limiting and pub/sub degrade silently.
"""

import os

os.environ.setdefault("GREENLANDS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GREENLANDS_BCRYPT_ROUNDS", "4")
os.environ.setdefault("GREENLANDS_ENVIRONMENT", "test")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from greenlands.auth.jwt import create_access_token  # noqa: E402
from greenlands.db.engine import get_db  # noqa: E402
from greenlands.db.models import Base  # noqa: E402
from greenlands.main import app  # noqa: E402
from greenlands.services.identity_service import IdentityService  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory database."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()
    await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db pointed at the test session.

    Auth is NOT overridden: pass auth_headers(user) to call protected routes.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def make_user(db_session):
    """Factory: insert a user of any role straight through the service."""
    async def _make(role: str = "farmer", **profile):
        suffix = uuid.uuid4().hex[:8]
        profile.setdefault("name", f"{role.title()} {suffix}")
        profile.setdefault("email", f"{role}-{suffix}@example.com")
        profile.setdefault("password", TEST_PASSWORD)
        return await IdentityService(db_session).create_user(role=role, **profile)

    return _make


@pytest.fixture()
def auth_headers():
    """Bearer header for a user object."""
    def _headers(user) -> dict:
        token = create_access_token(str(user.id), user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture()
async def farmer(make_user):
    return await make_user("farmer", location="North Valley")


@pytest_asyncio.fixture()
async def admin(make_user):
    return await make_user("admin")


@pytest_asyncio.fixture()
async def official(make_user):
    return await make_user(
        "government", department="Agriculture Department", position="Inspector"
    )
