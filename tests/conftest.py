"""
Shared test fixtures for Threadboard API tests.

Provides database session management, test clients, and user fixtures.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from threadboard.auth.dependencies import load_identity
from threadboard.auth.jwt import create_access_token
from threadboard.auth.password import hash_password
from threadboard.config import settings
from threadboard.database import Base, get_db
from threadboard.main import app
from threadboard.middleware.rate_limit import reset_limiter

# Import models so they're registered with Base.metadata before table creation
from threadboard.models.user import Grade, User

# Fixed wall clock for service-level tests (epoch seconds).
NOW = 1_700_000_000
DAY = 86400

# Test database URL (uses separate test database)
TEST_DATABASE_URL = settings.test_database_url

# Create test engine with NullPool to avoid connection issues
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


# --- Rate Limiter Reset Fixture ---


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test to ensure test isolation."""
    reset_limiter()
    yield


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create tables before each test function, drop after.
    Provides isolated database state per test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client configured for testing.
    Overrides database dependency with test session.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating bearer token headers."""

    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def identity_of(db_session: AsyncSession):
    """Factory fixture reloading a user's identity snapshot (grade, last_time)."""

    async def _identity_of(user: dict[str, Any]):
        return await load_identity(db_session, user["uid"])

    return _identity_of


# --- User Fixtures ---


async def _create_user(
    db_session: AsyncSession,
    name: str,
    mail: str,
    password: str,
    grade: int = Grade.NORMAL,
) -> dict[str, Any]:
    """Helper to create a user row and a session token."""
    user = User(
        name=name,
        mail=mail.lower(),
        hash=hash_password(password),
        grade=grade,
        time=NOW - 30 * DAY,
    )
    db_session.add(user)
    await db_session.flush()
    uid = user.uid
    await db_session.commit()

    return {
        "uid": uid,
        "name": name,
        "mail": mail.lower(),
        "password": password,
        "grade": grade,
        "token": create_access_token(uid),
    }


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> dict[str, Any]:
    """A normal user ("A" in the thread scenarios)."""
    return await _create_user(
        db_session,
        name="alice",
        mail="alice@example.com",
        password="AlicePassword123!",
    )


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> dict[str, Any]:
    """A second normal user for ownership and notification scenarios."""
    return await _create_user(
        db_session,
        name="bob",
        mail="bob@example.com",
        password="BobPassword123!",
    )


@pytest_asyncio.fixture
async def third_user(db_session: AsyncSession) -> dict[str, Any]:
    """A third normal user."""
    return await _create_user(
        db_session,
        name="carol",
        mail="carol@example.com",
        password="CarolPassword123!",
    )


@pytest_asyncio.fixture
async def test_moderator(db_session: AsyncSession) -> dict[str, Any]:
    """A user with moderator grade."""
    return await _create_user(
        db_session,
        name="mod",
        mail="mod@example.com",
        password="ModPassword123!",
        grade=Grade.MODERATOR,
    )


@pytest_asyncio.fixture
async def privileged_user(db_session: AsyncSession) -> dict[str, Any]:
    """A privileged user, exempt from mute and ban."""
    return await _create_user(
        db_session,
        name="vip",
        mail="vip@example.com",
        password="VipPassword123!",
        grade=Grade.PRIVILEGED,
    )
