"""Pytest configuration and fixtures."""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from stockpilot.core.db import Base, get_db
from stockpilot.core.security import hash_password
from stockpilot.main import create_app

# Import all models
import stockpilot.models  # noqa: F401
from stockpilot.models.user import User, UserRole
from tests.factories import UserFactory


@pytest.fixture
def test_database_url(tmp_path) -> str:
    """TEST_DATABASE_URL when set, otherwise a throwaway SQLite file per test."""
    return os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'stockpilot_test.db'}")


@pytest_asyncio.fixture(scope="function")
async def test_engine(test_database_url):
    """Engine with a fresh schema for each test."""
    engine = create_async_engine(test_database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory for tests that need more than one session (races)."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create fresh DB session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _client_for(db_session: AsyncSession, user: User | None):
    from stockpilot.api.auth import get_current_user

    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    if user is not None:

        async def override_get_current_user():
            return user

        app.dependency_overrides[get_current_user] = override_get_current_user

    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Staff user with a known password."""
    return await UserFactory.create(
        db_session,
        username="staff",
        display_name="Test Staff",
        hashed_password=hash_password("testpass123"),
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await UserFactory.create(
        db_session,
        username="admin",
        display_name="Test Admin",
        role=UserRole.ADMIN.value,
        hashed_password=hash_password("adminpass123"),
    )


@pytest_asyncio.fixture
async def client(db_session, test_user):
    """Async test client authenticated as a STAFF user."""
    async with await _client_for(db_session, test_user) as ac:
        ac.test_user = test_user
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def admin_client(db_session, admin_user):
    """Async test client authenticated as an ADMIN user."""
    async with await _client_for(db_session, admin_user) as ac:
        ac.test_user = admin_user
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def unauthenticated_client(db_session: AsyncSession):
    """AsyncClient without authentication overrides (for testing auth failures)."""
    async with await _client_for(db_session, None) as ac:
        ac.db_session = db_session
        yield ac
