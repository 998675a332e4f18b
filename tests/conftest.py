"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database built from SQLModel.metadata
for every test function. Redis is replaced by a mock.
"""

import os

# Settings are read at import time, so the environment must be in place first
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import itertools  # noqa: E402
from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.config import AppRole  # noqa: E402
from app.core.database import get_db  # noqa: E402
from app.core.redis import get_redis  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app as main_app  # noqa: E402
from app.models import Images, Profiles, UserRoles  # noqa: E402

_counter = itertools.count(1)


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(scope="function")
async def engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session shared by the test body and the app under test."""
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_redis():
    """Create a mock Redis client with pipeline support.

    pipeline() is synchronous, as are pipeline methods (incr, expire).
    Only pipeline.execute() is async.
    """
    client = AsyncMock()
    client.get.return_value = None
    mock_pipe = MagicMock()
    mock_pipe.execute = AsyncMock(return_value=[])
    client.pipeline = MagicMock(return_value=mock_pipe)
    return client


@pytest.fixture(scope="function")
def app(db_session: AsyncSession, mock_redis) -> FastAPI:
    """
    Create FastAPI app with test database session.

    This overrides the database and redis dependencies.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_redis() -> AsyncGenerator[Any, None]:
        yield mock_redis

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_redis] = override_get_redis

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/api/v1/leaderboard")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Test Data Fixtures
# =============================================================================


def _auth_headers(profile_or_id: Profiles | str) -> dict[str, str]:
    user_id = profile_or_id if isinstance(profile_or_id, str) else profile_or_id.user_id
    token = create_access_token(user_id, email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[Profiles | str], dict[str, str]]:
    """
    Bearer header for a profile (or a bare identity id).

    Usage:
        response = await client.get("/api/v1/profiles/me", headers=auth_headers(alice))
    """
    return _auth_headers


@pytest.fixture
def make_profile(db_session: AsyncSession) -> Callable[..., Awaitable[Profiles]]:
    """
    Factory for committed profiles.

    Usage:
        alice = await make_profile(city="Paris", country="France")
    """

    async def _make(user_id: str | None = None, admin: bool = False, **fields: Any) -> Profiles:
        n = next(_counter)
        user_id = user_id or f"user-{n:04d}"
        fields.setdefault("username", f"user_{n}")
        fields.setdefault("name", f"User {n}")
        fields.setdefault("age", 30)
        profile = Profiles(user_id=user_id, email=f"{user_id}@example.com", **fields)
        db_session.add(profile)
        if admin:
            db_session.add(UserRoles(user_id=user_id, role=AppRole.ADMIN))
        await db_session.commit()
        return profile

    return _make


@pytest.fixture
def make_image(db_session: AsyncSession) -> Callable[..., Awaitable[Images]]:
    """
    Factory for committed images.

    Usage:
        image = await make_image(owner, title="Sunset")
    """

    async def _make(owner: Profiles, **fields: Any) -> Images:
        n = next(_counter)
        fields.setdefault("title", f"Image {n}")
        fields.setdefault("image_url", f"http://test/media/{owner.user_id}/{n}.jpg")
        image = Images(user_id=owner.user_id, **fields)
        db_session.add(image)
        await db_session.commit()
        return image

    return _make
