"""Shared test fixtures for async database, sessions, users and the real-time hub."""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from access_guard.core.config import Settings
from access_guard.core.security import create_access_token, hash_password
from access_guard.lib.realtime import ConnectionHub
from access_guard.models.base import Base
from access_guard.models.resident import Resident
from access_guard.models.user import User

TEST_PASSWORD = "testpassword123"


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        jwt_refresh_token_expire_days=7,
        notification_purge_enabled=False,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Per-test async session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(async_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory creating a persisted account; residents get a profile unless ``unit_number`` is None."""

    async def _make(
        role: str = "resident",
        *,
        email: str | None = None,
        name: str | None = None,
        status: str = "active",
        unit_number: str | None = "A101",
        block: str = "A",
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            name=name or f"Test {role.title()}",
            email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            phone="555-0100",
            role=role,
            status=status,
            hashed_password=hash_password(TEST_PASSWORD),
        )
        if role == "resident" and unit_number is not None:
            user.resident_profile = Resident(unit_number=unit_number, block=block, status="active")
        async_session.add(user)
        await async_session.commit()
        await async_session.refresh(user, ["resident_profile"])
        return user

    return _make


@pytest.fixture
async def resident_user(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user("resident", name="Rita Resident", unit_number="A101", block="A")


@pytest.fixture
async def other_resident_user(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user("resident", name="Owen Other", unit_number="B202", block="B")


@pytest.fixture
async def security_user(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user("security", name="Sam Security")


@pytest.fixture
async def admin_user(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user("admin", name="Ada Admin")


@pytest.fixture
async def super_admin_user(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user("super_admin", name="Sue Super")


@pytest.fixture
def hub() -> ConnectionHub:
    """A fresh in-process hub per test."""
    return ConnectionHub()


@pytest.fixture
def join_socket(hub: ConnectionHub) -> Callable[[str], Awaitable[AsyncMock]]:
    """Join a stand-in WebSocket to a room; its ``send_json`` calls record the frames."""

    async def _join(room: str) -> AsyncMock:
        socket = AsyncMock()
        await hub.join(socket, room)
        return socket

    return _join


@pytest.fixture
def token_for(settings: Settings) -> Callable[[User], str]:
    """Access token factory for a persisted user."""

    def _token(user: User) -> str:
        return create_access_token(
            subject=str(user.id),
            role=user.role,
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )

    return _token
