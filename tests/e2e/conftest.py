"""E2E test fixtures: the real application, a file-backed database, seeded accounts.

The app is built by ``create_app()`` and run through its lifespan, so the
engine, session factory and real-time hub are the process-wide ones. The
schema is created from the models before the lifespan starts.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine

from access_guard.core.config import Settings, get_settings
from access_guard.core.database import get_session_factory
from access_guard.core.realtime import get_connection_hub
from access_guard.core.security import create_access_token
from access_guard.lib.realtime import SECURITY_ROOM
from access_guard.main import create_app, lifespan
from access_guard.models.base import Base
from access_guard.models.user import User
from access_guard.schemas.user import UserCreateRequest
from access_guard.services import user_service

E2E_PASSWORD = "e2e-password-123"
RESIDENT_EMAIL = "e2e_resident@example.com"
SECURITY_EMAIL = "e2e_security@example.com"


@pytest.fixture
async def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Environment-driven settings pointing at a fresh SQLite file."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'e2e.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("JWT_SECRET_KEY", "e2e-secret-key-not-for-production-use")
    monkeypatch.setenv("NOTIFICATION_PURGE_ENABLED", "false")
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "10000")
    monkeypatch.setenv("ENVIRONMENT", "e2e")

    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    return get_settings()


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI]:
    """Create the FastAPI app and run its lifespan around the test."""
    _app = create_app()
    async with lifespan(_app):
        yield _app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _seed_user(**fields: str) -> User:
    async with get_session_factory()() as session:
        return await user_service.create_user(session, UserCreateRequest(password=E2E_PASSWORD, **fields))


@pytest.fixture
async def resident(app: FastAPI) -> User:
    return await _seed_user(name="Erin Resident", email=RESIDENT_EMAIL, role="resident", unit_number="H808", block="H")


@pytest.fixture
async def guard(app: FastAPI) -> User:
    return await _seed_user(name="Gus Guard", email=SECURITY_EMAIL, role="security")


def _bearer(user: User, settings: Settings) -> dict[str, str]:
    token = create_access_token(str(user.id), user.role, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def resident_headers(resident: User, settings: Settings) -> dict[str, str]:
    return _bearer(resident, settings)


@pytest.fixture
def guard_headers(guard: User, settings: Settings) -> dict[str, str]:
    return _bearer(guard, settings)


@pytest.fixture
async def security_socket(app: FastAPI) -> AsyncMock:
    """A fake socket joined to the gate staff room of the live hub."""
    socket = AsyncMock()
    await get_connection_hub().join(socket, SECURITY_ROOM)
    return socket


@pytest.fixture
def resident_credentials(resident: User) -> dict[str, str]:
    """OAuth2 form fields for the seeded resident."""
    return {"username": RESIDENT_EMAIL, "password": E2E_PASSWORD}
