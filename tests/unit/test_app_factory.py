"""Tests for the FastAPI application factory module."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from access_guard.core.config import Settings
from access_guard.core.errors import AccessGuardError
from access_guard.main import create_app


def _settings(**overrides: object) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        **overrides,
    )


class TestCreateApp:
    """Tests for create_app."""

    @pytest.fixture
    def app(self):
        with patch("access_guard.main.get_settings", return_value=_settings()):
            return create_app()

    def test_app_is_created(self, app) -> None:
        assert app.title == "AccessGuard API"

    def test_app_has_openapi_schema(self, app) -> None:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/openapi.json")
        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/guest-codes/verify" in paths
        assert "/api/v1/guest-visits/{visit_id}/checkin" in paths
        assert "/api/v1/deliveries/pending" in paths
        assert "/api/v1/access-logs/statistics" in paths
        assert "/api/v1/notifications/mark-all-read" in paths

    def test_exception_handlers_registered(self, app) -> None:
        assert AccessGuardError in app.exception_handlers
        assert ValueError in app.exception_handlers
        assert Exception in app.exception_handlers

    def test_health_route(self, app) -> None:
        client = TestClient(app)
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_unknown_route_uses_error_envelope(self, app) -> None:
        client = TestClient(app)
        response = client.get("/api/v1/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_security_headers_applied(self, app) -> None:
        client = TestClient(app)
        response = client.get("/api/v1/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestAppLifespan:
    """Tests for lifespan management."""

    @pytest.mark.asyncio
    async def test_lifespan_init_and_dispose(self) -> None:
        from access_guard.main import lifespan

        with (
            patch("access_guard.main.get_settings", return_value=_settings(notification_purge_enabled=False)),
            patch("access_guard.main.setup_logging") as mock_setup_logging,
            patch("access_guard.main.init_engine") as mock_init_engine,
            patch("access_guard.main.dispose_engine", new_callable=AsyncMock) as mock_dispose,
        ):
            async with lifespan(AsyncMock()):
                mock_setup_logging.assert_called_once_with("INFO", log_dir=None)
                mock_init_engine.assert_called_once()

            mock_dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lifespan_starts_and_cancels_purge_loop(self) -> None:
        from access_guard.main import lifespan

        started = asyncio.Event()

        async def fake_loop(interval: int) -> None:
            assert interval == 120
            started.set()
            await asyncio.sleep(3600)

        with (
            patch(
                "access_guard.main.get_settings",
                return_value=_settings(notification_purge_enabled=True, notification_purge_interval=120),
            ),
            patch("access_guard.main.setup_logging"),
            patch("access_guard.main.init_engine"),
            patch("access_guard.main.dispose_engine", new_callable=AsyncMock) as mock_dispose,
            patch("access_guard.services.notification_service.notification_purge_loop", fake_loop),
        ):
            async with lifespan(AsyncMock()):
                await asyncio.wait_for(started.wait(), timeout=1)

            mock_dispose.assert_awaited_once()
