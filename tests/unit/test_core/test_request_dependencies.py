"""Tests for FastAPI dependency injection module."""

import uuid
from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.config import Settings
from access_guard.core.dependencies import get_current_user, get_hub, require_role
from access_guard.core.realtime import get_connection_hub, reset_connection_hub
from access_guard.core.security import create_refresh_token
from access_guard.models.user import User


class TestRequireRole:
    """Tests for require_role factory."""

    @pytest.mark.asyncio
    async def test_allowed_role_passes(self) -> None:
        checker = require_role("security", "super_admin")
        user = MagicMock()
        user.role = "security"

        assert await checker(current_user=user) is user

    @pytest.mark.asyncio
    async def test_insufficient_role_raises_403(self) -> None:
        checker = require_role("admin", "super_admin")
        user = MagicMock()
        user.role = "resident"

        with pytest.raises(HTTPException) as exc_info:
            await checker(current_user=user)
        assert exc_info.value.status_code == 403
        assert "resident" in str(exc_info.value.detail)


class TestGetCurrentUser:
    """Tests for get_current_user against a real session."""

    @pytest.mark.asyncio
    async def test_valid_token(
        self,
        async_session: AsyncSession,
        settings: Settings,
        security_user: User,
        token_for: Callable[[User], str],
    ) -> None:
        user = await get_current_user(token_for(security_user), async_session, settings)
        assert user.id == security_user.id

    @pytest.mark.asyncio
    async def test_garbage_token_401(self, async_session: AsyncSession, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("not-a-jwt", async_session, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authorized to access this route"

    @pytest.mark.asyncio
    async def test_refresh_token_rejected(
        self, async_session: AsyncSession, settings: Settings, security_user: User
    ) -> None:
        token = create_refresh_token(str(security_user.id), settings.jwt_secret_key)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token, async_session, settings)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user_401(
        self, async_session: AsyncSession, settings: Settings, token_for: Callable[[User], str]
    ) -> None:
        ghost = User(id=uuid.uuid4(), role="admin")
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token_for(ghost), async_session, settings)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_suspended_user_401(
        self,
        async_session: AsyncSession,
        settings: Settings,
        make_user: Callable,
        token_for: Callable[[User], str],
    ) -> None:
        suspended = await make_user("security", status="suspended")
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token_for(suspended), async_session, settings)
        assert exc_info.value.status_code == 401


class TestGetHub:
    def test_returns_process_hub(self) -> None:
        reset_connection_hub()
        try:
            assert get_hub() is get_connection_hub()
            assert get_hub() is get_hub()
        finally:
            reset_connection_hub()

    def test_reset_creates_new_hub(self) -> None:
        with patch("access_guard.core.realtime._hub", None):
            first = get_connection_hub()
            reset_connection_hub()
            assert get_connection_hub() is not first
        reset_connection_hub()
