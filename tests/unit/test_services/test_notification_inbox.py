"""Tests for the notification inbox: delivery, read state, expiry and purge."""

import uuid
from collections.abc import Awaitable, Callable
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import NotFoundError
from access_guard.lib.realtime import ConnectionHub, user_room
from access_guard.models.base import utcnow
from access_guard.models.notification import Notification
from access_guard.models.user import User
from access_guard.services import notification_service


async def _notify(session: AsyncSession, user: User, hub: ConnectionHub, **kwargs) -> Notification:
    return await notification_service.notify(
        session,
        user_id=user.id,
        type=kwargs.pop("type", "info"),
        title=kwargs.pop("title", "Water outage"),
        message=kwargs.pop("message", "Block A water off 10:00-12:00"),
        hub=hub,
        **kwargs,
    )


class TestNotify:
    @pytest.mark.asyncio
    async def test_persists_then_pushes_to_user_room(
        self,
        async_session: AsyncSession,
        resident_user: User,
        hub: ConnectionHub,
        join_socket: Callable[[str], Awaitable[AsyncMock]],
    ) -> None:
        socket = await join_socket(user_room(resident_user.id))

        notification = await _notify(async_session, resident_user, hub, priority="high", data={"event_type": "outage"})

        assert notification.read is False
        assert notification.read_at is None
        assert notification.priority == "high"
        frame = socket.send_json.await_args.args[0]
        assert frame["event"] == "notification"
        assert frame["data"]["id"] == str(notification.id)
        assert frame["data"]["data"] == {"event_type": "outage"}

    @pytest.mark.asyncio
    async def test_push_without_listeners(self, hub: ConnectionHub) -> None:
        assert await notification_service.push(hub, "user-nobody", "notification", {}) == 0

    @pytest.mark.asyncio
    async def test_push_failure_swallowed(self) -> None:
        hub = AsyncMock(spec=ConnectionHub)
        hub.emit.side_effect = RuntimeError("boom")
        assert await notification_service.push(hub, "security-room", "guest-arrival", {}) == 0

    @pytest.mark.asyncio
    async def test_push_defaults_to_process_hub(self) -> None:
        process_hub = AsyncMock(spec=ConnectionHub)
        process_hub.emit.return_value = 2
        with patch("access_guard.services.notification_service.get_connection_hub", return_value=process_hub):
            assert await notification_service.push(None, "security-room", "guest-arrival", {"a": 1}) == 2
        process_hub.emit.assert_awaited_once_with("security-room", "guest-arrival", {"a": 1})


class TestReadState:
    @pytest.mark.asyncio
    async def test_mark_read_is_idempotent(
        self, async_session: AsyncSession, resident_user: User, hub: ConnectionHub
    ) -> None:
        notification = await _notify(async_session, resident_user, hub)

        first = await notification_service.mark_read(async_session, notification.id, resident_user.id)
        read_at = first.read_at
        assert first.read is True
        assert read_at is not None

        second = await notification_service.mark_read(async_session, notification.id, resident_user.id)
        assert second.read_at == read_at

    @pytest.mark.asyncio
    async def test_mark_all_read_counts(
        self, async_session: AsyncSession, resident_user: User, other_resident_user: User, hub: ConnectionHub
    ) -> None:
        for _ in range(3):
            await _notify(async_session, resident_user, hub)
        await _notify(async_session, other_resident_user, hub)

        assert await notification_service.unread_count(async_session, resident_user.id) == 3
        assert await notification_service.mark_all_read(async_session, resident_user.id) == 3
        assert await notification_service.mark_all_read(async_session, resident_user.id) == 0
        assert await notification_service.unread_count(async_session, resident_user.id) == 0
        assert await notification_service.unread_count(async_session, other_resident_user.id) == 1

    @pytest.mark.asyncio
    async def test_cannot_touch_another_users_notification(
        self, async_session: AsyncSession, resident_user: User, other_resident_user: User, hub: ConnectionHub
    ) -> None:
        notification = await _notify(async_session, resident_user, hub)

        with pytest.raises(NotFoundError, match="Notification not found"):
            await notification_service.mark_read(async_session, notification.id, other_resident_user.id)
        with pytest.raises(NotFoundError):
            await notification_service.delete_notification(async_session, notification.id, other_resident_user.id)

    @pytest.mark.asyncio
    async def test_delete(self, async_session: AsyncSession, resident_user: User, hub: ConnectionHub) -> None:
        notification = await _notify(async_session, resident_user, hub)
        await notification_service.delete_notification(async_session, notification.id, resident_user.id)
        assert await notification_service.list_notifications(async_session, resident_user.id) == []

        with pytest.raises(NotFoundError):
            await notification_service.delete_notification(async_session, uuid.uuid4(), resident_user.id)


class TestExpiry:
    @pytest.mark.asyncio
    async def test_expired_rows_are_invisible(
        self, async_session: AsyncSession, resident_user: User, hub: ConnectionHub
    ) -> None:
        live = await _notify(async_session, resident_user, hub, expires_at=utcnow() + timedelta(days=1))
        stale = await _notify(async_session, resident_user, hub, expires_at=utcnow() - timedelta(minutes=1))

        listed = await notification_service.list_notifications(async_session, resident_user.id)
        assert [n.id for n in listed] == [live.id]
        assert await notification_service.unread_count(async_session, resident_user.id) == 1
        with pytest.raises(NotFoundError):
            await notification_service.mark_read(async_session, stale.id, resident_user.id)
        assert await notification_service.mark_all_read(async_session, resident_user.id) == 1

    @pytest.mark.asyncio
    async def test_list_newest_first_with_limit(
        self, async_session: AsyncSession, resident_user: User, hub: ConnectionHub
    ) -> None:
        created = [await _notify(async_session, resident_user, hub, title=f"Notice {i}") for i in range(3)]

        listed = await notification_service.list_notifications(async_session, resident_user.id, limit=2)
        assert [n.id for n in listed] == [created[2].id, created[1].id]

    @pytest.mark.asyncio
    async def test_purge_removes_only_expired(
        self, async_session: AsyncSession, resident_user: User, hub: ConnectionHub
    ) -> None:
        await _notify(async_session, resident_user, hub)
        await _notify(async_session, resident_user, hub, expires_at=utcnow() + timedelta(days=1))
        await _notify(async_session, resident_user, hub, expires_at=utcnow() - timedelta(seconds=5))

        assert await notification_service.purge_expired_notifications(async_session) == 1
        assert await notification_service.purge_expired_notifications(async_session) == 0
        remaining = (await async_session.execute(select(func.count(Notification.id)))).scalar_one()
        assert remaining == 2
