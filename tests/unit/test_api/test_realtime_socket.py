"""Tests for the real-time WebSocket endpoint and room authorization."""

import uuid
from collections.abc import Awaitable, Callable, Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.websockets import WebSocketDisconnect

from access_guard.api.v1.realtime import _resident_room_for, realtime_router
from access_guard.core.realtime import get_connection_hub, reset_connection_hub
from access_guard.lib.realtime import SECURITY_ROOM, resident_room, user_room
from access_guard.models.user import User


def _make_mock_user(role: str) -> MagicMock:
    user = MagicMock()
    user.id = uuid.uuid4()
    user.role = role
    return user


@pytest.fixture
def client() -> Iterator[TestClient]:
    reset_connection_hub()
    app = FastAPI()
    app.include_router(realtime_router)
    yield TestClient(app)
    reset_connection_hub()


class TestConnect:
    def test_missing_token_rejected(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc_info, client.websocket_connect("/ws"):
            pass
        assert exc_info.value.code == 1008

    def test_invalid_token_rejected(self, client: TestClient) -> None:
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=None)),
            pytest.raises(WebSocketDisconnect) as exc_info,
            client.websocket_connect("/ws?token=bogus"),
        ):
            pass
        assert exc_info.value.code == 1008

    def test_connect_joins_user_room(self, client: TestClient) -> None:
        user = _make_mock_user("resident")
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_json({"event": "ping"})
            assert ws.receive_json() == {"event": "error", "data": {"message": "Unknown event: ping"}}
            assert get_connection_hub().room_size(user_room(user.id)) == 1


class TestRoomJoins:
    def test_security_joins_security_room(self, client: TestClient) -> None:
        user = _make_mock_user("security")
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_json({"event": "join-security-room"})
            assert ws.receive_json() == {"event": "joined", "data": {"room": SECURITY_ROOM}}
            assert get_connection_hub().room_size(SECURITY_ROOM) == 1

    def test_resident_refused_security_room(self, client: TestClient) -> None:
        user = _make_mock_user("resident")
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_json({"event": "join-security-room"})
            assert ws.receive_json() == {"event": "error", "data": {"message": "Not authorized to join room"}}
            assert get_connection_hub().room_size(SECURITY_ROOM) == 0

    def test_staff_joins_any_resident_room(self, client: TestClient) -> None:
        user = _make_mock_user("admin")
        resident_id = uuid.uuid4()
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_json({"event": "join-resident-room", "data": {"resident_id": str(resident_id)}})
            assert ws.receive_json() == {"event": "joined", "data": {"room": resident_room(resident_id)}}

    def test_malformed_payload(self, client: TestClient) -> None:
        user = _make_mock_user("admin")
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_json({"event": "join-resident-room", "data": "not-a-dict"})
            assert ws.receive_json()["event"] == "error"
            ws.send_json(["not", "an", "object"])
            assert ws.receive_json() == {"event": "error", "data": {"message": "Unknown event: None"}}

    def test_non_json_text_keeps_socket_open(self, client: TestClient) -> None:
        user = _make_mock_user("security")
        with (
            patch("access_guard.api.v1.realtime._authenticate", AsyncMock(return_value=user)),
            client.websocket_connect("/ws?token=ok") as ws,
        ):
            ws.send_text("{not json")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Malformed message"}}
            ws.send_json({"event": "join-security-room"})
            assert ws.receive_json() == {"event": "joined", "data": {"room": SECURITY_ROOM}}


class TestResidentRoomFor:
    @pytest.mark.asyncio
    async def test_resident_owns_profile(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        resident_user: User,
        other_resident_user: User,
    ) -> None:
        own_id = resident_user.resident_profile.id
        other_id = other_resident_user.resident_profile.id

        with patch("access_guard.api.v1.realtime.get_session_factory", return_value=session_factory):
            assert await _resident_room_for(resident_user, str(own_id)) == resident_room(own_id)
            assert await _resident_room_for(resident_user, str(other_id)) is None

    @pytest.mark.asyncio
    async def test_invalid_id(self, security_user: User) -> None:
        assert await _resident_room_for(security_user, "not-a-uuid") is None
        assert await _resident_room_for(security_user, None) is None

    @pytest.mark.asyncio
    async def test_staff_skip_lookup(self, make_user: Callable[..., Awaitable[User]]) -> None:
        guard = await make_user("security")
        resident_id = uuid.uuid4()
        with patch("access_guard.api.v1.realtime.get_session_factory") as factory:
            assert await _resident_room_for(guard, resident_id) == resident_room(resident_id)
        factory.assert_not_called()
