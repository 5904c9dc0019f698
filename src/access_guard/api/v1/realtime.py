"""WebSocket endpoint for real-time push.

Clients connect to ``/ws?token=<access JWT>`` and are placed in their own
``user-{id}`` room. Further rooms are joined by sending
``{"event": "join-resident-room", "data": {"resident_id": ...}}`` or
``{"event": "join-security-room"}``.
"""

import uuid
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from loguru import logger
from sqlalchemy import select

from access_guard.core.config import get_settings
from access_guard.core.database import get_session_factory
from access_guard.core.permissions import NON_RESIDENT_ROLES, RESIDENT, check_capability
from access_guard.core.realtime import get_connection_hub
from access_guard.lib.realtime import SECURITY_ROOM, resident_room, user_room
from access_guard.models.resident import Resident
from access_guard.models.user import User
from access_guard.services import auth_service

realtime_router = APIRouter(tags=["realtime"])

JOIN_RESIDENT_EVENT = "join-resident-room"
JOIN_SECURITY_EVENT = "join-security-room"


async def _authenticate(token: str) -> User | None:
    factory = get_session_factory()
    async with factory() as session:
        try:
            return await auth_service.get_user_from_token(session, token, get_settings())
        except ValueError:
            return None


async def _resident_room_for(user: User, raw_resident_id: Any) -> str | None:
    """Room name the user may join for ``raw_resident_id``, or None if not permitted."""
    try:
        resident_id = uuid.UUID(str(raw_resident_id))
    except ValueError:
        return None
    if user.role != RESIDENT:
        return resident_room(resident_id)

    factory = get_session_factory()
    async with factory() as session:
        owned = await session.execute(
            select(Resident.id).where(Resident.id == resident_id, Resident.user_id == user.id)
        )
        if owned.scalar_one_or_none() is None:
            return None
    return resident_room(resident_id)


@realtime_router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: str = Query("")) -> None:
    """Authenticated push channel."""
    user = await _authenticate(token) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub = get_connection_hub()
    await websocket.accept()
    await hub.join(websocket, user_room(user.id))
    logger.info("Real-time client connected for user {}", user.id)

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "data": {"message": "Malformed message"}})
                continue
            if not isinstance(message, dict):
                message = {}
            event = message.get("event")
            data = message.get("data")
            if not isinstance(data, dict):
                data = {}

            room: str | None = None
            if event == JOIN_RESIDENT_EVENT:
                room = await _resident_room_for(user, data.get("resident_id"))
            elif event == JOIN_SECURITY_EVENT:
                room = SECURITY_ROOM if check_capability(user.role, NON_RESIDENT_ROLES) else None
            else:
                await websocket.send_json({"event": "error", "data": {"message": f"Unknown event: {event}"}})
                continue

            if room is None:
                await websocket.send_json({"event": "error", "data": {"message": "Not authorized to join room"}})
                continue
            await hub.join(websocket, room)
            await websocket.send_json({"event": "joined", "data": {"room": room}})
    except WebSocketDisconnect:
        logger.info("Real-time client disconnected for user {}", user.id)
    finally:
        await hub.disconnect(websocket)
