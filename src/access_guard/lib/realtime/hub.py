"""In-process room hub for WebSocket push.

Sockets join named rooms; :meth:`ConnectionHub.emit` sends one JSON frame
``{"event": ..., "data": ...}`` to every socket in a room. Delivery is
best-effort: a socket that fails to receive is dropped and the failure is
logged, never raised to the caller.
"""

import asyncio
from typing import Any

from fastapi.encoders import jsonable_encoder
from loguru import logger
from starlette.websockets import WebSocket

SECURITY_ROOM = "security-room"


def user_room(user_id: Any) -> str:
    """Room carrying a single user's notifications."""
    return f"user-{user_id}"


def resident_room(resident_id: Any) -> str:
    """Room carrying events for one resident profile."""
    return f"resident-{resident_id}"


class ConnectionHub:
    """Tracks room membership for connected sockets."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def join(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._rooms.setdefault(room, set()).add(websocket)
        logger.debug("Socket joined room {}", room)

    async def leave(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            members.discard(websocket)
            if not members:
                del self._rooms[room]

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove ``websocket`` from every room it joined."""
        async with self._lock:
            for room in [name for name, members in self._rooms.items() if websocket in members]:
                self._rooms[room].discard(websocket)
                if not self._rooms[room]:
                    del self._rooms[room]

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    async def emit(self, room: str, event: str, data: Any) -> int:
        """Send ``event`` to every socket in ``room``.

        Args:
            room: Target room name.
            event: Event name, e.g. ``guest-arrival``.
            data: JSON-serializable payload (UUIDs and datetimes are encoded).

        Returns:
            Number of sockets the frame was delivered to.
        """
        async with self._lock:
            members = list(self._rooms.get(room, ()))
        if not members:
            return 0

        frame = {"event": event, "data": jsonable_encoder(data)}
        delivered = 0
        dead: list[WebSocket] = []
        for websocket in members:
            try:
                await websocket.send_json(frame)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.warning("Dropping socket in room {} after send failure: {}", room, exc)
                dead.append(websocket)

        for websocket in dead:
            await self.disconnect(websocket)
        return delivered
