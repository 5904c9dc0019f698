"""Real-time push library — room-based WebSocket fan-out.

Public API:
    - ``ConnectionHub``: Room membership and best-effort ``emit``
    - ``user_room`` / ``resident_room``: Room name builders
    - ``SECURITY_ROOM``: Shared room for gate staff
"""

from access_guard.lib.realtime.hub import SECURITY_ROOM, ConnectionHub, resident_room, user_room

__all__ = [
    "SECURITY_ROOM",
    "ConnectionHub",
    "resident_room",
    "user_room",
]
