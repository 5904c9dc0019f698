"""Process-wide real-time hub accessor."""

from access_guard.lib.realtime import ConnectionHub

_hub: ConnectionHub | None = None


def get_connection_hub() -> ConnectionHub:
    """Return the shared hub, creating it on first use."""
    global _hub  # noqa: PLW0603
    if _hub is None:
        _hub = ConnectionHub()
    return _hub


def reset_connection_hub() -> None:
    """Drop the shared hub (used on shutdown and in tests)."""
    global _hub  # noqa: PLW0603
    _hub = None
