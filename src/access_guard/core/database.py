"""Async engine and session lifecycle.

One engine per process: the API creates it in its lifespan, CLI commands
through :func:`standalone_session`. PostgreSQL (asyncpg) runs behind a
connection pool; SQLite (aiosqlite) serves local runs and tests, with an
in-memory database pinned to a single shared connection.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(database_url: str, schema: str | None) -> dict[str, Any]:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # every session must see the same in-memory database
        if url.database in (None, "", ":memory:"):
            return {"poolclass": StaticPool}
        return {}

    options: dict[str, Any] = {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True}
    if schema is not None:
        options["connect_args"] = {"server_settings": {"search_path": f"{schema},public"}}
    return options


def init_engine(database_url: str, *, schema: str | None = None, echo: bool = False) -> AsyncEngine:
    """Create the process engine and its session factory.

    Args:
        database_url: ``postgresql+asyncpg://...`` or ``sqlite+aiosqlite://...``.
        schema: PostgreSQL schema searched before ``public``; ignored on SQLite.
        echo: Log emitted SQL.

    Returns:
        The new engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(database_url, echo=echo, **_engine_options(database_url, schema))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process engine.

    Raises:
        RuntimeError: If :func:`init_engine` has not run.
    """
    if _session_factory is None:
        msg = "Database engine not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def standalone_session(database_url: str, *, schema: str | None = None) -> AsyncGenerator[AsyncSession]:
    """Engine plus a single session for one-shot processes such as CLI commands."""
    init_engine(database_url, schema=schema)
    try:
        async with get_session_factory()() as session:
            yield session
    finally:
        await dispose_engine()
