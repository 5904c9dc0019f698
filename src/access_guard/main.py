"""ASGI entry point: ``create_app()`` builds the API, ``lifespan`` owns process resources.

Startup configures logging, opens the database engine and (unless disabled)
starts the expired-notification purge loop. Shutdown stops the loop, drops
every real-time connection and disposes the engine.
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from access_guard import __version__
from access_guard.api.exception_handlers import register_exception_handlers
from access_guard.core.config import Settings, get_settings
from access_guard.core.database import dispose_engine, init_engine
from access_guard.core.logging import setup_logging
from access_guard.core.realtime import reset_connection_hub

OPENAPI_TAGS = [
    {"name": "auth", "description": "Login, token refresh, health"},
    {"name": "users", "description": "Account administration"},
    {"name": "residents", "description": "Resident profiles"},
    {"name": "guest-codes", "description": "Issue, verify and revoke guest codes"},
    {"name": "guest-visits", "description": "Visit check-in and check-out"},
    {"name": "deliveries", "description": "Delivery authorization and hand-over"},
    {"name": "access-logs", "description": "Gate event log and statistics"},
    {"name": "notifications", "description": "Per-user notification inbox"},
    {"name": "realtime", "description": "WebSocket push channel"},
]


def _start_purge_loop(settings: Settings) -> asyncio.Task | None:
    if not settings.notification_purge_enabled:
        return None
    from access_guard.services.notification_service import notification_purge_loop

    return asyncio.create_task(notification_purge_loop(settings.notification_purge_interval))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    purge_task = _start_purge_loop(settings)
    logger.info("AccessGuard API {} started ({})", __version__, settings.environment)

    yield

    if purge_task is not None:
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    reset_connection_hub()
    await dispose_engine()
    logger.info("AccessGuard API stopped")


def create_app() -> FastAPI:
    """Build the API with middleware, error envelopes and all v1 routes."""
    from access_guard.api.router import create_router, setup_middleware

    settings = get_settings()
    app = FastAPI(
        title="AccessGuard API",
        description="Residential community access control: guest codes, visits, deliveries and access logs",
        version=__version__,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    setup_middleware(app, settings)
    app.include_router(create_router(settings))
    return app
