"""Mounts every v1 router under the API prefix and installs HTTP middleware."""

from fastapi import APIRouter, FastAPI

from access_guard.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware, setup_cors
from access_guard.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """All v1 routes, including the ``/ws`` push socket, under ``settings.api_v1_prefix``."""
    from access_guard.api.v1.access_logs import access_logs_router
    from access_guard.api.v1.auth import auth_router
    from access_guard.api.v1.deliveries import deliveries_router
    from access_guard.api.v1.guest_codes import guest_codes_router
    from access_guard.api.v1.guest_visits import guest_visits_router
    from access_guard.api.v1.notifications import notifications_router
    from access_guard.api.v1.realtime import realtime_router
    from access_guard.api.v1.residents import residents_router
    from access_guard.api.v1.users import users_router

    api = APIRouter(prefix=settings.api_v1_prefix)
    for router in (
        auth_router,
        users_router,
        residents_router,
        guest_codes_router,
        guest_visits_router,
        deliveries_router,
        access_logs_router,
        notifications_router,
        realtime_router,
    ):
        api.include_router(router)
    return api


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install middleware; the rate limiter is added last so it runs first."""
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        trusted_proxy_headers=settings.trusted_proxy_header_list,
    )
