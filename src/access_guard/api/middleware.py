"""HTTP middleware: CORS for the web client, security headers, per-IP rate limit."""

import math
import time
from collections import defaultdict, deque
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from access_guard.core.config import Settings
from access_guard.schemas.common import ErrorResponse

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


def get_client_ip(request: Request, trusted_headers: list[str] | None = None) -> str:
    """Best guess at the caller's address.

    The first non-empty header in ``trusted_headers`` wins; for
    ``X-Forwarded-For`` that is its leftmost entry. Without a usable header
    the socket peer is used, and ``"unknown"`` when there is none.
    """
    if trusted_headers is None:
        trusted_headers = ["X-Forwarded-For", "X-Real-IP"]

    for header in trusted_headers:
        value = request.headers.get(header, "").strip()
        if value:
            return value.split(",")[0].strip() if header.lower() == "x-forwarded-for" else value

    return request.client.host if request.client else "unknown"


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the gate/resident web client plus any extra configured origins."""
    options: dict[str, Any] = {"allow_credentials": True, "allow_methods": ["*"], "allow_headers": ["*"]}
    if settings.cors_origin_list:
        options["allow_origins"] = settings.cors_origin_list
    if settings.cors_origin_regex.strip():
        options["allow_origin_regex"] = settings.cors_origin_regex.strip()
    app.add_middleware(CORSMiddleware, **options)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client IP, held in process memory.

    Over the limit the caller gets a 429 error envelope with ``Retry-After``
    set to the seconds until its oldest counted request leaves the window.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 900,
        trusted_proxy_headers: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.trusted_proxy_headers = trusted_proxy_headers
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = get_client_ip(request, self.trusted_proxy_headers)
        now = time.time()
        hits = self._hits[client_ip]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.max_requests:
            logger.warning("Rate limit exceeded for {} on {}", client_ip, request.url.path)
            retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
            return JSONResponse(
                status_code=429,
                content=ErrorResponse(error=RATE_LIMIT_MESSAGE).model_dump(exclude_none=True),
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        return await call_next(request)
