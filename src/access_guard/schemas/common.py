"""Common Pydantic v2 schemas shared across the API.

Every JSON endpoint except ``/auth/login`` wraps its payload in
:class:`ApiResponse`; failures use :class:`ErrorResponse`.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Query parameters for paginated endpoints."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    limit: int = Field(default=50, ge=1, le=100, description="Items per page")


class PaginationMeta(BaseModel):
    """Pagination metadata included in paginated responses."""

    current: int = Field(description="Current page number")
    pages: int = Field(description="Total number of pages")
    total: int = Field(description="Total number of items")

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "PaginationMeta":
        return cls(current=page, pages=math.ceil(total / page_size) if page_size else 0, total=total)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    data: T | None = None
    message: str | None = None
    pagination: PaginationMeta | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    success: bool = False
    error: str = Field(description="Human-readable error message")
    errors: list[dict] | None = Field(default=None, description="Detailed validation errors")


class CountResponse(BaseModel):
    """A bare count, e.g. unread notifications."""

    count: int
