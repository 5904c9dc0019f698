"""Resident profile API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, require_role
from access_guard.core.permissions import ADMIN, RESIDENT, SECURITY, SUPER_ADMIN
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse, PaginationMeta, PaginationParams
from access_guard.schemas.resident import ResidentCreateRequest, ResidentResponse, ResidentUpdateRequest
from access_guard.services import resident_service

residents_router = APIRouter(prefix="/residents", tags=["residents"])


@residents_router.get("", response_model=ApiResponse[list[ResidentResponse]])
async def list_residents(
    _current_user: Annotated[User, Depends(require_role(ADMIN, SECURITY, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    block: str | None = Query(None, description="Filter by block"),
    resident_status: str | None = Query(None, alias="status", description="Filter by status"),
) -> ApiResponse:
    """List resident profiles."""
    residents, total = await resident_service.list_residents(
        session,
        block=block,
        status=resident_status,
        page=pagination.page,
        page_size=pagination.limit,
    )
    return ApiResponse(
        data=[ResidentResponse.model_validate(r) for r in residents],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@residents_router.post("", response_model=ApiResponse[ResidentResponse], status_code=201)
async def create_resident(
    request: ResidentCreateRequest,
    _current_user: Annotated[User, Depends(require_role(ADMIN, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Attach a resident profile to a resident account (admin tier)."""
    resident = await resident_service.create_resident(session, request)
    return ApiResponse(data=ResidentResponse.model_validate(resident))


@residents_router.get("/me", response_model=ApiResponse[ResidentResponse])
async def get_my_profile(
    current_user: Annotated[User, Depends(require_role(RESIDENT))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """The calling resident's own profile."""
    resident = await resident_service.get_resident_for_user(session, current_user.id)
    return ApiResponse(data=ResidentResponse.model_validate(resident))


@residents_router.get("/{resident_id}", response_model=ApiResponse[ResidentResponse])
async def get_resident(
    resident_id: uuid.UUID,
    _current_user: Annotated[User, Depends(require_role(ADMIN, SECURITY, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Get a resident profile by ID."""
    resident = await resident_service.get_resident(session, resident_id)
    return ApiResponse(data=ResidentResponse.model_validate(resident))


@residents_router.put("/{resident_id}", response_model=ApiResponse[ResidentResponse])
async def update_resident(
    resident_id: uuid.UUID,
    request: ResidentUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Update a profile: admin tier any field, the owner only the personal fields."""
    resident = await resident_service.get_resident(session, resident_id)
    updated = await resident_service.update_resident(
        session, resident, request.model_dump(exclude_unset=True), actor=current_user
    )
    return ApiResponse(data=ResidentResponse.model_validate(updated))
