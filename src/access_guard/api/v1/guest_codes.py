"""Guest code API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, require_role
from access_guard.core.permissions import RESIDENT, SECURITY, SUPER_ADMIN
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse, PaginationMeta, PaginationParams
from access_guard.schemas.guest_code import (
    GuestCodeCreateRequest,
    GuestCodeResponse,
    VerifyRequest,
    VerifyResponse,
)
from access_guard.services import guest_code_service
from access_guard.services.resident_service import get_resident_for_user

guest_codes_router = APIRouter(prefix="/guest-codes", tags=["guest-codes"])


@guest_codes_router.get("", response_model=ApiResponse[list[GuestCodeResponse]])
async def list_guest_codes(
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    code_status: str | None = Query(None, alias="status", description="Filter by reported status"),
) -> ApiResponse:
    """List guest codes, newest first. Residents only see their own."""
    codes, total = await guest_code_service.list_codes(
        session,
        requester=current_user,
        status=code_status,
        page=pagination.page,
        page_size=pagination.limit,
    )
    return ApiResponse(
        data=[GuestCodeResponse.model_validate(c) for c in codes],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@guest_codes_router.post("", response_model=ApiResponse[GuestCodeResponse], status_code=201)
async def create_guest_code(
    request: GuestCodeCreateRequest,
    current_user: Annotated[User, Depends(require_role(RESIDENT))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Issue a single-use guest code for the calling resident."""
    resident = await get_resident_for_user(session, current_user.id)
    guest_code = await guest_code_service.issue_code(
        session,
        resident,
        guest_name=request.guest_name,
        code_type=request.code_type,
        valid_until=request.valid_until,
        purpose=request.purpose,
        notes=request.notes,
    )
    return ApiResponse(data=GuestCodeResponse.model_validate(guest_code))


@guest_codes_router.post("/verify", response_model=ApiResponse[VerifyResponse])
async def verify_guest_code(
    request: VerifyRequest,
    _current_user: Annotated[User, Depends(require_role(SECURITY, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Verify and consume a code presented at the gate."""
    result = await guest_code_service.verify_code(session, request.code, access_point=request.access_point)
    return ApiResponse(data=VerifyResponse.model_validate(result))


@guest_codes_router.put("/{code_id}/revoke", response_model=ApiResponse[GuestCodeResponse])
async def revoke_guest_code(
    code_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Revoke a code (owning resident or admin tier)."""
    guest_code = await guest_code_service.revoke_code(session, code_id, requester=current_user)
    return ApiResponse(data=GuestCodeResponse.model_validate(guest_code))
