"""Guest visit API endpoints with the check-in/check-out workflow."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, get_hub, require_role
from access_guard.core.permissions import SECURITY, SUPER_ADMIN
from access_guard.lib.realtime import ConnectionHub
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse, PaginationMeta, PaginationParams
from access_guard.schemas.guest_visit import VisitActionRequest, VisitCreateRequest, VisitResponse
from access_guard.services import guest_visit_service

guest_visits_router = APIRouter(prefix="/guest-visits", tags=["guest-visits"])

GateStaff = Annotated[User, Depends(require_role(SECURITY, SUPER_ADMIN))]


# ---------------------------------------------------------------------------
# List endpoints (fixed-prefix routes FIRST)
# ---------------------------------------------------------------------------


@guest_visits_router.get("", response_model=ApiResponse[list[VisitResponse]])
async def list_visits(
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    resident_id: uuid.UUID | None = Query(None, description="Filter by resident (staff only)"),
    visit_status: str | None = Query(None, alias="status", description="Filter by status"),
) -> ApiResponse:
    """List visits by visit date, newest first. Residents only see their own."""
    visits, total = await guest_visit_service.list_visits(
        session,
        requester=current_user,
        resident_id=resident_id,
        status=visit_status,
        page=pagination.page,
        page_size=pagination.limit,
    )
    return ApiResponse(
        data=[VisitResponse.model_validate(v) for v in visits],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@guest_visits_router.get("/active", response_model=ApiResponse[list[VisitResponse]])
async def list_active_visits(
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Scheduled and arrived visits."""
    visits = await guest_visit_service.list_active_visits(session)
    return ApiResponse(data=[VisitResponse.model_validate(v) for v in visits])


@guest_visits_router.post("", response_model=ApiResponse[VisitResponse], status_code=201)
async def create_visit(
    request: VisitCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Book a visit against a guest code."""
    visit = await guest_visit_service.create_visit(
        session,
        guest_code_id=request.guest_code_id,
        guest_name=request.guest_name,
        purpose=request.purpose,
        vehicle_info=request.vehicle_info.model_dump() if request.vehicle_info is not None else None,
        number_of_guests=request.number_of_guests,
        notes=request.notes,
        requester=current_user,
    )
    return ApiResponse(data=VisitResponse.model_validate(visit))


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


@guest_visits_router.put("/{visit_id}/checkin", response_model=ApiResponse[VisitResponse])
async def check_in(
    visit_id: uuid.UUID,
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    hub: Annotated[ConnectionHub, Depends(get_hub)],
    request: VisitActionRequest | None = Body(None),
) -> ApiResponse:
    """Check a guest in; notifies the resident and the security room."""
    visit = await guest_visit_service.check_in(
        session,
        visit_id,
        security_notes=request.security_notes if request is not None else None,
        hub=hub,
    )
    return ApiResponse(data=VisitResponse.model_validate(visit))


@guest_visits_router.put("/{visit_id}/checkout", response_model=ApiResponse[VisitResponse])
async def check_out(
    visit_id: uuid.UUID,
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    request: VisitActionRequest | None = Body(None),
) -> ApiResponse:
    """Check a guest out."""
    visit = await guest_visit_service.check_out(
        session,
        visit_id,
        security_notes=request.security_notes if request is not None else None,
    )
    return ApiResponse(data=VisitResponse.model_validate(visit))


@guest_visits_router.put("/{visit_id}/cancel", response_model=ApiResponse[VisitResponse])
async def cancel_visit(
    visit_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Cancel a visit (owning resident or staff)."""
    visit = await guest_visit_service.cancel_visit(session, visit_id, requester=current_user)
    return ApiResponse(data=VisitResponse.model_validate(visit))
