"""Access log API endpoints (gate staff only)."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.api.middleware import get_client_ip
from access_guard.core.config import Settings, get_settings
from access_guard.core.dependencies import get_async_session, require_role
from access_guard.core.permissions import SECURITY, SUPER_ADMIN
from access_guard.models.user import User
from access_guard.schemas.access_log import AccessLogCreateRequest, AccessLogResponse, AccessStatisticsBucket
from access_guard.schemas.common import ApiResponse, PaginationMeta, PaginationParams
from access_guard.services import access_log_service

access_logs_router = APIRouter(prefix="/access-logs", tags=["access-logs"])

GateStaff = Annotated[User, Depends(require_role(SECURITY, SUPER_ADMIN))]


@access_logs_router.get("", response_model=ApiResponse[list[AccessLogResponse]])
async def list_access_logs(
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    start_date: datetime | None = Query(None, alias="startDate", description="Inclusive lower bound"),
    end_date: datetime | None = Query(None, alias="endDate", description="Inclusive upper bound"),
    result: str | None = Query(None, description="Filter by result"),
    method: str | None = Query(None, description="Filter by method"),
    access_point: str | None = Query(None, alias="accessPoint", description="Filter by access point"),
    user_id: uuid.UUID | None = Query(None, alias="userId", description="Filter by user"),
) -> ApiResponse:
    """Access logs newest first, with related-entity projections."""
    logs, total = await access_log_service.query_access_logs(
        session,
        start_time=start_date,
        end_time=end_date,
        result=result,
        method=method,
        access_point=access_point,
        user_id=user_id,
        page=pagination.page,
        page_size=pagination.limit,
    )
    return ApiResponse(
        data=[AccessLogResponse.model_validate(log) for log in logs],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@access_logs_router.get("/statistics", response_model=ApiResponse[list[AccessStatisticsBucket]])
async def access_statistics(
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
) -> ApiResponse:
    """Counts by result with a per-method, per-access-point breakdown."""
    buckets = await access_log_service.get_access_statistics(session, start_time=start_date, end_time=end_date)
    return ApiResponse(data=[AccessStatisticsBucket.model_validate(b) for b in buckets])


@access_logs_router.post("", response_model=ApiResponse[AccessLogResponse], status_code=201)
async def create_access_log(
    body: AccessLogCreateRequest,
    request: Request,
    _current_user: GateStaff,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse:
    """Record a manual gate event."""
    access_log = await access_log_service.record_access(
        session,
        result=body.result,
        method=body.method,
        access_point=body.access_point,
        user_id=body.user_id,
        guest_code_id=body.guest_code_id,
        visit_id=body.visit_id,
        delivery_id=body.delivery_id,
        details=body.details,
        security_notes=body.security_notes,
        ip_address=get_client_ip(request, settings.trusted_proxy_header_list),
        user_agent=request.headers.get("user-agent"),
    )
    access_log = await access_log_service.get_access_log(session, access_log.id)
    return ApiResponse(data=AccessLogResponse.model_validate(access_log))
