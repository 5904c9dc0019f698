"""Notification inbox API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, get_hub, require_role
from access_guard.core.errors import NotFoundError
from access_guard.core.permissions import ADMIN, SUPER_ADMIN
from access_guard.lib.realtime import ConnectionHub
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse, CountResponse
from access_guard.schemas.notification import NotificationCreateRequest, NotificationResponse
from access_guard.services import notification_service

notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])

CurrentUser = Annotated[User, Depends(get_current_user)]


@notifications_router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_notifications(
    current_user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    limit: int = Query(50, ge=1, le=100),
) -> ApiResponse:
    """The caller's notifications, newest first."""
    notifications = await notification_service.list_notifications(session, current_user.id, limit=limit)
    return ApiResponse(data=[NotificationResponse.model_validate(n) for n in notifications])


@notifications_router.post("", response_model=ApiResponse[NotificationResponse], status_code=201)
async def create_notification(
    request: NotificationCreateRequest,
    _current_user: Annotated[User, Depends(require_role(ADMIN, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    hub: Annotated[ConnectionHub, Depends(get_hub)],
) -> ApiResponse:
    """Send a notification to a user (admin tier)."""
    if await session.get(User, request.user_id) is None:
        msg = "User not found"
        raise NotFoundError(msg)
    notification = await notification_service.notify(
        session,
        user_id=request.user_id,
        type=request.type,
        title=request.title,
        message=request.message,
        data=request.data,
        priority=request.priority,
        expires_at=request.expires_at,
        hub=hub,
    )
    return ApiResponse(data=NotificationResponse.model_validate(notification))


@notifications_router.get("/unread-count", response_model=ApiResponse[CountResponse])
async def get_unread_count(
    current_user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Number of unread notifications."""
    count = await notification_service.unread_count(session, current_user.id)
    return ApiResponse(data=CountResponse(count=count))


@notifications_router.put("/mark-all-read", response_model=ApiResponse[CountResponse])
async def mark_all_read(
    current_user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Mark every unread notification read."""
    count = await notification_service.mark_all_read(session, current_user.id)
    return ApiResponse(data=CountResponse(count=count), message=f"Marked {count} notifications as read")


@notifications_router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Mark one notification read."""
    notification = await notification_service.mark_read(session, notification_id, current_user.id)
    return ApiResponse(data=NotificationResponse.model_validate(notification))


@notifications_router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Delete one of the caller's notifications."""
    await notification_service.delete_notification(session, notification_id, current_user.id)
    return ApiResponse(message="Notification deleted successfully")
