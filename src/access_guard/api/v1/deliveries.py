"""Delivery API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, get_hub, require_role
from access_guard.core.permissions import RESIDENT, SECURITY, SUPER_ADMIN
from access_guard.lib.realtime import ConnectionHub
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse
from access_guard.schemas.delivery import DeliveryCreateRequest, DeliveryResponse, DeliveryStatusRequest
from access_guard.services import delivery_service
from access_guard.services.resident_service import get_resident_for_user

deliveries_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@deliveries_router.get("", response_model=ApiResponse[list[DeliveryResponse]])
async def list_deliveries(
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """List deliveries. Residents only see their own."""
    deliveries = await delivery_service.list_deliveries(session, requester=current_user)
    return ApiResponse(data=[DeliveryResponse.model_validate(d) for d in deliveries])


@deliveries_router.get("/pending", response_model=ApiResponse[list[DeliveryResponse]])
async def list_pending_deliveries(
    _current_user: Annotated[User, Depends(require_role(SECURITY, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Authorized deliveries whose expected date has passed."""
    deliveries = await delivery_service.list_pending(session)
    return ApiResponse(data=[DeliveryResponse.model_validate(d) for d in deliveries])


@deliveries_router.post("", response_model=ApiResponse[DeliveryResponse], status_code=201)
async def create_delivery(
    request: DeliveryCreateRequest,
    current_user: Annotated[User, Depends(require_role(RESIDENT))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    hub: Annotated[ConnectionHub, Depends(get_hub)],
) -> ApiResponse:
    """Authorize an expected delivery for the calling resident."""
    resident = await get_resident_for_user(session, current_user.id)
    delivery = await delivery_service.authorize_delivery(
        session,
        resident,
        company=request.company,
        expected_date=request.expected_date,
        authorized_by=current_user,
        tracking_number=request.tracking_number,
        notes=request.notes,
        items=[item.model_dump() for item in request.items],
        delivery_person=request.delivery_person.model_dump() if request.delivery_person is not None else None,
        hub=hub,
    )
    return ApiResponse(data=DeliveryResponse.model_validate(delivery))


@deliveries_router.put("/{delivery_id}/status", response_model=ApiResponse[DeliveryResponse])
async def update_delivery_status(
    delivery_id: uuid.UUID,
    request: DeliveryStatusRequest,
    _current_user: Annotated[User, Depends(require_role(SECURITY, SUPER_ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    hub: Annotated[ConnectionHub, Depends(get_hub)],
) -> ApiResponse:
    """Set a delivery's status (gate staff)."""
    delivery = await delivery_service.set_status(
        session,
        delivery_id,
        request.status,
        access_point=request.access_point,
        hub=hub,
    )
    return ApiResponse(data=DeliveryResponse.model_validate(delivery))
