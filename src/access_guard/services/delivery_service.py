"""Delivery service.

Residents authorize expected deliveries; gate staff settle them. Status
changes are unconstrained: any status may be set from any other.
"""

import uuid
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import NotFoundError, ValidationError
from access_guard.core.permissions import RESIDENT
from access_guard.lib.realtime import SECURITY_ROOM, ConnectionHub, resident_room
from access_guard.models.access_log import AccessMethod, AccessPoint, AccessResult
from access_guard.models.base import utcnow
from access_guard.models.delivery import Delivery, DeliveryStatus
from access_guard.models.resident import Resident
from access_guard.models.user import User
from access_guard.services import access_log_service, notification_service
from access_guard.services.resident_service import get_resident_for_user

DELIVERY_SCHEDULED_EVENT = "delivery-scheduled"
DELIVERY_UPDATED_EVENT = "delivery-updated"


async def _reload(session: AsyncSession, delivery_id: uuid.UUID) -> Delivery:
    result = await session.execute(
        select(Delivery).where(Delivery.id == delivery_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


def _event_payload(delivery: Delivery) -> dict[str, Any]:
    resident = delivery.resident
    return {
        "delivery_id": delivery.id,
        "resident_id": delivery.resident_id,
        "unit_number": resident.unit_number if resident is not None else None,
        "block": resident.block if resident is not None else None,
        "company": delivery.delivery_company,
        "tracking_number": delivery.tracking_number,
        "expected_date": delivery.expected_date,
        "status": delivery.status,
    }


async def authorize_delivery(
    session: AsyncSession,
    resident: Resident,
    *,
    company: str,
    expected_date: datetime,
    authorized_by: User,
    tracking_number: str | None = None,
    notes: str | None = None,
    items: list[dict[str, Any]] | None = None,
    delivery_person: dict[str, Any] | None = None,
    hub: ConnectionHub | None = None,
) -> Delivery:
    """Authorize an expected delivery for ``resident``.

    Notifies the resident's account and emits ``delivery-scheduled`` to the
    security room.

    Raises:
        ValidationError: If ``company`` or ``expected_date`` is missing.
    """
    if not company or expected_date is None:
        msg = "Company and expected date are required"
        raise ValidationError(msg)

    delivery = Delivery(
        resident_id=resident.id,
        delivery_company=company,
        tracking_number=tracking_number,
        authorized_by_id=authorized_by.id,
        expected_date=expected_date,
        notes=notes,
        items=items or [],
        delivery_person=delivery_person,
        status=DeliveryStatus.AUTHORIZED,
    )
    session.add(delivery)
    await session.commit()
    delivery = await _reload(session, delivery.id)
    logger.info("Delivery {} from {} authorized for resident {}", delivery.id, company, resident.id)

    await notification_service.notify_delivery_scheduled(
        session,
        user_id=resident.user_id,
        company=company,
        tracking_number=tracking_number,
        hub=hub,
    )
    await notification_service.push(hub, SECURITY_ROOM, DELIVERY_SCHEDULED_EVENT, _event_payload(delivery))
    return delivery


async def get_delivery(session: AsyncSession, delivery_id: uuid.UUID) -> Delivery:
    """Get a delivery by ID.

    Raises:
        NotFoundError: If no such delivery exists.
    """
    result = await session.execute(select(Delivery).where(Delivery.id == delivery_id))
    delivery = result.scalar_one_or_none()
    if delivery is None:
        msg = "Delivery not found"
        raise NotFoundError(msg)
    return delivery


async def set_status(
    session: AsyncSession,
    delivery_id: uuid.UUID,
    status: str,
    *,
    access_point: str = AccessPoint.DELIVERY_ENTRANCE,
    hub: ConnectionHub | None = None,
) -> Delivery:
    """Set a delivery's status.

    Entering ``delivered`` stamps ``delivered_at``, appends a delivery
    access-log row and notifies the resident's account.

    Raises:
        ValidationError: If ``status`` is not a delivery status.
        NotFoundError: If the delivery does not exist.
    """
    if status not in set(DeliveryStatus):
        msg = "Invalid status"
        raise ValidationError(msg)

    delivery = await get_delivery(session, delivery_id)
    previous = delivery.status
    delivery.status = status
    if status == DeliveryStatus.DELIVERED:
        delivery.delivered_at = utcnow()
    await session.commit()
    delivery = await _reload(session, delivery.id)
    logger.info("Delivery {} status {} -> {}", delivery.id, previous, status)

    if status == DeliveryStatus.DELIVERED:
        await access_log_service.log_delivery_access(
            session,
            delivery.id,
            AccessResult.SUCCESS,
            AccessMethod.MANUAL,
            details={"company": delivery.delivery_company, "tracking_number": delivery.tracking_number},
            access_point=access_point,
        )
        if delivery.resident is not None:
            await notification_service.notify_delivery_completed(
                session,
                user_id=delivery.resident.user_id,
                company=delivery.delivery_company,
                hub=hub,
            )

    await notification_service.push(
        hub, resident_room(delivery.resident_id), DELIVERY_UPDATED_EVENT, _event_payload(delivery)
    )
    return await _reload(session, delivery.id)


async def list_for_resident(session: AsyncSession, resident_id: uuid.UUID) -> list[Delivery]:
    """Deliveries for one resident, expected date descending."""
    result = await session.execute(
        select(Delivery).where(Delivery.resident_id == resident_id).order_by(Delivery.expected_date.desc())
    )
    return list(result.scalars().all())


async def list_deliveries(session: AsyncSession, *, requester: User) -> list[Delivery]:
    """Deliveries visible to ``requester``: residents see only their own.

    Raises:
        NotFoundError: If a resident requester has no profile.
    """
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        return await list_for_resident(session, resident.id)
    result = await session.execute(select(Delivery).order_by(Delivery.created_at.desc()))
    return list(result.scalars().all())


async def list_pending(session: AsyncSession) -> list[Delivery]:
    """Authorized deliveries whose expected date has passed, oldest first."""
    result = await session.execute(
        select(Delivery)
        .where(Delivery.status == DeliveryStatus.AUTHORIZED, Delivery.expected_date <= utcnow())
        .order_by(Delivery.expected_date)
    )
    return list(result.scalars().all())
