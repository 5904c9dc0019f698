"""Guest visit service — the scheduled/arrived/departed/cancelled state machine."""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import InvalidTransitionError, NotFoundError
from access_guard.core.permissions import NON_RESIDENT_ROLES, RESIDENT, require_capability
from access_guard.lib.realtime import SECURITY_ROOM, ConnectionHub, resident_room
from access_guard.models.access_log import AccessPoint, AccessResult
from access_guard.models.base import utcnow
from access_guard.models.guest_code import GuestCode
from access_guard.models.guest_visit import (
    ACTIVE_VISIT_STATUSES,
    CANCEL_FROM,
    CHECK_IN_FROM,
    CHECK_OUT_FROM,
    GuestVisit,
    VisitStatus,
)
from access_guard.models.user import User
from access_guard.services import access_log_service, notification_service
from access_guard.services.resident_service import get_resident_for_user

GUEST_ARRIVAL_EVENT = "guest-arrival"


async def _reload(session: AsyncSession, visit_id: uuid.UUID) -> GuestVisit:
    result = await session.execute(
        select(GuestVisit).where(GuestVisit.id == visit_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


def _transition(visit: GuestVisit, allowed_from: frozenset[str], target: VisitStatus, verb: str) -> None:
    if visit.status not in allowed_from:
        msg = f"Cannot {verb} a visit that is {visit.status}"
        raise InvalidTransitionError(msg)
    visit.status = target


async def get_visit(session: AsyncSession, visit_id: uuid.UUID) -> GuestVisit:
    """Get a visit by ID.

    Raises:
        NotFoundError: If no such visit exists.
    """
    result = await session.execute(select(GuestVisit).where(GuestVisit.id == visit_id))
    visit = result.scalar_one_or_none()
    if visit is None:
        msg = "Guest visit not found"
        raise NotFoundError(msg)
    return visit


async def create_visit(
    session: AsyncSession,
    *,
    guest_code_id: uuid.UUID,
    guest_name: str,
    requester: User,
    purpose: str | None = None,
    vehicle_info: dict[str, Any] | None = None,
    number_of_guests: int = 1,
    notes: str | None = None,
) -> GuestVisit:
    """Book a visit against an existing guest code.

    The resident reference is copied from the code and ``visit_date`` is now.

    Raises:
        NotFoundError: If the code does not exist, or a resident requester
            has no profile.
        ForbiddenError: If a resident books against another resident's code.
    """
    guest_code = await session.get(GuestCode, guest_code_id)
    if guest_code is None:
        msg = "Guest code not found"
        raise NotFoundError(msg)

    is_owner = False
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        is_owner = resident.id == guest_code.resident_id
    require_capability(requester.role, NON_RESIDENT_ROLES, is_owner=is_owner)

    visit = GuestVisit(
        resident_id=guest_code.resident_id,
        guest_code_id=guest_code.id,
        guest_name=guest_name,
        purpose=purpose,
        vehicle_info=vehicle_info,
        number_of_guests=number_of_guests,
        notes=notes,
        visit_date=utcnow(),
        status=VisitStatus.SCHEDULED,
    )
    session.add(visit)
    await session.commit()
    logger.info("Visit for {} scheduled against code {}", guest_name, guest_code.id)
    return await _reload(session, visit.id)


async def check_in(
    session: AsyncSession,
    visit_id: uuid.UUID,
    *,
    security_notes: str | None = None,
    hub: ConnectionHub | None = None,
) -> GuestVisit:
    """Mark a scheduled visit as arrived.

    Appends a guest access-log row, notifies the resident's account and
    emits ``guest-arrival`` to the resident's room and the security room.

    Raises:
        NotFoundError: If the visit does not exist.
        InvalidTransitionError: If the visit is not scheduled.
    """
    visit = await get_visit(session, visit_id)
    _transition(visit, CHECK_IN_FROM, VisitStatus.ARRIVED, "check in")
    visit.check_in_time = utcnow()
    if security_notes is not None:
        visit.security_notes = security_notes
    await session.commit()
    visit = await _reload(session, visit.id)
    logger.info("Guest {} checked in for visit {}", visit.guest_name, visit.id)

    guest_code = visit.guest_code
    await access_log_service.log_guest_access(
        session,
        guest_code.id,
        visit.id,
        AccessResult.SUCCESS,
        guest_code.code_type,
        details={"event": "check_in", "guest_name": visit.guest_name},
        access_point=AccessPoint.MAIN_GATE,
    )

    resident = visit.resident
    if resident is not None:
        await notification_service.notify_guest_arrival(
            session,
            user_id=resident.user_id,
            guest_name=visit.guest_name,
            code=guest_code.code,
            hub=hub,
        )

    payload = {
        "visit_id": visit.id,
        "guest_name": visit.guest_name,
        "resident_id": visit.resident_id,
        "unit_number": resident.unit_number if resident is not None else None,
        "block": resident.block if resident is not None else None,
        "check_in_time": visit.check_in_time,
        "number_of_guests": visit.number_of_guests,
    }
    await notification_service.push(hub, resident_room(visit.resident_id), GUEST_ARRIVAL_EVENT, payload)
    await notification_service.push(hub, SECURITY_ROOM, GUEST_ARRIVAL_EVENT, payload)
    return await _reload(session, visit.id)


async def check_out(
    session: AsyncSession,
    visit_id: uuid.UUID,
    *,
    security_notes: str | None = None,
) -> GuestVisit:
    """Mark an arrived visit as departed.

    Raises:
        NotFoundError: If the visit does not exist.
        InvalidTransitionError: If the visit is not arrived.
    """
    visit = await get_visit(session, visit_id)
    _transition(visit, CHECK_OUT_FROM, VisitStatus.DEPARTED, "check out")
    visit.check_out_time = utcnow()
    if security_notes is not None:
        visit.security_notes = security_notes
    await session.commit()
    logger.info("Guest {} checked out of visit {}", visit.guest_name, visit.id)
    return await _reload(session, visit.id)


async def cancel_visit(session: AsyncSession, visit_id: uuid.UUID, *, requester: User) -> GuestVisit:
    """Cancel a scheduled or arrived visit.

    Raises:
        NotFoundError: If the visit does not exist.
        ForbiddenError: If a resident cancels another resident's visit.
        InvalidTransitionError: If the visit is already departed or cancelled.
    """
    visit = await get_visit(session, visit_id)

    is_owner = False
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        is_owner = resident.id == visit.resident_id
    require_capability(requester.role, NON_RESIDENT_ROLES, is_owner=is_owner)

    _transition(visit, CANCEL_FROM, VisitStatus.CANCELLED, "cancel")
    await session.commit()
    logger.info("Visit {} cancelled by {}", visit.id, requester.email)
    return await _reload(session, visit.id)


async def list_visits(
    session: AsyncSession,
    *,
    requester: User,
    resident_id: uuid.UUID | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[GuestVisit], int]:
    """List visits by visit date, newest first.

    Residents are always scoped to their own profile; other roles may
    filter by ``resident_id``.

    Returns:
        Tuple of (visits, total count).
    """
    conditions = []
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        conditions.append(GuestVisit.resident_id == resident.id)
    elif resident_id is not None:
        conditions.append(GuestVisit.resident_id == resident_id)
    if status is not None:
        conditions.append(GuestVisit.status == status)

    total = (await session.execute(select(func.count(GuestVisit.id)).where(*conditions))).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(
        select(GuestVisit)
        .where(*conditions)
        .order_by(GuestVisit.visit_date.desc())
        .offset(offset)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def list_active_visits(session: AsyncSession) -> list[GuestVisit]:
    """Scheduled or arrived visits, newest first."""
    result = await session.execute(
        select(GuestVisit)
        .where(GuestVisit.status.in_(ACTIVE_VISIT_STATUSES))
        .order_by(GuestVisit.visit_date.desc())
    )
    return list(result.scalars().all())
