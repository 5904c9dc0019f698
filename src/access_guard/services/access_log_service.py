"""Access-event logging service.

Append-only record of gate events plus the query and statistics views used
by security staff. Rows are never updated or deleted here.
"""

import uuid
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import NotFoundError, ValidationError
from access_guard.models.access_log import AccessLog, AccessMethod, AccessPoint
from access_guard.models.base import as_utc, utcnow
from access_guard.models.delivery import Delivery
from access_guard.models.guest_code import GuestCode
from access_guard.models.guest_visit import GuestVisit
from access_guard.models.user import User

_REFERENCES: tuple[tuple[str, type, str], ...] = (
    ("user_id", User, "User not found"),
    ("guest_code_id", GuestCode, "Guest code not found"),
    ("visit_id", GuestVisit, "Guest visit not found"),
    ("delivery_id", Delivery, "Delivery not found"),
)


async def record_access(
    session: AsyncSession,
    *,
    result: str,
    method: str = AccessMethod.MANUAL,
    access_point: str = AccessPoint.MAIN_GATE,
    user_id: uuid.UUID | None = None,
    guest_code_id: uuid.UUID | None = None,
    visit_id: uuid.UUID | None = None,
    delivery_id: uuid.UUID | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    security_notes: str | None = None,
    timestamp: datetime | None = None,
) -> AccessLog:
    """Append one access event and commit.

    Args:
        session: The database session.
        result: success, failure, or denied.
        method: QR, PIN, manual, keycard, or biometric.
        access_point: Where the event happened.
        user_id / guest_code_id / visit_id / delivery_id: Optional
            references; each one given must exist.
        details: Free-form metadata (conventional keys: ``reason``,
            ``code``, ``guest_name``, ``event``).
        ip_address: Client address of the recording request.
        user_agent: Client user agent of the recording request.
        security_notes: Staff notes.
        timestamp: Event time; defaults to now.

    Returns:
        The created AccessLog record.

    Raises:
        NotFoundError: If a referenced entity does not exist.
    """
    references = {
        "user_id": user_id,
        "guest_code_id": guest_code_id,
        "visit_id": visit_id,
        "delivery_id": delivery_id,
    }
    for field, model, message in _REFERENCES:
        ref = references[field]
        if ref is not None and await session.get(model, ref) is None:
            raise NotFoundError(message)

    access_log = AccessLog(
        timestamp=timestamp or utcnow(),
        result=result,
        method=method,
        access_point=access_point,
        details=details or {},
        ip_address=ip_address,
        user_agent=user_agent,
        security_notes=security_notes,
        **references,
    )
    session.add(access_log)
    await session.commit()
    logger.debug("Access {} via {} at {}", result, method, access_point)
    return access_log


async def log_resident_access(
    session: AsyncSession,
    user_id: uuid.UUID,
    result: str,
    method: str,
    details: dict[str, Any] | None = None,
) -> AccessLog:
    return await record_access(session, user_id=user_id, result=result, method=method, details=details)


async def log_guest_access(
    session: AsyncSession,
    guest_code_id: uuid.UUID | None,
    visit_id: uuid.UUID | None,
    result: str,
    method: str,
    details: dict[str, Any] | None = None,
    access_point: str = AccessPoint.MAIN_GATE,
) -> AccessLog:
    return await record_access(
        session,
        guest_code_id=guest_code_id,
        visit_id=visit_id,
        result=result,
        method=method,
        details=details,
        access_point=access_point,
    )


async def log_delivery_access(
    session: AsyncSession,
    delivery_id: uuid.UUID,
    result: str,
    method: str,
    details: dict[str, Any] | None = None,
    access_point: str = AccessPoint.DELIVERY_ENTRANCE,
) -> AccessLog:
    return await record_access(
        session,
        delivery_id=delivery_id,
        result=result,
        method=method,
        details=details,
        access_point=access_point,
    )


async def get_access_log(session: AsyncSession, log_id: uuid.UUID) -> AccessLog:
    """Load one log row with its related-entity projections.

    Raises:
        NotFoundError: If no such row exists.
    """
    result = await session.execute(
        select(AccessLog).where(AccessLog.id == log_id).execution_options(populate_existing=True)
    )
    access_log = result.scalar_one_or_none()
    if access_log is None:
        msg = "Access log not found"
        raise NotFoundError(msg)
    return access_log


async def query_access_logs(
    session: AsyncSession,
    *,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    result: str | None = None,
    method: str | None = None,
    access_point: str | None = None,
    user_id: uuid.UUID | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[AccessLog], int]:
    """Query access logs with optional filters, newest first.

    Args:
        session: The database session.
        start_time: Inclusive lower bound on ``timestamp``.
        end_time: Inclusive upper bound on ``timestamp``.
        result: Filter by result.
        method: Filter by method.
        access_point: Filter by access point.
        user_id: Filter by acting user.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (access log records, total count).
    """
    conditions = []
    if start_time is not None:
        conditions.append(AccessLog.timestamp >= start_time)
    if end_time is not None:
        conditions.append(AccessLog.timestamp <= end_time)
    if result is not None:
        conditions.append(AccessLog.result == result)
    if method is not None:
        conditions.append(AccessLog.method == method)
    if access_point is not None:
        conditions.append(AccessLog.access_point == access_point)
    if user_id is not None:
        conditions.append(AccessLog.user_id == user_id)

    total = (await session.execute(select(func.count(AccessLog.id)).where(*conditions))).scalar_one()

    offset = (page - 1) * page_size
    query = (
        select(AccessLog)
        .where(*conditions)
        .order_by(AccessLog.timestamp.desc(), AccessLog.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )
    logs = list((await session.execute(query)).scalars().all())
    return logs, total


async def get_access_statistics(
    session: AsyncSession,
    *,
    start_time: datetime,
    end_time: datetime,
) -> list[dict[str, Any]]:
    """Aggregate access events in ``[start_time, end_time]``.

    Counts are grouped by (result, method, access point) in SQL and then
    regrouped by result with a nested per-method breakdown.

    Returns:
        ``[{"result", "total", "methods": [{"method", "access_point", "count"}]}]``
        ordered by result.

    Raises:
        ValidationError: If ``start_time`` is after ``end_time``.
    """
    start_time, end_time = as_utc(start_time), as_utc(end_time)
    if start_time > end_time:
        msg = "Start date must be before end date"
        raise ValidationError(msg)

    query = (
        select(
            AccessLog.result,
            AccessLog.method,
            AccessLog.access_point,
            func.count(AccessLog.id).label("count"),
        )
        .where(AccessLog.timestamp >= start_time, AccessLog.timestamp <= end_time)
        .group_by(AccessLog.result, AccessLog.method, AccessLog.access_point)
        .order_by(AccessLog.result, AccessLog.method, AccessLog.access_point)
    )
    rows = (await session.execute(query)).all()

    buckets: dict[str, dict[str, Any]] = {}
    for row in rows:
        bucket = buckets.setdefault(row.result, {"result": row.result, "total": 0, "methods": []})
        bucket["methods"].append({"method": row.method, "access_point": row.access_point, "count": row.count})
        bucket["total"] += row.count
    return list(buckets.values())
