"""Guest code service.

Issues, verifies, revokes and lists guest codes. Verification is a single
conditional UPDATE so two gates presenting the same single-use code at the
same time cannot both succeed.
"""

import uuid
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import (
    CodeAlreadyUsedError,
    CodeExpiredError,
    GenerationExhaustedError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from access_guard.core.permissions import ADMIN_ROLES, RESIDENT, require_capability
from access_guard.lib.guest_codes import (
    CodeSpaceExhaustedError,
    CodeStatus,
    CodeType,
    UnknownCodeTypeError,
    generate_unique_code,
    matches_code_format,
)
from access_guard.models.access_log import AccessMethod, AccessPoint, AccessResult
from access_guard.models.base import as_utc, utcnow
from access_guard.models.guest_code import GuestCode
from access_guard.models.resident import Resident
from access_guard.models.user import User
from access_guard.services import access_log_service
from access_guard.services.resident_service import get_resident_for_user

INVALID_CODE_MESSAGE = "Invalid or expired code"


async def _reload(session: AsyncSession, code_id: uuid.UUID) -> GuestCode:
    result = await session.execute(
        select(GuestCode).where(GuestCode.id == code_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def generate_code(session: AsyncSession, code_type: str) -> str:
    """Generate a code of ``code_type`` not already stored.

    Raises:
        ValidationError: If ``code_type`` is not PIN or QR.
        GenerationExhaustedError: If every attempt collided.
    """

    async def exists(candidate: str) -> bool:
        result = await session.execute(select(GuestCode.id).where(GuestCode.code == candidate))
        return result.scalar_one_or_none() is not None

    try:
        return await generate_unique_code(code_type, exists)
    except UnknownCodeTypeError as e:
        raise ValidationError(str(e)) from e
    except CodeSpaceExhaustedError as e:
        logger.error("Guest code space exhausted for {}", code_type)
        raise GenerationExhaustedError(str(e)) from e


async def issue_code(
    session: AsyncSession,
    resident: Resident,
    *,
    guest_name: str,
    code_type: str,
    valid_until: datetime,
    purpose: str | None = None,
    notes: str | None = None,
) -> GuestCode:
    """Issue a single-use code valid from now until ``valid_until``.

    Args:
        session: The database session.
        resident: The issuing resident profile.
        guest_name: Guest the code admits.
        code_type: PIN or QR.
        valid_until: End of the validity window; must be in the future.
        purpose: Optional visit purpose.
        notes: Optional notes.

    Returns:
        The created GuestCode.

    Raises:
        ValidationError: If a required field is missing, the type is
            unknown, or ``valid_until`` is not after now.
        GenerationExhaustedError: If no unique code could be generated.
    """
    if not guest_name or not code_type or valid_until is None:
        msg = "Guest name, code type, and valid until date are required"
        raise ValidationError(msg)
    valid_until = as_utc(valid_until)
    now = utcnow()
    if valid_until <= now:
        msg = "Valid until date must be in the future"
        raise ValidationError(msg)

    code = await generate_code(session, code_type)
    guest_code = GuestCode(
        code=code,
        code_type=code_type,
        resident_id=resident.id,
        guest_name=guest_name,
        purpose=purpose,
        notes=notes,
        valid_from=now,
        valid_until=valid_until,
        status=CodeStatus.ACTIVE,
        usage_count=0,
        max_usage=1,
    )
    session.add(guest_code)
    await session.commit()
    logger.info("{} guest code issued for {} by resident {}", code_type, guest_name, resident.id)
    return await _reload(session, guest_code.id)


async def get_code(session: AsyncSession, code_id: uuid.UUID) -> GuestCode:
    """Get a guest code by ID.

    Raises:
        NotFoundError: If no such code exists.
    """
    guest_code = await session.get(GuestCode, code_id)
    if guest_code is None:
        msg = "Guest code not found"
        raise NotFoundError(msg)
    return guest_code


def _presented_method(code: str, guest_code: GuestCode | None) -> str:
    if guest_code is not None:
        return guest_code.code_type
    for code_type in CodeType:
        if matches_code_format(code, code_type):
            return code_type
    return AccessMethod.MANUAL


async def _deny(
    session: AsyncSession,
    *,
    code: str,
    guest_code: GuestCode | None,
    reason: str,
    access_point: str,
) -> None:
    logger.warning("Guest code verification denied at {}: {}", access_point, reason)
    await access_log_service.record_access(
        session,
        guest_code_id=guest_code.id if guest_code is not None else None,
        result=AccessResult.DENIED,
        method=_presented_method(code, guest_code),
        access_point=access_point,
        details={"code": code, "reason": reason},
    )


async def verify_code(
    session: AsyncSession,
    code: str,
    *,
    access_point: str = AccessPoint.MAIN_GATE,
) -> dict[str, Any]:
    """Consume one use of ``code`` if it is currently usable.

    The usability check and the usage increment happen in one UPDATE whose
    WHERE clause carries every condition; a failed UPDATE is classified by
    re-reading the row. Every attempt appends an access-log row.

    Args:
        session: The database session.
        code: The presented code string.
        access_point: Where the code was presented.

    Returns:
        Verification payload: guest name, purpose, code type, usage and the
        visited resident's unit, block and contact details.

    Raises:
        ValidationError: If ``code`` is empty.
        NotFoundError: If the code is unknown or no longer active.
        CodeExpiredError: If the code is active but outside its window.
        CodeAlreadyUsedError: If the code is active and in window but has
            no uses left.
    """
    if not code:
        msg = "Code is required"
        raise ValidationError(msg)

    now = utcnow()
    new_count = GuestCode.usage_count + 1
    stmt = (
        update(GuestCode)
        .where(
            GuestCode.code == code,
            GuestCode.status == CodeStatus.ACTIVE,
            GuestCode.valid_from <= now,
            GuestCode.valid_until >= now,
            GuestCode.usage_count < GuestCode.max_usage,
        )
        .values(
            usage_count=new_count,
            used_at=now,
            status=case((new_count >= GuestCode.max_usage, CodeStatus.USED), else_=GuestCode.status),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)

    if result.rowcount != 1:
        guest_code = (
            await session.execute(
                select(GuestCode).where(GuestCode.code == code).execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()

        if guest_code is None or guest_code.status != CodeStatus.ACTIVE:
            await _deny(session, code=code, guest_code=guest_code, reason="invalid", access_point=access_point)
            raise NotFoundError(INVALID_CODE_MESSAGE)

        if not (guest_code.valid_from <= now <= guest_code.valid_until):
            if now > guest_code.valid_until:
                guest_code.status = CodeStatus.EXPIRED
            await _deny(session, code=code, guest_code=guest_code, reason="expired", access_point=access_point)
            msg = "Code has expired"
            raise CodeExpiredError(msg)

        await _deny(session, code=code, guest_code=guest_code, reason="already_used", access_point=access_point)
        msg = "Code has already been used"
        raise CodeAlreadyUsedError(msg)

    guest_code = (
        await session.execute(
            select(GuestCode).where(GuestCode.code == code).execution_options(populate_existing=True)
        )
    ).scalar_one()
    await access_log_service.record_access(
        session,
        guest_code_id=guest_code.id,
        result=AccessResult.SUCCESS,
        method=guest_code.code_type,
        access_point=access_point,
        details={"code": code, "guest_name": guest_code.guest_name},
    )
    logger.info("Guest code {} verified for {} at {}", guest_code.id, guest_code.guest_name, access_point)

    resident = guest_code.resident
    user = resident.user if resident is not None else None
    return {
        "guest_code_id": guest_code.id,
        "guest_name": guest_code.guest_name,
        "purpose": guest_code.purpose,
        "code_type": guest_code.code_type,
        "usage_count": guest_code.usage_count,
        "max_usage": guest_code.max_usage,
        "resident": {
            "id": guest_code.resident_id,
            "unit_number": resident.unit_number if resident is not None else "",
            "block": resident.block if resident is not None else "",
            "name": user.name if user is not None else "",
            "email": user.email if user is not None else "",
            "phone": user.phone if user is not None else "",
        },
    }


async def revoke_code(session: AsyncSession, code_id: uuid.UUID, *, requester: User) -> GuestCode:
    """Revoke a guest code.

    Raises:
        NotFoundError: If the code does not exist.
        ForbiddenError: If the requester is neither the owning resident nor admin-tier.
        InvalidTransitionError: If the code is already revoked.
    """
    guest_code = await get_code(session, code_id)

    is_owner = False
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        is_owner = resident.id == guest_code.resident_id
    require_capability(requester.role, ADMIN_ROLES, is_owner=is_owner, message="Not authorized to revoke this code")

    if guest_code.status == CodeStatus.REVOKED:
        msg = "Guest code is already revoked"
        raise InvalidTransitionError(msg)

    guest_code.status = CodeStatus.REVOKED
    guest_code.revoked_at = utcnow()
    await session.commit()
    logger.info("Guest code {} revoked by {}", guest_code.id, requester.email)
    return await _reload(session, guest_code.id)


def _effective_status_filter(status: str, now: datetime):  # type: ignore[no-untyped-def]
    if status == CodeStatus.ACTIVE:
        return and_(GuestCode.status == CodeStatus.ACTIVE, GuestCode.valid_until >= now)
    if status == CodeStatus.EXPIRED:
        return or_(
            GuestCode.status == CodeStatus.EXPIRED,
            and_(GuestCode.status == CodeStatus.ACTIVE, GuestCode.valid_until < now),
        )
    return GuestCode.status == status


async def list_codes(
    session: AsyncSession,
    *,
    requester: User,
    status: str | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[GuestCode], int]:
    """List guest codes newest first; residents see only their own.

    ``status`` filters on the reported status, so an active code past
    ``valid_until`` matches ``expired`` and not ``active``.

    Raises:
        NotFoundError: If a resident requester has no resident profile.
    """
    conditions = []
    if requester.role == RESIDENT:
        resident = await get_resident_for_user(session, requester.id)
        conditions.append(GuestCode.resident_id == resident.id)
    if status is not None:
        conditions.append(_effective_status_filter(status, utcnow()))

    total = (await session.execute(select(func.count(GuestCode.id)).where(*conditions))).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(
        select(GuestCode)
        .where(*conditions)
        .order_by(GuestCode.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def expire_stale_codes(session: AsyncSession) -> int:
    """Settle every active code past ``valid_until`` to ``expired``.

    Reads already report such codes as expired; this only brings the stored
    status in line.

    Returns:
        Number of codes updated.
    """
    now = utcnow()
    result = await session.execute(
        update(GuestCode)
        .where(GuestCode.status == CodeStatus.ACTIVE, GuestCode.valid_until < now)
        .values(status=CodeStatus.EXPIRED, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount
