"""Resident profile service."""

import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import ConflictError, ForbiddenError, NotFoundError
from access_guard.core.permissions import ADMIN_ROLES, require_capability
from access_guard.models.resident import Resident
from access_guard.models.user import AccountStatus, User, UserRole
from access_guard.schemas.resident import ResidentCreateRequest

# Fields a resident may change on their own profile.
OWNER_EDITABLE_FIELDS: frozenset[str] = frozenset({"vehicle_info", "emergency_contacts", "profile_photo", "notes"})
_ADMIN_EDITABLE_FIELDS: frozenset[str] = OWNER_EDITABLE_FIELDS | {
    "unit_number",
    "block",
    "status",
    "move_in_date",
    "move_out_date",
}


async def _reload(session: AsyncSession, resident_id: uuid.UUID) -> Resident:
    result = await session.execute(
        select(Resident).where(Resident.id == resident_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_resident(session: AsyncSession, request: ResidentCreateRequest) -> Resident:
    """Create the resident profile for an existing resident account.

    Raises:
        NotFoundError: If the user does not exist.
        ConflictError: If the user is not a resident or already has a profile.
    """
    user = await session.get(User, request.user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    if user.role != UserRole.RESIDENT:
        msg = "Resident profiles can only be attached to resident accounts"
        raise ConflictError(msg)

    existing = await session.execute(select(Resident.id).where(Resident.user_id == request.user_id))
    if existing.scalar_one_or_none() is not None:
        msg = "Resident profile already exists for this user"
        raise ConflictError(msg)

    resident = Resident(**request.model_dump(exclude_none=True), status=AccountStatus.ACTIVE)
    session.add(resident)
    await session.commit()
    logger.info("Resident profile {} {} created for user {}", resident.block, resident.unit_number, user.email)
    return await _reload(session, resident.id)


async def list_residents(
    session: AsyncSession,
    *,
    block: str | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[Resident], int]:
    """List resident profiles ordered by block then unit.

    Returns:
        Tuple of (residents, total count).
    """
    conditions = []
    if block is not None:
        conditions.append(Resident.block == block)
    if status is not None:
        conditions.append(Resident.status == status)

    total = (await session.execute(select(func.count(Resident.id)).where(*conditions))).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(
        select(Resident)
        .where(*conditions)
        .order_by(Resident.block, Resident.unit_number)
        .offset(offset)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_resident(session: AsyncSession, resident_id: uuid.UUID) -> Resident:
    """Get a resident profile by ID.

    Raises:
        NotFoundError: If no such profile exists.
    """
    result = await session.execute(select(Resident).where(Resident.id == resident_id))
    resident = result.scalar_one_or_none()
    if resident is None:
        msg = "Resident not found"
        raise NotFoundError(msg)
    return resident


async def get_resident_for_user(session: AsyncSession, user_id: uuid.UUID) -> Resident:
    """Get the profile owned by ``user_id``.

    Raises:
        NotFoundError: If the account has no resident profile.
    """
    result = await session.execute(select(Resident).where(Resident.user_id == user_id))
    resident = result.scalar_one_or_none()
    if resident is None:
        msg = "Resident profile not found"
        raise NotFoundError(msg)
    return resident


async def update_resident(session: AsyncSession, resident: Resident, updates: dict, *, actor: User) -> Resident:
    """Update a resident profile.

    Admin-tier actors may change any field; the owning resident only
    vehicle info, emergency contacts, profile photo and notes.

    Raises:
        ForbiddenError: If the actor is neither admin-tier nor the owner, or
            the owner sends a field outside the owner-editable set.
    """
    is_owner = resident.user_id == actor.id
    require_capability(actor.role, ADMIN_ROLES, is_owner=is_owner, message="Not authorized to update this resident")

    allowed = _ADMIN_EDITABLE_FIELDS if actor.role in ADMIN_ROLES else OWNER_EDITABLE_FIELDS
    rejected = sorted(set(updates) - allowed)
    if rejected:
        msg = f"Residents cannot update: {', '.join(rejected)}"
        raise ForbiddenError(msg)

    for field, value in updates.items():
        setattr(resident, field, value)

    await session.commit()
    logger.info("Resident profile {} updated by {}", resident.id, actor.email)
    return await _reload(session, resident.id)
