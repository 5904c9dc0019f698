"""Account management service.

Admin-tier CRUD over accounts plus self-service profile edits. Resident
accounts may carry a resident profile created or upserted alongside them.
"""

import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from access_guard.core.permissions import ADMIN, SUPER_ADMIN
from access_guard.core.security import hash_password
from access_guard.models.resident import Resident
from access_guard.models.user import AccountStatus, User, UserRole
from access_guard.schemas.user import UserCreateRequest

_ADMIN_UPDATABLE_FIELDS: frozenset[str] = frozenset({"name", "email", "phone", "role", "status"})
_PROFILE_UPDATABLE_FIELDS: frozenset[str] = frozenset({"name", "email", "phone"})


async def _ensure_email_free(session: AsyncSession, email: str, *, exclude_id: uuid.UUID | None = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    if (await session.execute(query)).scalar_one_or_none() is not None:
        msg = "User with this email already exists"
        raise ConflictError(msg)


async def _reload(session: AsyncSession, user_id: uuid.UUID) -> User:
    result = await session.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_user(session: AsyncSession, request: UserCreateRequest, *, actor: User | None = None) -> User:
    """Create a new account.

    Args:
        session: The database session.
        request: User creation request data.
        actor: The admin performing the operation; None for CLI bootstrap.

    Returns:
        The created User (with resident profile when one was created).

    Raises:
        ForbiddenError: If an ``admin`` tries to create a ``super_admin``.
        ConflictError: If the email already exists.
    """
    if actor is not None and actor.role == ADMIN and request.role == SUPER_ADMIN:
        msg = "Admins cannot create super admin users"
        raise ForbiddenError(msg)
    await _ensure_email_free(session, request.email)

    user = User(
        name=request.name,
        email=request.email,
        phone=request.phone,
        role=request.role,
        hashed_password=hash_password(request.password),
        status=AccountStatus.ACTIVE,
    )
    if request.role == UserRole.RESIDENT and request.unit_number and request.block:
        user.resident_profile = Resident(
            unit_number=request.unit_number.strip().upper(),
            block=request.block,
            status=AccountStatus.ACTIVE,
        )
    session.add(user)
    await session.commit()
    logger.info("User {} created with role {} by {}", user.email, user.role, actor.email if actor else "cli")
    return await _reload(session, user.id)


async def list_users(session: AsyncSession, page: int = 1, page_size: int = 50) -> tuple[list[User], int]:
    """List accounts newest first.

    Args:
        session: The database session.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (users list, total count).
    """
    total = (await session.execute(select(func.count(User.id)))).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(
        select(User).order_by(User.created_at.desc()).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    """Get a user by ID.

    Raises:
        NotFoundError: If no such user exists.
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def update_user(session: AsyncSession, user: User, updates: dict, *, actor: User) -> User:
    """Admin update of an account.

    ``unit_number``/``block`` in ``updates`` upsert the resident profile
    when the resulting role is ``resident``.

    Raises:
        ForbiddenError: If an ``admin`` tries to promote to ``super_admin``.
        ConflictError: If the new email is already in use by another user.
    """
    if actor.role == ADMIN and updates.get("role") == SUPER_ADMIN:
        msg = "Admins cannot promote users to super admin"
        raise ForbiddenError(msg)
    if updates.get("email") and updates["email"] != user.email:
        await _ensure_email_free(session, updates["email"], exclude_id=user.id)

    for field, value in updates.items():
        if field in _ADMIN_UPDATABLE_FIELDS and value is not None:
            setattr(user, field, value)

    unit_number, block = updates.get("unit_number"), updates.get("block")
    if user.role == UserRole.RESIDENT and unit_number and block:
        if user.resident_profile is None:
            user.resident_profile = Resident(unit_number=unit_number.strip().upper(), block=block)
        else:
            user.resident_profile.unit_number = unit_number.strip().upper()
            user.resident_profile.block = block

    await session.commit()
    logger.info("User {} updated by {}", user.email, actor.email)
    return await _reload(session, user.id)


async def update_profile(session: AsyncSession, user: User, updates: dict) -> User:
    """Self-service update of name, email and phone.

    Raises:
        ConflictError: If the new email is already in use by another user.
    """
    if updates.get("email") and updates["email"] != user.email:
        await _ensure_email_free(session, updates["email"], exclude_id=user.id)

    for field, value in updates.items():
        if field in _PROFILE_UPDATABLE_FIELDS and value is not None:
            setattr(user, field, value)

    await session.commit()
    return await _reload(session, user.id)


async def delete_user(session: AsyncSession, user: User, *, actor: User) -> None:
    """Delete an account and its resident profile.

    Raises:
        ValidationError: If the actor tries to delete their own account.
        ForbiddenError: If an ``admin`` tries to delete a ``super_admin``.
    """
    if user.id == actor.id:
        msg = "Cannot delete your own account"
        raise ValidationError(msg)
    if actor.role == ADMIN and user.role == SUPER_ADMIN:
        msg = "Admins cannot delete super admin users"
        raise ForbiddenError(msg)

    if user.resident_profile is not None:
        await session.delete(user.resident_profile)
    await session.delete(user)
    await session.commit()
    logger.info("User {} deleted by {}", user.email, actor.email)
