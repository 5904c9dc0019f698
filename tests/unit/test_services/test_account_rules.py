"""Tests for user account management rules."""

import uuid
from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from access_guard.core.security import verify_password
from access_guard.models.resident import Resident
from access_guard.models.user import User
from access_guard.schemas.user import UserCreateRequest
from access_guard.services import user_service


def _request(**overrides) -> UserCreateRequest:
    data = {
        "name": "New Person",
        "email": "new.person@example.com",
        "phone": "555-0199",
        "role": "resident",
        "password": "s3cret-pass",
        "unit_number": "c303",
        "block": "C",
    }
    data.update(overrides)
    return UserCreateRequest(**data)


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_resident_gets_profile(self, async_session: AsyncSession, admin_user: User) -> None:
        user = await user_service.create_user(async_session, _request(), actor=admin_user)

        assert user.role == "resident"
        assert user.status == "active"
        assert verify_password("s3cret-pass", user.hashed_password)
        assert user.resident_profile is not None
        assert user.resident_profile.unit_number == "C303"
        assert user.resident_profile.block == "C"

    @pytest.mark.asyncio
    async def test_staff_has_no_profile(self, async_session: AsyncSession, admin_user: User) -> None:
        user = await user_service.create_user(
            async_session, _request(role="security", email="guard@example.com"), actor=admin_user
        )
        assert user.resident_profile is None

    @pytest.mark.asyncio
    async def test_email_normalized_and_unique(self, async_session: AsyncSession, admin_user: User) -> None:
        await user_service.create_user(async_session, _request(email="Dup@Example.com"), actor=admin_user)
        with pytest.raises(ConflictError, match="already exists"):
            await user_service.create_user(async_session, _request(email="dup@example.com"), actor=admin_user)

    @pytest.mark.asyncio
    async def test_admin_cannot_create_super_admin(self, async_session: AsyncSession, admin_user: User) -> None:
        with pytest.raises(ForbiddenError):
            await user_service.create_user(async_session, _request(role="super_admin"), actor=admin_user)

    @pytest.mark.asyncio
    async def test_super_admin_can_create_super_admin(
        self, async_session: AsyncSession, super_admin_user: User
    ) -> None:
        user = await user_service.create_user(async_session, _request(role="super_admin"), actor=super_admin_user)
        assert user.role == "super_admin"

    @pytest.mark.asyncio
    async def test_bootstrap_without_actor(self, async_session: AsyncSession) -> None:
        user = await user_service.create_user(async_session, _request(role="super_admin"))
        assert user.role == "super_admin"


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_list_pagination(
        self, async_session: AsyncSession, make_user: Callable[..., Awaitable[User]]
    ) -> None:
        for _ in range(3):
            await make_user("security")

        users, total = await user_service.list_users(async_session, page=1, page_size=2)
        assert total == 3
        assert len(users) == 2

    @pytest.mark.asyncio
    async def test_get_missing(self, async_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError, match="User not found"):
            await user_service.get_user(async_session, uuid.uuid4())


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_admin_updates_fields(
        self, async_session: AsyncSession, admin_user: User, security_user: User
    ) -> None:
        updated = await user_service.update_user(
            async_session, security_user, {"name": "Sam Sentry", "status": "suspended"}, actor=admin_user
        )
        assert updated.name == "Sam Sentry"
        assert updated.status == "suspended"

    @pytest.mark.asyncio
    async def test_admin_cannot_promote_to_super_admin(
        self, async_session: AsyncSession, admin_user: User, security_user: User
    ) -> None:
        with pytest.raises(ForbiddenError):
            await user_service.update_user(async_session, security_user, {"role": "super_admin"}, actor=admin_user)

    @pytest.mark.asyncio
    async def test_email_collision(
        self, async_session: AsyncSession, admin_user: User, security_user: User, resident_user: User
    ) -> None:
        with pytest.raises(ConflictError):
            await user_service.update_user(
                async_session, security_user, {"email": resident_user.email}, actor=admin_user
            )

    @pytest.mark.asyncio
    async def test_unit_change_updates_profile(
        self, async_session: AsyncSession, admin_user: User, resident_user: User
    ) -> None:
        updated = await user_service.update_user(
            async_session, resident_user, {"unit_number": "d404", "block": "D"}, actor=admin_user
        )
        assert updated.resident_profile.unit_number == "D404"
        assert updated.resident_profile.block == "D"

    @pytest.mark.asyncio
    async def test_profile_update_ignores_role(self, async_session: AsyncSession, resident_user: User) -> None:
        updated = await user_service.update_profile(
            async_session, resident_user, {"phone": "555-0111", "role": "super_admin"}
        )
        assert updated.phone == "555-0111"
        assert updated.role == "resident"


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_delete_removes_profile(
        self, async_session: AsyncSession, admin_user: User, resident_user: User
    ) -> None:
        profile_id = resident_user.resident_profile.id
        await user_service.delete_user(async_session, resident_user, actor=admin_user)

        assert (await async_session.execute(select(User).where(User.id == resident_user.id))).first() is None
        assert (await async_session.execute(select(Resident).where(Resident.id == profile_id))).first() is None

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, async_session: AsyncSession, admin_user: User) -> None:
        with pytest.raises(ValidationError, match="own account"):
            await user_service.delete_user(async_session, admin_user, actor=admin_user)

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_super_admin(
        self, async_session: AsyncSession, admin_user: User, super_admin_user: User
    ) -> None:
        with pytest.raises(ForbiddenError):
            await user_service.delete_user(async_session, super_admin_user, actor=admin_user)
