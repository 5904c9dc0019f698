"""User management API endpoints (admin tier), plus self-service profile edit."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.dependencies import get_async_session, get_current_user, require_role
from access_guard.core.permissions import ADMIN, SUPER_ADMIN
from access_guard.models.user import User
from access_guard.schemas.common import ApiResponse, PaginationMeta, PaginationParams
from access_guard.schemas.resident import ResidentResponse
from access_guard.schemas.user import (
    ProfileUpdateRequest,
    UserCreateRequest,
    UserDetailResponse,
    UserResponse,
    UserUpdateRequest,
)
from access_guard.services import user_service

users_router = APIRouter(prefix="/users", tags=["users"])

AdminUser = Annotated[User, Depends(require_role(ADMIN, SUPER_ADMIN))]


@users_router.get("", response_model=ApiResponse[list[UserResponse]])
async def list_users(
    _current_user: AdminUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
) -> ApiResponse:
    """List all accounts, newest first; residents include unit and block."""
    users, total = await user_service.list_users(session, pagination.page, pagination.limit)
    return ApiResponse(
        data=[UserResponse.from_user(u) for u in users],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@users_router.post("", response_model=ApiResponse[UserResponse], status_code=201)
async def create_user(
    request: UserCreateRequest,
    current_user: AdminUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Create a new account (admin tier)."""
    user = await user_service.create_user(session, request, actor=current_user)
    return ApiResponse(data=UserResponse.from_user(user))


# Fixed-path routes before /{user_id}


@users_router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    request: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Update the caller's own name, email and phone."""
    user = await user_service.update_profile(session, current_user, request.model_dump(exclude_unset=True))
    return ApiResponse(data=UserResponse.from_user(user))


@users_router.get("/{user_id}", response_model=ApiResponse[UserDetailResponse])
async def get_user(
    user_id: uuid.UUID,
    _current_user: AdminUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Get an account and its resident profile."""
    user = await user_service.get_user(session, user_id)
    profile = user.resident_profile
    return ApiResponse(
        data=UserDetailResponse(
            user=UserResponse.from_user(user),
            resident_profile=ResidentResponse.model_validate(profile) if profile is not None else None,
        )
    )


@users_router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: uuid.UUID,
    request: UserUpdateRequest,
    current_user: AdminUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Update an account (admin tier)."""
    user = await user_service.get_user(session, user_id)
    updated = await user_service.update_user(
        session, user, request.model_dump(exclude_unset=True), actor=current_user
    )
    return ApiResponse(data=UserResponse.from_user(updated))


@users_router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: uuid.UUID,
    current_user: AdminUser,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ApiResponse:
    """Delete an account and its resident profile (admin tier)."""
    user = await user_service.get_user(session, user_id)
    await user_service.delete_user(session, user, actor=current_user)
    return ApiResponse(message="User deleted successfully")
