"""Session endpoints plus the unauthenticated health and info probes.

``/auth/login`` takes an OAuth2 password form whose ``username`` is the
account email, and answers with a bare token pair rather than the usual
envelope so standard OAuth2 clients can consume it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard import __version__
from access_guard.core.config import Settings, get_settings
from access_guard.core.dependencies import get_async_session, get_current_user
from access_guard.models.user import User
from access_guard.schemas.auth import RefreshRequest, TokenResponse
from access_guard.schemas.common import ApiResponse
from access_guard.schemas.user import UserResponse
from access_guard.services import auth_service

auth_router = APIRouter(tags=["auth"])

DbSession = Annotated[AsyncSession, Depends(get_async_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]


@auth_router.get("/health")
async def health_check() -> dict:
    return {"status": "healthy"}


@auth_router.get("/info")
async def info(settings: AppSettings) -> dict:
    return {"version": __version__, "environment": settings.environment}


@auth_router.post("/auth/login", response_model=TokenResponse)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: DbSession,
    settings: AppSettings,
) -> TokenResponse:
    """Exchange email and password for an access/refresh token pair."""
    user = await auth_service.authenticate_user(session, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.generate_tokens(user, settings)


@auth_router.post("/auth/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, session: DbSession, settings: AppSettings) -> TokenResponse:
    try:
        return await auth_service.refresh_access_token(session, request.refresh_token, settings)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e


@auth_router.get("/auth/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: Annotated[User, Depends(get_current_user)]) -> ApiResponse:
    """The caller's account, with the resident profile for residents."""
    return ApiResponse(data=UserResponse.from_user(current_user))


@auth_router.post("/auth/logout", response_model=ApiResponse[None])
async def logout(_current_user: Annotated[User, Depends(get_current_user)]) -> ApiResponse:
    """Tokens are stateless; the client discards them."""
    return ApiResponse(message="Logged out successfully")
