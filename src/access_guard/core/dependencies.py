"""Request-scoped dependencies: database session, caller identity, role gates, push hub."""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.config import Settings, get_settings
from access_guard.core.database import get_session_factory
from access_guard.core.permissions import check_capability
from access_guard.core.realtime import get_connection_hub
from access_guard.lib.realtime import ConnectionHub
from access_guard.models.user import User
from access_guard.services import auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """One session per request, closed when the response is sent."""
    async with get_session_factory()() as session:
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """The active account behind the bearer access token.

    Raises:
        HTTPException: 401 for a bad or expired token, or an account that
            is missing or no longer active.
    """
    try:
        return await auth_service.get_user_from_token(session, token, settings)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_role(*roles: str) -> Callable[..., Any]:
    """Dependency admitting only callers whose role is one of ``roles``.

    Ownership-based rules (a resident acting on their own code, visit or
    profile) are enforced in the services, not here.
    """

    async def role_checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if not check_capability(current_user.role, roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role} is not authorized to access this route",
            )
        return current_user

    return role_checker


def get_hub() -> ConnectionHub:
    return get_connection_hub()
