"""Login, session tokens and bearer-token resolution.

Accounts log in with their email. Only ``active`` accounts may log in,
refresh or use an access token; suspending an account therefore cuts off
its existing sessions at the next request. All token failures surface as
``ValueError`` so the HTTP and WebSocket layers can map them to 401 or a
policy-violation close.
"""

import uuid

import jwt
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.config import Settings
from access_guard.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from access_guard.models.base import utcnow
from access_guard.models.user import User
from access_guard.schemas.auth import TokenResponse

_WRONG_TYPE = {
    ACCESS_TOKEN_TYPE: "Token is not an access token",
    REFRESH_TOKEN_TYPE: "Token is not a refresh token",
}


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    """The account for ``email`` if the password matches and it is active; stamps ``last_login_at``."""
    normalized = email.strip().lower()
    user = (await session.execute(select(User).where(User.email == normalized))).scalar_one_or_none()
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Failed login for {}", normalized)
        return None
    if not user.is_active:
        logger.info("Login refused for {} account {}", user.status, normalized)
        return None

    user.last_login_at = utcnow()
    await session.commit()
    logger.info("User {} logged in as {}", user.id, user.role)
    return user


def generate_tokens(user: User, settings: Settings) -> TokenResponse:
    """Issue a fresh access/refresh pair for ``user``."""
    subject = str(user.id)
    return TokenResponse(
        access_token=create_access_token(
            subject,
            user.role,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expires_minutes=settings.jwt_access_token_expire_minutes,
        ),
        refresh_token=create_refresh_token(
            subject,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expires_days=settings.jwt_refresh_token_expire_days,
        ),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


def _claims(token: str, settings: Settings, expected_type: str, invalid_message: str) -> dict:
    try:
        claims = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    except jwt.InvalidTokenError as e:
        raise ValueError(invalid_message) from e
    if claims.get("type") != expected_type:
        raise ValueError(_WRONG_TYPE[expected_type])
    return claims


async def _active_subject(session: AsyncSession, claims: dict) -> User:
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except (KeyError, ValueError) as e:
        msg = "Invalid token payload"
        raise ValueError(msg) from e

    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        msg = "User not found or inactive"
        raise ValueError(msg)
    return user


async def get_user_from_token(session: AsyncSession, token: str, settings: Settings) -> User:
    """Resolve a bearer access token to its active account.

    Raises:
        ValueError: Bad signature, expiry, wrong token type, or an account
            that is missing or not active.
    """
    claims = _claims(token, settings, ACCESS_TOKEN_TYPE, "Invalid token")
    return await _active_subject(session, claims)


async def refresh_access_token(session: AsyncSession, refresh_token: str, settings: Settings) -> TokenResponse:
    """Trade a refresh token for a new token pair.

    Raises:
        ValueError: As for :func:`get_user_from_token`, for refresh tokens.
    """
    claims = _claims(refresh_token, settings, REFRESH_TOKEN_TYPE, "Invalid refresh token")
    user = await _active_subject(session, claims)
    return generate_tokens(user, settings)
