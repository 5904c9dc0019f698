"""Password hashes and signed session tokens.

Passwords are stored as bcrypt hashes (passlib). Sessions are a pair of
HS256 JWTs (PyJWT): a short-lived access token carrying ``sub``, ``role``
and ``type="access"``, and a longer-lived refresh token that only carries
``sub`` and ``type="refresh"``.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _sign(claims: dict[str, Any], lifetime: timedelta, secret_key: str, algorithm: str) -> str:
    issued = datetime.now(UTC)
    return jwt.encode({**claims, "iat": issued, "exp": issued + lifetime}, secret_key, algorithm=algorithm)


def create_access_token(
    subject: str,
    role: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
) -> str:
    """Sign an access token for ``subject`` (a user id).

    The role claim is informational for clients; authorization always
    re-reads the role from the stored account.
    """
    claims = {"sub": subject, "role": role, "type": ACCESS_TOKEN_TYPE}
    return _sign(claims, timedelta(minutes=expires_minutes), secret_key, algorithm)


def create_refresh_token(
    subject: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_days: int = 7,
) -> str:
    """Sign a refresh token for ``subject``."""
    claims = {"sub": subject, "type": REFRESH_TOKEN_TYPE}
    return _sign(claims, timedelta(days=expires_days), secret_key, algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> dict:
    """Verify the signature and expiry of ``token`` and return its claims.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is malformed or badly signed.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])
