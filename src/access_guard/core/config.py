"""Runtime settings for the API, the CLI and Alembic.

Everything comes from the environment (or a local ``.env``); only
``DATABASE_URL`` and ``JWT_SECRET_KEY`` are required.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_url: str = Field(
        description="postgresql+asyncpg://... in production, sqlite+aiosqlite://... for local runs",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema to run in (per-deployment isolation)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is not None and not _SCHEMA_NAME.match(v):
            msg = f"Invalid database_schema: must match {_SCHEMA_NAME.pattern}"
            raise ValueError(msg)
        return v

    # Sessions
    jwt_secret_key: str = Field(min_length=32, description="HMAC key for access and refresh tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_minutes: int = Field(default=30, gt=0, description="Access token lifetime")
    jwt_refresh_token_expire_days: int = Field(default=7, gt=0, description="Refresh token lifetime")

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: str | None = Field(default=None, description="Enables the rotating access-guard.log file when set")

    # Web client
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Origin of the resident/security web client; always allowed by CORS",
    )
    cors_origins: str = Field(default="", description="Extra allowed origins, comma-separated")
    cors_origin_regex: str = Field(default="", description="Pattern for further allowed origins")

    @property
    def cors_origin_list(self) -> list[str]:
        """Front-end URL plus the extra origins, trailing slashes dropped, first occurrence kept."""
        origins: list[str] = []
        for origin in [self.frontend_url, *_split_csv(self.cors_origins)]:
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    # Notifications
    notification_purge_enabled: bool = Field(
        default=True,
        description="Run the in-process loop that deletes expired notifications",
    )
    notification_purge_interval: int = Field(default=300, ge=60, description="Seconds between purge passes")

    # HTTP surface
    environment: str = Field(default="production", description="Reported by /info")
    api_v1_prefix: str = Field(default="/api/v1")
    default_page_size: int = Field(default=50, gt=0, le=200)
    rate_limit_requests: int = Field(default=100, gt=0, description="Requests allowed per client IP per window")
    rate_limit_window_seconds: int = Field(default=900, gt=0)
    trusted_proxy_headers: str = Field(
        default="X-Forwarded-For,X-Real-IP",
        description="Headers carrying the real client IP, in priority order, comma-separated",
    )

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        return _split_csv(self.trusted_proxy_headers)


def get_settings() -> Settings:
    """Read settings from the environment (not cached, so tests can patch the environment)."""
    return Settings()  # type: ignore[call-arg]
