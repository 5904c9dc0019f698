"""User management Pydantic v2 schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from access_guard.schemas.resident import ResidentResponse

_ROLE_PATTERN = "^(resident|admin|security|super_admin)$"
_STATUS_PATTERN = "^(active|inactive|suspended)$"


class UserCreateRequest(BaseModel):
    """Request to create a new account.

    ``unit_number`` and ``block`` are only used for ``resident`` accounts;
    when both are given a resident profile is created alongside the user.
    """

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(default="", max_length=30)
    role: str = Field(pattern=_ROLE_PATTERN)
    password: str = Field(min_length=6)
    unit_number: str | None = Field(default=None, max_length=20)
    block: str | None = Field(default=None, max_length=50)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserUpdateRequest(BaseModel):
    """Admin update of an account (all fields optional)."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    role: str | None = Field(default=None, pattern=_ROLE_PATTERN)
    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)
    unit_number: str | None = Field(default=None, max_length=20)
    block: str | None = Field(default=None, max_length=50)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None


class ProfileUpdateRequest(BaseModel):
    """Self-service profile update."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None


class UserResponse(BaseModel):
    """Account information (never includes the password hash)."""

    id: UUID
    name: str
    email: str
    phone: str
    role: str
    status: str
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    unit_number: str | None = None
    block: str | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_user(cls, user: object) -> "UserResponse":
        """Build a response, projecting unit/block from a resident profile."""
        data = cls.model_validate(user)
        profile = getattr(user, "resident_profile", None)
        if profile is not None:
            data.unit_number = profile.unit_number
            data.block = profile.block
        return data


class UserDetailResponse(BaseModel):
    """Account plus its resident profile, if any."""

    user: UserResponse
    resident_profile: ResidentResponse | None = None
