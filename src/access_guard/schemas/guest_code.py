"""Pydantic v2 schemas for guest codes and gate verification."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from access_guard.lib.guest_codes import CodeStatus, CodeType
from access_guard.models.access_log import AccessPoint
from access_guard.models.base import as_utc
from access_guard.schemas.resident import ResidentSummary


class GuestCodeCreateRequest(BaseModel):
    """Issue a new guest code for the calling resident."""

    guest_name: str = Field(min_length=1, max_length=100)
    code_type: CodeType
    valid_until: datetime
    purpose: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("valid_until")
    @classmethod
    def validate_valid_until(cls, v: datetime) -> datetime:
        return as_utc(v)


class VerifyRequest(BaseModel):
    """A code presented at the gate."""

    code: str = Field(min_length=1, max_length=32)
    access_point: AccessPoint = AccessPoint.MAIN_GATE


class GuestCodeResponse(BaseModel):
    """Guest code as returned to residents and staff.

    ``status`` reports lazy expiry: an active code past ``valid_until``
    reads as ``expired``.
    """

    id: uuid.UUID
    code: str
    code_type: CodeType
    resident_id: uuid.UUID
    guest_name: str
    purpose: str | None = None
    valid_from: datetime
    valid_until: datetime
    status: CodeStatus = Field(validation_alias="current_status")
    used_at: datetime | None = None
    revoked_at: datetime | None = None
    usage_count: int
    max_usage: int
    notes: str | None = None
    created_at: datetime
    resident: ResidentSummary | None = None

    model_config = {"from_attributes": True, "populate_by_name": True}


class VerifiedResident(BaseModel):
    """Who the guest is visiting."""

    id: uuid.UUID
    unit_number: str
    block: str
    name: str
    email: str
    phone: str


class VerifyResponse(BaseModel):
    """Result of a successful verification."""

    guest_code_id: uuid.UUID
    guest_name: str
    purpose: str | None = None
    code_type: CodeType
    usage_count: int
    max_usage: int
    resident: VerifiedResident
