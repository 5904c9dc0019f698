"""Pydantic v2 schemas for resident profiles."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class VehicleInfo(BaseModel):
    """Vehicle description; plate numbers are stored upper-case."""

    make: str | None = Field(default=None, max_length=50)
    model: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=30)
    plate_number: str | None = Field(default=None, max_length=20)

    @field_validator("plate_number")
    @classmethod
    def upper_plate(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else v


class EmergencyContact(BaseModel):
    """One emergency contact."""

    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=30)
    relationship: str = Field(min_length=1, max_length=50)


class UserSummary(BaseModel):
    """Contact projection of the owning account."""

    id: uuid.UUID
    name: str
    email: str
    phone: str

    model_config = {"from_attributes": True}


class ResidentSummary(BaseModel):
    """Unit/block projection attached to codes, visits and deliveries."""

    id: uuid.UUID
    unit_number: str
    block: str

    model_config = {"from_attributes": True}


class ResidentCreateRequest(BaseModel):
    """Create a resident profile for an existing resident account."""

    user_id: uuid.UUID
    unit_number: str = Field(min_length=1, max_length=20)
    block: str = Field(min_length=1, max_length=50)
    vehicle_info: VehicleInfo | None = None
    emergency_contacts: list[EmergencyContact] = Field(default_factory=list)
    profile_photo: str | None = Field(default=None, max_length=500)
    move_in_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("unit_number")
    @classmethod
    def upper_unit(cls, v: str) -> str:
        return v.strip().upper()


class ResidentUpdateRequest(BaseModel):
    """Partial update; residents may only send the owner-editable fields."""

    unit_number: str | None = Field(default=None, min_length=1, max_length=20)
    block: str | None = Field(default=None, min_length=1, max_length=50)
    vehicle_info: VehicleInfo | None = None
    emergency_contacts: list[EmergencyContact] | None = None
    profile_photo: str | None = Field(default=None, max_length=500)
    status: str | None = Field(default=None, pattern="^(active|inactive|suspended)$")
    move_in_date: datetime | None = None
    move_out_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("unit_number")
    @classmethod
    def upper_unit(cls, v: str | None) -> str | None:
        return v.strip().upper() if v is not None else None


class ResidentResponse(BaseModel):
    """Full resident profile."""

    id: uuid.UUID
    user_id: uuid.UUID
    unit_number: str
    block: str
    vehicle_info: dict | None = None
    emergency_contacts: list[dict] = Field(default_factory=list)
    profile_photo: str | None = None
    status: str
    move_in_date: datetime
    move_out_date: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None

    model_config = {"from_attributes": True}
