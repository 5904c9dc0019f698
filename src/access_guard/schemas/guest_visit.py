"""Pydantic v2 schemas for guest visits."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from access_guard.models.guest_visit import VisitStatus
from access_guard.schemas.resident import ResidentSummary, VehicleInfo


class VisitCreateRequest(BaseModel):
    """Book a visit against an existing guest code."""

    guest_code_id: uuid.UUID
    guest_name: str = Field(min_length=1, max_length=100)
    purpose: str | None = Field(default=None, max_length=200)
    vehicle_info: VehicleInfo | None = None
    number_of_guests: int = Field(default=1, ge=1)
    notes: str | None = Field(default=None, max_length=500)


class VisitActionRequest(BaseModel):
    """Optional body for check-in / check-out."""

    security_notes: str | None = Field(default=None, max_length=500)


class GuestCodeSummary(BaseModel):
    """Code projection attached to visits."""

    id: uuid.UUID
    code: str
    code_type: str
    valid_until: datetime

    model_config = {"from_attributes": True}


class VisitResponse(BaseModel):
    """A guest visit with resident and code projections."""

    id: uuid.UUID
    resident_id: uuid.UUID
    guest_code_id: uuid.UUID
    guest_name: str
    visit_date: datetime
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    vehicle_info: dict | None = None
    number_of_guests: int
    purpose: str | None = None
    status: VisitStatus
    notes: str | None = None
    security_notes: str | None = None
    created_at: datetime
    resident: ResidentSummary | None = None
    guest_code: GuestCodeSummary | None = None

    model_config = {"from_attributes": True}
