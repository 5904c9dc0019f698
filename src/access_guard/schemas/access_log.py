"""Pydantic v2 schemas for access logs and statistics."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from access_guard.models.access_log import AccessMethod, AccessPoint, AccessResult


class AccessLogCreateRequest(BaseModel):
    """Manual gate event recorded by staff."""

    result: AccessResult
    method: AccessMethod = AccessMethod.MANUAL
    access_point: AccessPoint = AccessPoint.MAIN_GATE
    user_id: uuid.UUID | None = None
    guest_code_id: uuid.UUID | None = None
    visit_id: uuid.UUID | None = None
    delivery_id: uuid.UUID | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    security_notes: str | None = Field(default=None, max_length=500)


class LogUserSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str

    model_config = {"from_attributes": True}


class LogGuestCodeSummary(BaseModel):
    id: uuid.UUID
    guest_name: str
    code_type: str

    model_config = {"from_attributes": True}


class LogVisitSummary(BaseModel):
    id: uuid.UUID
    guest_name: str
    purpose: str | None = None

    model_config = {"from_attributes": True}


class LogDeliverySummary(BaseModel):
    id: uuid.UUID
    delivery_company: str
    tracking_number: str | None = None

    model_config = {"from_attributes": True}


class AccessLogResponse(BaseModel):
    """An access event with related-entity projections."""

    id: uuid.UUID
    timestamp: datetime
    access_point: AccessPoint
    result: AccessResult
    method: AccessMethod
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    security_notes: str | None = None
    user_id: uuid.UUID | None = None
    guest_code_id: uuid.UUID | None = None
    visit_id: uuid.UUID | None = None
    delivery_id: uuid.UUID | None = None
    user: LogUserSummary | None = None
    guest_code: LogGuestCodeSummary | None = None
    visit: LogVisitSummary | None = None
    delivery: LogDeliverySummary | None = None

    model_config = {"from_attributes": True}


class MethodBreakdown(BaseModel):
    method: str
    access_point: str
    count: int


class AccessStatisticsBucket(BaseModel):
    """Counts for one result value, broken down by method and access point."""

    result: str
    total: int
    methods: list[MethodBreakdown]
