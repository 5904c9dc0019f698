"""Pydantic v2 schemas for deliveries."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from access_guard.models.access_log import AccessPoint
from access_guard.models.delivery import DeliveryStatus
from access_guard.schemas.resident import ResidentSummary


class DeliveryItem(BaseModel):
    description: str = Field(min_length=1, max_length=200)
    quantity: int = Field(default=1, ge=1)


class DeliveryPerson(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    company: str | None = Field(default=None, max_length=100)


class DeliveryCreateRequest(BaseModel):
    """Authorize an expected delivery for the calling resident."""

    company: str = Field(min_length=1, max_length=100)
    expected_date: datetime
    tracking_number: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)
    items: list[DeliveryItem] = Field(default_factory=list)
    delivery_person: DeliveryPerson | None = None


class DeliveryStatusRequest(BaseModel):
    """Gate staff status update."""

    status: DeliveryStatus
    access_point: AccessPoint = AccessPoint.DELIVERY_ENTRANCE


class AuthorizerSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class DeliveryResponse(BaseModel):
    """A delivery with resident and authorizer projections."""

    id: uuid.UUID
    resident_id: uuid.UUID
    delivery_company: str
    tracking_number: str | None = None
    authorized_by_id: uuid.UUID | None = None
    expected_date: datetime
    delivered_at: datetime | None = None
    notes: str | None = None
    status: DeliveryStatus
    items: list[dict] = Field(default_factory=list)
    delivery_person: dict | None = None
    created_at: datetime
    resident: ResidentSummary | None = None
    authorized_by: AuthorizerSummary | None = None

    model_config = {"from_attributes": True}
