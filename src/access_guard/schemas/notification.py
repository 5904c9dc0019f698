"""Pydantic v2 schemas for notifications."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from access_guard.models.notification import NotificationPriority, NotificationType


class NotificationCreateRequest(BaseModel):
    """System/admin notification for a single user."""

    user_id: uuid.UUID
    type: NotificationType
    title: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=500)
    data: dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    expires_at: datetime | None = None


class NotificationResponse(BaseModel):
    """Inbox entry."""

    id: uuid.UUID
    user_id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
    read: bool
    read_at: datetime | None = None
    priority: NotificationPriority
    expires_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
