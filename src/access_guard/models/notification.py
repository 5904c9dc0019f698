"""Notification model — per-user inbox entries."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from access_guard.models.base import Base, JSONType, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class NotificationType(enum.StrEnum):
    """Notification category."""

    INFO = "info"
    ALERT = "alert"
    EMERGENCY = "emergency"
    SUCCESS = "success"
    WARNING = "warning"


class NotificationPriority(enum.StrEnum):
    """Notification priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Notification(Base, UUIDMixin, TimestampMixin):
    """An inbox entry for a single user.

    Rows past ``expires_at`` are treated as absent by every read and removed
    by the periodic purge.
    """

    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default=NotificationPriority.MEDIUM)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type IN ('info', 'alert', 'emergency', 'success', 'warning')",
            name="ck_notifications_type",
        ),
        CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_notifications_priority",
        ),
        Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),
        Index("ix_notifications_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once ``expires_at`` has passed."""
        return self.expires_at is not None and self.expires_at <= (now or utcnow())
