"""AccessLog model for the append-only record of gate events."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.models.base import Base, JSONType, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class AccessPoint(enum.StrEnum):
    """Physical entry location."""

    MAIN_GATE = "main_gate"
    SIDE_GATE = "side_gate"
    EMERGENCY_EXIT = "emergency_exit"
    DELIVERY_ENTRANCE = "delivery_entrance"


class AccessResult(enum.StrEnum):
    """Outcome of an access attempt."""

    SUCCESS = "success"
    FAILURE = "failure"
    DENIED = "denied"


class AccessMethod(enum.StrEnum):
    """How the subject presented at the access point."""

    QR = "QR"
    PIN = "PIN"
    MANUAL = "manual"
    KEYCARD = "keycard"
    BIOMETRIC = "biometric"


class AccessLog(Base, UUIDMixin, TimestampMixin):
    """Immutable record of an access event. Write-only (no updates or deletes).

    Every reference is optional; a denied verification of an unknown code
    carries none of them.
    """

    __tablename__ = "access_logs"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    guest_code_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("guest_codes.id", ondelete="SET NULL"),
        nullable=True,
    )
    visit_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("guest_visits.id", ondelete="SET NULL"),
        nullable=True,
    )
    delivery_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("deliveries.id", ondelete="SET NULL"),
        nullable=True,
    )
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    access_point: Mapped[str] = mapped_column(String(20), nullable=False, default=AccessPoint.MAIN_GATE)
    result: Mapped[str] = mapped_column(String(10), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False, default=AccessMethod.MANUAL)
    details: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    security_notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    user: Mapped["User | None"] = relationship(lazy="selectin", viewonly=True)  # noqa: F821
    guest_code: Mapped["GuestCode | None"] = relationship(lazy="selectin", viewonly=True)  # noqa: F821
    visit: Mapped["GuestVisit | None"] = relationship(lazy="selectin", viewonly=True)  # noqa: F821
    delivery: Mapped["Delivery | None"] = relationship(lazy="selectin", viewonly=True)  # noqa: F821

    __table_args__ = (
        CheckConstraint(
            "access_point IN ('main_gate', 'side_gate', 'emergency_exit', 'delivery_entrance')",
            name="ck_access_logs_access_point",
        ),
        CheckConstraint("result IN ('success', 'failure', 'denied')", name="ck_access_logs_result"),
        CheckConstraint(
            "method IN ('QR', 'PIN', 'manual', 'keycard', 'biometric')",
            name="ck_access_logs_method",
        ),
        Index("ix_access_logs_timestamp", "timestamp"),
        Index("ix_access_logs_user_timestamp", "user_id", "timestamp"),
        Index("ix_access_logs_guest_code_id", "guest_code_id"),
        Index("ix_access_logs_visit_id", "visit_id"),
        Index("ix_access_logs_delivery_id", "delivery_id"),
        Index("ix_access_logs_access_point_timestamp", "access_point", "timestamp"),
        Index("ix_access_logs_result_timestamp", "result", "timestamp"),
    )
