"""Delivery model — a resident-authorized delivery window and its outcome."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.models.base import Base, JSONType, TimestampMixin, UTCDateTime, UUIDMixin


class DeliveryStatus(enum.StrEnum):
    """Delivery status. Any status may move to any other."""

    AUTHORIZED = "authorized"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Delivery(Base, UUIDMixin, TimestampMixin):
    """An authorized delivery.

    Attributes:
        resident_id: Receiving resident profile.
        authorized_by_id: Account that authorized the delivery.
        items: List of ``{"description", "quantity"}``.
        delivery_person: ``{"name", "phone", "company"}`` or None.
    """

    __tablename__ = "deliveries"

    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    delivery_company: Mapped[str] = mapped_column(String(100), nullable=False)
    tracking_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    authorized_by_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    expected_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    delivered_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=DeliveryStatus.AUTHORIZED)
    items: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    delivery_person: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    resident: Mapped["Resident"] = relationship(  # noqa: F821
        primaryjoin="foreign(Delivery.resident_id) == Resident.id",
        lazy="selectin",
        viewonly=True,
    )
    authorized_by: Mapped["User | None"] = relationship(  # noqa: F821
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('authorized', 'delivered', 'failed', 'cancelled')",
            name="ck_deliveries_status",
        ),
        Index("ix_deliveries_resident_status", "resident_id", "status"),
        Index("ix_deliveries_expected_date", "expected_date"),
        Index("ix_deliveries_status_expected_date", "status", "expected_date"),
        Index("ix_deliveries_authorized_by_id", "authorized_by_id"),
        Index("ix_deliveries_tracking_number", "tracking_number"),
    )
