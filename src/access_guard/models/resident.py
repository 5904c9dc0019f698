"""Resident profile — one-to-one extension of a resident account."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.models.base import Base, JSONType, TimestampMixin, UTCDateTime, UUIDMixin, utcnow
from access_guard.models.user import AccountStatus


class Resident(Base, UUIDMixin, TimestampMixin):
    """Unit, block, vehicle and emergency-contact data for a resident account.

    Attributes:
        user_id: Owning account; unique, so each account has at most one profile.
        unit_number: Unit identifier, stored upper-case.
        vehicle_info: ``{"make", "model", "color", "plate_number"}`` or None.
        emergency_contacts: Ordered list of ``{"name", "phone", "relationship"}``.
    """

    __tablename__ = "residents"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    unit_number: Mapped[str] = mapped_column(String(20), nullable=False)
    block: Mapped[str] = mapped_column(String(50), nullable=False)
    vehicle_info: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    emergency_contacts: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    profile_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=AccountStatus.ACTIVE)
    move_in_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    move_out_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(  # noqa: F821
        back_populates="resident_profile",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_residents_status"),
        Index("ix_residents_unit_number", "unit_number"),
        Index("ix_residents_block", "block"),
        Index("ix_residents_status", "status"),
    )
