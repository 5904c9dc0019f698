"""GuestVisit model — one guest's physical visit, bound to a guest code."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.models.base import Base, JSONType, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class VisitStatus(enum.StrEnum):
    """Visit lifecycle status."""

    SCHEDULED = "scheduled"
    ARRIVED = "arrived"
    DEPARTED = "departed"
    CANCELLED = "cancelled"


# Allowed source states for each transition.
CHECK_IN_FROM: frozenset[str] = frozenset({VisitStatus.SCHEDULED})
CHECK_OUT_FROM: frozenset[str] = frozenset({VisitStatus.ARRIVED})
CANCEL_FROM: frozenset[str] = frozenset({VisitStatus.SCHEDULED, VisitStatus.ARRIVED})
ACTIVE_VISIT_STATUSES: frozenset[str] = frozenset({VisitStatus.SCHEDULED, VisitStatus.ARRIVED})


class GuestVisit(Base, UUIDMixin, TimestampMixin):
    """A scheduled or actual guest visit.

    Attributes:
        resident_id: Resident being visited, copied from the guest code.
        guest_code_id: The code the visit was booked against.
        vehicle_info: ``{"make", "model", "color", "plate_number"}`` or None.
        status: ``scheduled -> arrived -> departed``; ``cancelled`` from
            either non-terminal state.
    """

    __tablename__ = "guest_visits"

    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    guest_code_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("guest_codes.id"),
        nullable=False,
    )
    guest_name: Mapped[str] = mapped_column(String(100), nullable=False)
    visit_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    check_in_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    check_out_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    vehicle_info: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    purpose: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=VisitStatus.SCHEDULED)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    security_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    resident: Mapped["Resident"] = relationship(  # noqa: F821
        primaryjoin="foreign(GuestVisit.resident_id) == Resident.id",
        lazy="selectin",
        viewonly=True,
    )
    guest_code: Mapped["GuestCode"] = relationship(  # noqa: F821
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'arrived', 'departed', 'cancelled')",
            name="ck_guest_visits_status",
        ),
        CheckConstraint("number_of_guests >= 1", name="ck_guest_visits_number_of_guests"),
        Index("ix_guest_visits_resident_visit_date", "resident_id", "visit_date"),
        Index("ix_guest_visits_guest_code_id", "guest_code_id"),
        Index("ix_guest_visits_status", "status"),
        Index("ix_guest_visits_check_in_time", "check_in_time"),
        Index("ix_guest_visits_check_out_time", "check_out_time"),
    )
