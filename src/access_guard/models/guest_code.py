"""GuestCode model — a time- and use-bounded credential issued by a resident.

Codes are never deleted; used, expired and revoked codes remain for audit.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.lib.guest_codes import CodeStatus, effective_status, is_code_usable
from access_guard.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class GuestCode(Base, UUIDMixin, TimestampMixin):
    """A PIN or QR code admitting one named guest.

    Attributes:
        code: Unique code string (6-digit PIN or ``QR_`` + 16 hex).
        code_type: ``PIN`` or ``QR``.
        resident_id: Issuing resident profile (checked by the service, not a DB constraint).
        valid_from / valid_until: Inclusive validity window.
        usage_count / max_usage: The code is exhausted once the count reaches the max.
        status: Stored lifecycle status; see :attr:`current_status` for the
            value with lazy expiry applied.
    """

    __tablename__ = "guest_codes"

    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    code_type: Mapped[str] = mapped_column(String(3), nullable=False)
    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    guest_name: Mapped[str] = mapped_column(String(100), nullable=False)
    purpose: Mapped[str | None] = mapped_column(String(200), nullable=True)
    valid_from: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    valid_until: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=CodeStatus.ACTIVE)
    used_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_usage: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    resident: Mapped["Resident"] = relationship(  # noqa: F821
        primaryjoin="foreign(GuestCode.resident_id) == Resident.id",
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint("code_type IN ('PIN', 'QR')", name="ck_guest_codes_code_type"),
        CheckConstraint("status IN ('active', 'used', 'expired', 'revoked')", name="ck_guest_codes_status"),
        CheckConstraint("usage_count >= 0", name="ck_guest_codes_usage_count"),
        CheckConstraint("max_usage >= 1", name="ck_guest_codes_max_usage"),
        Index("ix_guest_codes_resident_id", "resident_id"),
        Index("ix_guest_codes_valid_until", "valid_until"),
        Index("ix_guest_codes_status", "status"),
        Index("ix_guest_codes_code_type", "code_type"),
    )

    @property
    def current_status(self) -> CodeStatus:
        """Stored status with lazy expiry applied at the current time."""
        return effective_status(self.status, self.valid_until, utcnow())

    def is_usable(self, now: datetime | None = None) -> bool:
        """True if the code would be accepted at ``now`` (default: current time)."""
        return is_code_usable(
            self.status,
            self.valid_from,
            self.valid_until,
            self.usage_count,
            self.max_usage,
            now or utcnow(),
        )
