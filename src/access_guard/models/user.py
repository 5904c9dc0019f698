"""User model for authentication and role-based access control."""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from access_guard.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin


class UserRole(enum.StrEnum):
    """Account role."""

    RESIDENT = "resident"
    ADMIN = "admin"
    SECURITY = "security"
    SUPER_ADMIN = "super_admin"


class AccountStatus(enum.StrEnum):
    """Lifecycle status shared by accounts and resident profiles."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(Base, UUIDMixin, TimestampMixin):
    """An account: resident, administrator, or security staff member."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.RESIDENT)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=AccountStatus.ACTIVE)
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    resident_profile: Mapped["Resident"] = relationship(  # noqa: F821
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("role IN ('resident', 'admin', 'security', 'super_admin')", name="ck_users_role"),
        CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_users_status"),
        Index("ix_users_role", "role"),
        Index("ix_users_status", "status"),
    )

    @property
    def is_active(self) -> bool:
        """Only active accounts may authenticate."""
        return self.status == AccountStatus.ACTIVE
