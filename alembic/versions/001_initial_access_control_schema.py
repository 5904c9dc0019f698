"""Initial migration: users, residents, guest codes, visits, deliveries, access logs, notifications.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # users
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False, server_default=""),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('resident', 'admin', 'security', 'super_admin')", name="ck_users_role"),
        sa.CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_users_status"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_status", "users", ["status"])

    # residents
    op.create_table(
        "residents",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("unit_number", sa.String(20), nullable=False),
        sa.Column("block", sa.String(50), nullable=False),
        sa.Column("vehicle_info", JSONB, nullable=True),
        sa.Column("emergency_contacts", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("profile_photo", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("move_in_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("move_out_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_residents_status"),
    )
    op.create_index("ix_residents_unit_number", "residents", ["unit_number"])
    op.create_index("ix_residents_block", "residents", ["block"])
    op.create_index("ix_residents_status", "residents", ["status"])

    # guest_codes
    op.create_table(
        "guest_codes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False, unique=True),
        sa.Column("code_type", sa.String(3), nullable=False),
        sa.Column("resident_id", UUID(as_uuid=True), nullable=False),
        sa.Column("guest_name", sa.String(100), nullable=False),
        sa.Column("purpose", sa.String(200), nullable=True),
        sa.Column("valid_from", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="active"),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_usage", sa.Integer, nullable=False, server_default="1"),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("code_type IN ('PIN', 'QR')", name="ck_guest_codes_code_type"),
        sa.CheckConstraint("status IN ('active', 'used', 'expired', 'revoked')", name="ck_guest_codes_status"),
        sa.CheckConstraint("usage_count >= 0", name="ck_guest_codes_usage_count"),
        sa.CheckConstraint("max_usage >= 1", name="ck_guest_codes_max_usage"),
    )
    op.create_index("ix_guest_codes_resident_id", "guest_codes", ["resident_id"])
    op.create_index("ix_guest_codes_valid_until", "guest_codes", ["valid_until"])
    op.create_index("ix_guest_codes_status", "guest_codes", ["status"])
    op.create_index("ix_guest_codes_code_type", "guest_codes", ["code_type"])

    # guest_visits
    op.create_table(
        "guest_visits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("resident_id", UUID(as_uuid=True), nullable=False),
        sa.Column("guest_code_id", UUID(as_uuid=True), sa.ForeignKey("guest_codes.id"), nullable=False),
        sa.Column("guest_name", sa.String(100), nullable=False),
        sa.Column("visit_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("vehicle_info", JSONB, nullable=True),
        sa.Column("number_of_guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("purpose", sa.String(200), nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("security_notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled', 'arrived', 'departed', 'cancelled')",
            name="ck_guest_visits_status",
        ),
        sa.CheckConstraint("number_of_guests >= 1", name="ck_guest_visits_number_of_guests"),
    )
    op.create_index("ix_guest_visits_resident_visit_date", "guest_visits", ["resident_id", "visit_date"])
    op.create_index("ix_guest_visits_guest_code_id", "guest_visits", ["guest_code_id"])
    op.create_index("ix_guest_visits_status", "guest_visits", ["status"])
    op.create_index("ix_guest_visits_check_in_time", "guest_visits", ["check_in_time"])
    op.create_index("ix_guest_visits_check_out_time", "guest_visits", ["check_out_time"])

    # deliveries
    op.create_table(
        "deliveries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("resident_id", UUID(as_uuid=True), nullable=False),
        sa.Column("delivery_company", sa.String(100), nullable=False),
        sa.Column("tracking_number", sa.String(50), nullable=True),
        sa.Column(
            "authorized_by_id",
            UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("expected_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="authorized"),
        sa.Column("items", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("delivery_person", JSONB, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('authorized', 'delivered', 'failed', 'cancelled')",
            name="ck_deliveries_status",
        ),
    )
    op.create_index("ix_deliveries_resident_status", "deliveries", ["resident_id", "status"])
    op.create_index("ix_deliveries_expected_date", "deliveries", ["expected_date"])
    op.create_index("ix_deliveries_status_expected_date", "deliveries", ["status", "expected_date"])
    op.create_index("ix_deliveries_authorized_by_id", "deliveries", ["authorized_by_id"])
    op.create_index("ix_deliveries_tracking_number", "deliveries", ["tracking_number"])

    # access_logs
    op.create_table(
        "access_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "guest_code_id",
            UUID(as_uuid=True),
            sa.ForeignKey("guest_codes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "visit_id",
            UUID(as_uuid=True),
            sa.ForeignKey("guest_visits.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "delivery_id",
            UUID(as_uuid=True),
            sa.ForeignKey("deliveries.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("access_point", sa.String(20), nullable=False, server_default="main_gate"),
        sa.Column("result", sa.String(10), nullable=False),
        sa.Column("method", sa.String(10), nullable=False, server_default="manual"),
        sa.Column("details", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("security_notes", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "access_point IN ('main_gate', 'side_gate', 'emergency_exit', 'delivery_entrance')",
            name="ck_access_logs_access_point",
        ),
        sa.CheckConstraint("result IN ('success', 'failure', 'denied')", name="ck_access_logs_result"),
        sa.CheckConstraint(
            "method IN ('QR', 'PIN', 'manual', 'keycard', 'biometric')",
            name="ck_access_logs_method",
        ),
    )
    op.create_index("ix_access_logs_timestamp", "access_logs", ["timestamp"])
    op.create_index("ix_access_logs_user_timestamp", "access_logs", ["user_id", "timestamp"])
    op.create_index("ix_access_logs_guest_code_id", "access_logs", ["guest_code_id"])
    op.create_index("ix_access_logs_visit_id", "access_logs", ["visit_id"])
    op.create_index("ix_access_logs_delivery_id", "access_logs", ["delivery_id"])
    op.create_index("ix_access_logs_access_point_timestamp", "access_logs", ["access_point", "timestamp"])
    op.create_index("ix_access_logs_result_timestamp", "access_logs", ["result", "timestamp"])

    # notifications
    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("data", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('info', 'alert', 'emergency', 'success', 'warning')",
            name="ck_notifications_type",
        ),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name="ck_notifications_priority"),
    )
    op.create_index("ix_notifications_user_read_created", "notifications", ["user_id", "read", "created_at"])
    op.create_index("ix_notifications_expires_at", "notifications", ["expires_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("access_logs")
    op.drop_table("deliveries")
    op.drop_table("guest_visits")
    op.drop_table("guest_codes")
    op.drop_table("residents")
    op.drop_table("users")
