"""Unit tests for guest code, delivery and account request/response schemas."""

import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from access_guard.models.base import utcnow
from access_guard.models.guest_code import GuestCode
from access_guard.schemas.delivery import DeliveryCreateRequest, DeliveryStatusRequest
from access_guard.schemas.guest_code import GuestCodeCreateRequest, GuestCodeResponse, VerifyRequest
from access_guard.schemas.user import UserCreateRequest


def _code(**overrides: object) -> GuestCode:
    now = utcnow()
    fields = {
        "id": uuid.uuid4(),
        "code": "482915",
        "code_type": "PIN",
        "resident_id": uuid.uuid4(),
        "guest_name": "Gail Guest",
        "valid_from": now - timedelta(hours=1),
        "valid_until": now + timedelta(hours=1),
        "status": "active",
        "usage_count": 0,
        "max_usage": 1,
        "created_at": now,
    }
    fields.update(overrides)
    return GuestCode(**fields)


class TestGuestCodeSchemas:
    def test_unknown_code_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GuestCodeCreateRequest(guest_name="G", code_type="NFC", valid_until=utcnow())

    def test_blank_guest_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GuestCodeCreateRequest(guest_name="", code_type="QR", valid_until=utcnow())

    def test_offset_less_valid_until_tagged_utc(self) -> None:
        request = GuestCodeCreateRequest(guest_name="G", code_type="PIN", valid_until="2026-10-19T10:00:00")
        assert request.valid_until == datetime(2026, 10, 19, 10, 0, tzinfo=UTC)
        assert request.valid_until.tzinfo is UTC

    def test_offset_valid_until_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        request = GuestCodeCreateRequest(
            guest_name="G", code_type="PIN", valid_until=datetime(2026, 10, 19, 12, 0, tzinfo=plus_two)
        )
        assert request.valid_until == datetime(2026, 10, 19, 10, 0, tzinfo=UTC)
        assert request.valid_until.tzinfo is UTC

    def test_verify_defaults_to_main_gate(self) -> None:
        assert VerifyRequest(code="482915").access_point == "main_gate"

    def test_response_reports_live_status(self) -> None:
        resp = GuestCodeResponse.model_validate(_code())
        assert resp.status == "active"

    def test_response_reports_lazy_expiry(self) -> None:
        """An active code past its window reads as expired without touching the row."""
        code = _code(valid_until=utcnow() - timedelta(minutes=1))
        resp = GuestCodeResponse.model_validate(code)
        assert resp.status == "expired"
        assert code.status == "active"

    def test_terminal_status_kept(self) -> None:
        code = _code(status="revoked", valid_until=utcnow() - timedelta(minutes=1))
        assert GuestCodeResponse.model_validate(code).status == "revoked"


class TestDeliverySchemas:
    def test_items_default_empty(self) -> None:
        req = DeliveryCreateRequest(company="Parcel Express", expected_date=utcnow())
        assert req.items == []

    def test_item_quantity_positive(self) -> None:
        with pytest.raises(ValidationError):
            DeliveryCreateRequest(
                company="Parcel Express", expected_date=utcnow(), items=[{"description": "Box", "quantity": 0}]
            )

    @pytest.mark.parametrize("status", ["authorized", "delivered", "failed", "cancelled"])
    def test_known_statuses(self, status: str) -> None:
        req = DeliveryStatusRequest(status=status)
        assert req.status == status
        assert req.access_point == "delivery_entrance"

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DeliveryStatusRequest(status="lost")


class TestUserCreateRequest:
    def test_email_lowercased(self) -> None:
        req = UserCreateRequest(name="Ada", email="Ada@Example.com", role="admin", password="secret1")
        assert req.email == "ada@example.com"

    @pytest.mark.parametrize("role", ["janitor", "ADMIN", ""])
    def test_unknown_role_rejected(self, role: str) -> None:
        with pytest.raises(ValidationError):
            UserCreateRequest(name="X", email="x@example.com", role=role, password="secret1")

    def test_short_password_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UserCreateRequest(name="X", email="x@example.com", role="security", password="123")
