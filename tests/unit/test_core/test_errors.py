"""Tests for the domain error taxonomy."""

import pytest

from access_guard.core.errors import (
    AccessGuardError,
    CodeAlreadyUsedError,
    CodeExpiredError,
    ConflictError,
    ForbiddenError,
    GenerationExhaustedError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error_class", "status_code"),
    [
        (ValidationError, 400),
        (NotFoundError, 404),
        (ForbiddenError, 403),
        (ConflictError, 409),
        (InvalidTransitionError, 409),
        (CodeExpiredError, 400),
        (CodeAlreadyUsedError, 409),
        (GenerationExhaustedError, 503),
    ],
)
def test_status_codes(error_class: type[AccessGuardError], status_code: int) -> None:
    error = error_class("boom")
    assert isinstance(error, AccessGuardError)
    assert error.status_code == status_code
    assert error.message == "boom"
    assert str(error) == "boom"
    assert error.errors is None


def test_field_errors_carried() -> None:
    error = ValidationError("Validation errors", errors=[{"field": "email", "message": "required"}])
    assert error.errors == [{"field": "email", "message": "required"}]
