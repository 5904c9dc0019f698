"""Domain error taxonomy.

Services raise these; the API layer turns them into the standard
``{"success": false, "error": ...}`` envelope using ``status_code``.
"""

from typing import Any


class AccessGuardError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(AccessGuardError):
    """Missing or malformed input."""

    status_code = 400


class NotFoundError(AccessGuardError):
    """A referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404


class ForbiddenError(AccessGuardError):
    """Role or ownership check failed."""

    status_code = 403


class ConflictError(AccessGuardError):
    """Uniqueness violation, e.g. duplicate email or second resident profile."""

    status_code = 409


class InvalidTransitionError(AccessGuardError):
    """A state-machine rule was violated."""

    status_code = 409


class CodeExpiredError(AccessGuardError):
    """Guest code is outside its validity window."""

    status_code = 400


class CodeAlreadyUsedError(AccessGuardError):
    """Guest code has no remaining uses."""

    status_code = 409


class GenerationExhaustedError(AccessGuardError):
    """No unique guest code could be generated within the attempt bound."""

    status_code = 503
