"""Role groups and the single capability check used by routes and services."""

from collections.abc import Iterable

from access_guard.core.errors import ForbiddenError

RESIDENT = "resident"
ADMIN = "admin"
SECURITY = "security"
SUPER_ADMIN = "super_admin"

ALL_ROLES: frozenset[str] = frozenset({RESIDENT, ADMIN, SECURITY, SUPER_ADMIN})
ADMIN_ROLES: frozenset[str] = frozenset({ADMIN, SUPER_ADMIN})
# Roles that operate the gate: verify codes, check guests in/out, settle deliveries.
STAFF_ROLES: frozenset[str] = frozenset({SECURITY, SUPER_ADMIN})
NON_RESIDENT_ROLES: frozenset[str] = frozenset({ADMIN, SECURITY, SUPER_ADMIN})


def check_capability(role: str, allowed_roles: Iterable[str] = (), *, is_owner: bool = False) -> bool:
    """Return True if ``role`` is in ``allowed_roles`` or the caller owns the resource.

    Args:
        role: The acting user's role.
        allowed_roles: Roles granted the capability regardless of ownership.
        is_owner: Result of the resource ownership predicate for this caller.
    """
    return is_owner or role in frozenset(allowed_roles)


def require_capability(
    role: str,
    allowed_roles: Iterable[str] = (),
    *,
    is_owner: bool = False,
    message: str = "Access denied",
) -> None:
    """Raise :class:`ForbiddenError` unless :func:`check_capability` passes."""
    if not check_capability(role, allowed_roles, is_owner=is_owner):
        raise ForbiddenError(message)
