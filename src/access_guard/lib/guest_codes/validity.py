"""Pure guest-code validity rules.

A code is usable iff its stored status is ``active``, ``now`` lies inside
``[valid_from, valid_until]`` and ``usage_count < max_usage``. Expiry is
computed here rather than written back on read.
"""

import enum
from datetime import datetime


class CodeStatus(enum.StrEnum):
    """Guest code lifecycle status."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    REVOKED = "revoked"


def is_within_window(valid_from: datetime, valid_until: datetime, now: datetime) -> bool:
    """Inclusive window check."""
    return valid_from <= now <= valid_until


def is_code_usable(
    status: str,
    valid_from: datetime,
    valid_until: datetime,
    usage_count: int,
    max_usage: int,
    now: datetime,
) -> bool:
    """Return True if a code with these fields would be accepted at ``now``."""
    return (
        status == CodeStatus.ACTIVE
        and is_within_window(valid_from, valid_until, now)
        and usage_count < max_usage
    )


def effective_status(status: str, valid_until: datetime, now: datetime) -> CodeStatus:
    """Status as it should be reported at ``now``.

    An ``active`` code past ``valid_until`` reads as ``expired`` even if the
    stored row has not been settled yet.
    """
    if status == CodeStatus.ACTIVE and now > valid_until:
        return CodeStatus.EXPIRED
    return CodeStatus(status)
