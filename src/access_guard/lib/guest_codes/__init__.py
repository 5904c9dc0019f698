"""Guest code library — code generation and validity rules.

Public API:
    - ``CodeType`` / ``CodeStatus``: code format and lifecycle enums
    - ``generate_code``: One candidate PIN or QR code
    - ``generate_unique_code``: Retry generation against a collision predicate
    - ``matches_code_format``: Shape check for a code string
    - ``is_code_usable``: The single usability rule
    - ``effective_status``: Status with lazy expiry applied
"""

from access_guard.lib.guest_codes.generator import (
    MAX_GENERATION_ATTEMPTS,
    PIN_MAX,
    PIN_MIN,
    QR_PREFIX,
    CodeSpaceExhaustedError,
    CodeType,
    UnknownCodeTypeError,
    generate_code,
    generate_pin,
    generate_qr,
    generate_unique_code,
    matches_code_format,
)
from access_guard.lib.guest_codes.validity import (
    CodeStatus,
    effective_status,
    is_code_usable,
    is_within_window,
)

__all__ = [
    "MAX_GENERATION_ATTEMPTS",
    "PIN_MAX",
    "PIN_MIN",
    "QR_PREFIX",
    "CodeSpaceExhaustedError",
    "CodeStatus",
    "CodeType",
    "UnknownCodeTypeError",
    "effective_status",
    "generate_code",
    "generate_pin",
    "generate_qr",
    "generate_unique_code",
    "is_code_usable",
    "is_within_window",
    "matches_code_format",
]
