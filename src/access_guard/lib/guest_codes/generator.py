"""Guest code string generation.

PIN codes are six decimal digits; QR codes are a fixed prefix followed by
sixteen upper-case hex characters from the OS CSPRNG.
"""

import enum
import re
import secrets
from collections.abc import Awaitable, Callable

PIN_MIN = 100_000
PIN_MAX = 999_999
QR_PREFIX = "QR_"
QR_HEX_BYTES = 8
MAX_GENERATION_ATTEMPTS = 10

PIN_PATTERN = re.compile(r"^[1-9]\d{5}$")
QR_PATTERN = re.compile(rf"^{QR_PREFIX}[0-9A-F]{{{QR_HEX_BYTES * 2}}}$")


class CodeType(enum.StrEnum):
    """Guest code format."""

    PIN = "PIN"
    QR = "QR"


class UnknownCodeTypeError(ValueError):
    """Raised for a code type other than PIN or QR."""


class CodeSpaceExhaustedError(RuntimeError):
    """Raised when every candidate collided with an existing code."""


def generate_pin() -> str:
    """Return a PIN drawn uniformly from [100000, 999999]."""
    return str(PIN_MIN + secrets.randbelow(PIN_MAX - PIN_MIN + 1))


def generate_qr() -> str:
    """Return ``QR_`` followed by 16 upper-case hex characters."""
    return QR_PREFIX + secrets.token_hex(QR_HEX_BYTES).upper()


def generate_code(code_type: str) -> str:
    """Generate one candidate code of ``code_type`` (no uniqueness check).

    Raises:
        UnknownCodeTypeError: If ``code_type`` is not PIN or QR.
    """
    if code_type == CodeType.PIN:
        return generate_pin()
    if code_type == CodeType.QR:
        return generate_qr()
    msg = f"Invalid code type: {code_type!r}"
    raise UnknownCodeTypeError(msg)


def matches_code_format(code: str, code_type: str) -> bool:
    """Check whether ``code`` has the shape of a ``code_type`` code."""
    if code_type == CodeType.PIN:
        return bool(PIN_PATTERN.match(code))
    if code_type == CodeType.QR:
        return bool(QR_PATTERN.match(code))
    return False


async def generate_unique_code(
    code_type: str,
    exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = MAX_GENERATION_ATTEMPTS,
) -> str:
    """Generate a code that ``exists`` reports as unused.

    Args:
        code_type: PIN or QR.
        exists: Async predicate returning True when a code is already stored.
        max_attempts: Number of candidates to try before giving up.

    Returns:
        A code string not currently stored.

    Raises:
        UnknownCodeTypeError: If ``code_type`` is not PIN or QR.
        CodeSpaceExhaustedError: If all ``max_attempts`` candidates collided.
    """
    for _ in range(max_attempts):
        candidate = generate_code(code_type)
        if not await exists(candidate):
            return candidate
    msg = f"Unable to generate unique {code_type} code after {max_attempts} attempts"
    raise CodeSpaceExhaustedError(msg)
