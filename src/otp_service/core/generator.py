"""OTP code generator."""

from __future__ import annotations

import secrets

CODE_MIN = 100_000
CODE_MAX = 999_999


def generate_code() -> str:
    """Return a 6-digit numeric code, uniform over ``[100000, 999999]``.

    Uses :mod:`secrets` so codes are not predictable across issuances.
    """
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
