"""Verifier — decides accept / reject / expire / lockout for a submitted code."""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from enum import Enum

from otp_service.core.otp_store import OTPStore

logger = logging.getLogger(__name__)


class VerificationStatus(str, Enum):
    SUCCESS = "success"
    MISMATCH = "mismatch"
    EXPIRED = "expired"
    LOCKED_OUT = "locked_out"
    NOT_FOUND = "not_found"


MESSAGES: dict[VerificationStatus, str] = {
    VerificationStatus.SUCCESS: "OTP verified successfully",
    VerificationStatus.MISMATCH: "Invalid OTP",
    VerificationStatus.EXPIRED: "OTP has expired",
    VerificationStatus.LOCKED_OUT: "Maximum attempts exceeded",
    VerificationStatus.NOT_FOUND: "OTP not found or expired",
}


@dataclass(frozen=True)
class VerificationResult:
    """Value object returned by :meth:`Verifier.verify`."""

    status: VerificationStatus
    message: str
    attempts: int = 0

    @property
    def success(self) -> bool:
        return self.status is VerificationStatus.SUCCESS

    @classmethod
    def of(cls, status: VerificationStatus, attempts: int = 0) -> VerificationResult:
        return cls(status=status, message=MESSAGES[status], attempts=attempts)


class Verifier:
    """Applies the verification policy against an :class:`OTPStore`.

    Checks run in a fixed order: absent, expired, attempts exhausted,
    then code comparison.  Expiry and lockout are decided before the code
    is looked at, so a stale or locked record never reveals whether the
    submitted code was right.  The whole decision runs under the store
    lock, which makes concurrent verifies for one identifier linearizable.
    """

    def __init__(self, store: OTPStore) -> None:
        self._store = store

    def verify(self, identifier: str, submitted_code: str) -> VerificationResult:
        with self._store.locked():
            record = self._store.lookup(identifier)

            if record is None:
                result = VerificationResult.of(VerificationStatus.NOT_FOUND)

            elif record.is_expired(self._store.now()):
                self._store.remove(identifier)
                result = VerificationResult.of(VerificationStatus.EXPIRED, record.attempts)

            elif record.attempts >= self._store.max_attempts:
                self._store.remove(identifier)
                result = VerificationResult.of(VerificationStatus.LOCKED_OUT, record.attempts)

            elif not _codes_match(submitted_code, record.code):
                attempts = self._store.record_failed_attempt(identifier)
                result = VerificationResult.of(VerificationStatus.MISMATCH, attempts)

            else:
                self._store.remove(identifier)
                result = VerificationResult.of(VerificationStatus.SUCCESS, record.attempts)

        logger.info(
            "OTP verification for %s: %s (attempts=%d)",
            identifier,
            result.status.value,
            result.attempts,
        )
        return result


def _codes_match(submitted: str, expected: str) -> bool:
    # Constant-time; compare_digest rejects non-ASCII str, so compare bytes.
    return hmac.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))
