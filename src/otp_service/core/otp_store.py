"""In-memory OTP store with expiry and attempt tracking."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

logger = logging.getLogger(__name__)

# OTP validity period in seconds
DEFAULT_TTL_SECONDS = 600  # 10 minutes
DEFAULT_MAX_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class OTPRecord:
    """One live OTP for one identifier (email address or phone number)."""

    identifier: str
    code: str
    issued_at: datetime
    expires_at: datetime
    attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class OTPStore:
    """Thread-safe in-memory OTP store keyed by identifier.

    Each identifier holds at most one record; issuing again replaces it.
    All access goes through a single re-entrant lock, so a caller can
    hold :meth:`locked` across several calls to make a read-decide-write
    sequence atomic (the verifier does exactly that).

    Records never leave the store: :meth:`lookup` returns a copy.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._records: dict[str, OTPRecord] = {}
        self._lock = threading.RLock()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_attempts = max_attempts
        self._clock = clock

    # ── Properties ───────────────────────────────────────

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock for the duration of the ``with`` block."""
        with self._lock:
            yield

    # ── Mutations ────────────────────────────────────────

    def issue(self, identifier: str, code: str) -> OTPRecord:
        """Store *code* for *identifier*, replacing any existing record."""
        with self._lock:
            now = self.now()
            record = OTPRecord(
                identifier=identifier,
                code=code,
                issued_at=now,
                expires_at=now + self._ttl,
            )
            replaced = identifier in self._records
            self._records[identifier] = record
        logger.info(
            "OTP issued for %s (expires %s%s)",
            identifier,
            record.expires_at.isoformat(),
            ", replaced previous" if replaced else "",
        )
        return replace(record)

    def lookup(self, identifier: str) -> OTPRecord | None:
        """Return a snapshot of the record for *identifier*, or ``None``."""
        with self._lock:
            record = self._records.get(identifier)
            return replace(record) if record is not None else None

    def remove(self, identifier: str) -> bool:
        """Delete the record for *identifier*.  Safe to call repeatedly."""
        with self._lock:
            return self._records.pop(identifier, None) is not None

    def revoke(self, identifier: str, code: str) -> bool:
        """Delete the record only if it still holds *code*.

        Lets a caller withdraw a code it issued without clobbering a newer
        issuance for the same identifier.
        """
        with self._lock:
            record = self._records.get(identifier)
            if record is None or record.code != code:
                return False
            del self._records[identifier]
        logger.info("OTP revoked for %s", identifier)
        return True

    def record_failed_attempt(self, identifier: str) -> int:
        """Increment the failed-attempt counter and return the new value.

        Returns ``0`` when there is no record for *identifier*.
        """
        with self._lock:
            record = self._records.get(identifier)
            if record is None:
                return 0
            record.attempts += 1
            return record.attempts

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Remove every record whose expiry is before *now*; return the count."""
        if now is None:
            now = self.now()
        with self._lock:
            expired = [
                identifier
                for identifier, record in self._records.items()
                if record.expires_at < now
            ]
            for identifier in expired:
                del self._records[identifier]
        return len(expired)

    # ── Introspection ────────────────────────────────────

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._records
