"""Shared fixtures — a controllable clock and an isolated OTP store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from otp_service.core.otp_store import OTPStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> OTPStore:
    """Fresh store with the default 10-minute TTL and 3-attempt cap."""
    return OTPStore(ttl_seconds=600, max_attempts=3, clock=clock)
