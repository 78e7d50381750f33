"""Tests for the Verifier state machine."""

from __future__ import annotations

import threading

from otp_service.core.otp_store import OTPStore
from otp_service.core.verifier import VerificationStatus, Verifier


def test_not_found(store: OTPStore):
    result = Verifier(store).verify("a@x.com", "123456")

    assert result.status is VerificationStatus.NOT_FOUND
    assert result.message == "OTP not found or expired"
    assert not result.success


def test_success_consumes_record(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")

    first = verifier.verify("a@x.com", "482913")
    second = verifier.verify("a@x.com", "482913")

    assert first.success
    assert first.message == "OTP verified successfully"
    assert second.status is VerificationStatus.NOT_FOUND


def test_example_flow(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")

    mismatch = verifier.verify("a@x.com", "111111")
    assert mismatch.status is VerificationStatus.MISMATCH
    assert mismatch.message == "Invalid OTP"
    assert mismatch.attempts == 1

    assert verifier.verify("a@x.com", "482913").status is VerificationStatus.SUCCESS
    assert verifier.verify("a@x.com", "482913").status is VerificationStatus.NOT_FOUND


def test_reissued_code_replaces_old_one(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "111111")
    store.issue("a@x.com", "222222")

    assert verifier.verify("a@x.com", "111111").status is VerificationStatus.MISMATCH
    assert verifier.verify("a@x.com", "222222").success


def test_lockout_after_three_mismatches(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")

    for expected_attempts in (1, 2, 3):
        result = verifier.verify("a@x.com", "000000")
        assert result.status is VerificationStatus.MISMATCH
        assert result.attempts == expected_attempts

    # Fourth try is rejected before the code is compared, even if correct.
    locked = verifier.verify("a@x.com", "482913")
    assert locked.status is VerificationStatus.LOCKED_OUT
    assert locked.message == "Maximum attempts exceeded"
    assert "a@x.com" not in store

    assert verifier.verify("a@x.com", "482913").status is VerificationStatus.NOT_FOUND


def test_expired_even_with_correct_code(store: OTPStore, clock):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")
    clock.advance(minutes=10, seconds=1)

    result = verifier.verify("a@x.com", "482913")

    assert result.status is VerificationStatus.EXPIRED
    assert result.message == "OTP has expired"
    assert "a@x.com" not in store


def test_valid_at_exact_expiry_instant(store: OTPStore, clock):
    store.issue("a@x.com", "482913")
    clock.advance(minutes=10)

    assert Verifier(store).verify("a@x.com", "482913").success


def test_expiry_checked_before_lockout(store: OTPStore, clock):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")
    for _ in range(3):
        verifier.verify("a@x.com", "000000")
    clock.advance(minutes=11)

    assert verifier.verify("a@x.com", "482913").status is VerificationStatus.EXPIRED


def test_mismatch_does_not_touch_other_identifiers(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "111111")
    store.issue("b@x.com", "222222")

    verifier.verify("a@x.com", "222222")

    assert store.lookup("b@x.com").attempts == 0
    assert verifier.verify("b@x.com", "111111").status is VerificationStatus.MISMATCH
    assert verifier.verify("b@x.com", "222222").success


def test_non_ascii_submission_is_a_mismatch(store: OTPStore):
    store.issue("a@x.com", "482913")

    result = Verifier(store).verify("a@x.com", "४८२९१३")
    assert result.status is VerificationStatus.MISMATCH


def test_concurrent_correct_verifies_succeed_once(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")
    results = []
    barrier = threading.Barrier(20)

    def attempt() -> None:
        barrier.wait()
        results.append(verifier.verify("a@x.com", "482913").status)

    threads = [threading.Thread(target=attempt) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(VerificationStatus.SUCCESS) == 1
    assert results.count(VerificationStatus.NOT_FOUND) == 19


def test_concurrent_mismatches_never_exceed_cap(store: OTPStore):
    verifier = Verifier(store)
    store.issue("a@x.com", "482913")
    results = []
    barrier = threading.Barrier(10)

    def attempt() -> None:
        barrier.wait()
        results.append(verifier.verify("a@x.com", "000000").status)

    threads = [threading.Thread(target=attempt) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(VerificationStatus.MISMATCH) == 3
    assert results.count(VerificationStatus.LOCKED_OUT) == 1
    assert results.count(VerificationStatus.NOT_FOUND) == 6
