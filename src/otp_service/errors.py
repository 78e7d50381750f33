"""Exception taxonomy for the OTP service.

Verification outcomes (expired, mismatch, locked out, not found) are
*results*, not exceptions (see :mod:`otp_service.core.verifier`).  The
exceptions here cover boundary validation and provider failures only.
"""

from __future__ import annotations


class OTPServiceError(Exception):
    """Base class for all errors raised by the OTP service."""


class MissingInputError(OTPServiceError):
    """A required request field was absent or blank."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} is required")


class DeliveryError(OTPServiceError):
    """An email/SMS provider failed to deliver an OTP."""

    def __init__(self, channel: str, recipient: str, reason: str = "") -> None:
        self.channel = channel
        self.recipient = recipient
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"{channel} delivery to {recipient} failed{detail}")
