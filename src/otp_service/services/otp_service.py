"""OTP service — ties the generator, store, verifier and delivery together.

This is what the HTTP layer talks to.  Issuance is *issue-then-deliver*:
the code is stored first so it is valid the moment the user receives it;
if the provider then fails, the just-issued code is revoked so no valid
OTP is left behind that the user never got.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from otp_service.core.generator import generate_code
from otp_service.core.otp_store import OTPStore
from otp_service.core.verifier import VerificationResult, Verifier
from otp_service.errors import DeliveryError, MissingInputError

logger = logging.getLogger(__name__)


class DeliveryAdapter(Protocol):
    """Anything that can push an OTP to a recipient (email, SMS, ...)."""

    channel: str

    async def send_otp(self, recipient: str, code: str, user_name: str | None = None) -> None:
        ...


@dataclass(frozen=True)
class IssueResult:
    """Returned after an OTP was issued *and* delivered."""

    identifier: str
    channel: str
    expires_in_seconds: int


class OTPService:
    """Issues OTPs over a delivery channel and verifies submitted codes."""

    def __init__(
        self,
        store: OTPStore,
        email_sender: DeliveryAdapter,
        sms_sender: DeliveryAdapter,
        code_generator: Callable[[], str] = generate_code,
    ) -> None:
        self._store = store
        self._verifier = Verifier(store)
        self._email_sender = email_sender
        self._sms_sender = sms_sender
        self._generate = code_generator

    @property
    def store(self) -> OTPStore:
        return self._store

    async def send_email_otp(self, email: str | None, user_name: str | None = None) -> IssueResult:
        if not email or not email.strip():
            raise MissingInputError("email", "Email is required")
        return await self._issue_and_deliver(email.strip(), self._email_sender, user_name)

    async def send_sms_otp(self, phone: str | None, user_name: str | None = None) -> IssueResult:
        if not phone or not phone.strip():
            raise MissingInputError("phone", "Phone number is required")
        return await self._issue_and_deliver(phone.strip(), self._sms_sender, user_name)

    def verify(self, identifier: str | None, otp: str | None) -> VerificationResult:
        identifier = (identifier or "").strip()
        otp = (otp or "").strip()
        if not identifier or not otp:
            raise MissingInputError("identifier", "Identifier and OTP are required")
        return self._verifier.verify(identifier, otp)

    # ── Private helpers ──────────────────────────────────

    async def _issue_and_deliver(
        self, identifier: str, sender: DeliveryAdapter, user_name: str | None
    ) -> IssueResult:
        code = self._generate()
        self._store.issue(identifier, code)

        # Delivery I/O happens outside the store lock.
        try:
            await sender.send_otp(identifier, code, user_name)
        except DeliveryError:
            self._store.revoke(identifier, code)
            logger.error("OTP delivery via %s to %s failed; code revoked", sender.channel, identifier)
            raise
        except Exception:
            self._store.revoke(identifier, code)
            raise

        return IssueResult(
            identifier=identifier,
            channel=sender.channel,
            expires_in_seconds=int(self._store.ttl.total_seconds()),
        )
