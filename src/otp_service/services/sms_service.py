"""SMS service — delivers OTP codes through Twilio."""

from __future__ import annotations

import asyncio
import logging

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from otp_service.config import Settings, settings as default_settings
from otp_service.errors import DeliveryError

logger = logging.getLogger(__name__)


class TwilioSMSService:
    """Thin wrapper around the Twilio REST client with async-friendly send."""

    channel = "sms"

    def __init__(self, config: Settings | None = None, client: Client | None = None) -> None:
        self._settings = config or default_settings
        self._from_number = self._settings.twilio_from_number
        if client is not None:
            self._client: Client | None = client
        elif self._settings.twilio_account_sid and self._settings.twilio_auth_token:
            self._client = Client(
                self._settings.twilio_account_sid, self._settings.twilio_auth_token
            )
        else:
            self._client = None

        missing = [
            key
            for key, value in [
                ("TWILIO_ACCOUNT_SID", self._settings.twilio_account_sid),
                ("TWILIO_AUTH_TOKEN", self._settings.twilio_auth_token),
                ("TWILIO_FROM_NUMBER", self._from_number),
            ]
            if not value
        ]
        if client is None and missing:
            logger.info("Twilio SMS disabled; missing settings: %s", ", ".join(missing))

    @property
    def enabled(self) -> bool:
        return bool(self._client and self._from_number)

    def build_body(self, code: str, user_name: str | None = None) -> str:
        return (
            f"Hello {user_name or 'User'}! Your OTP for {self._settings.brand_name} "
            f"login is: {code}. This code will expire in {self._settings.otp_ttl_label}. "
            "Do not share this code with anyone."
        )

    async def send_otp(self, to: str, code: str, user_name: str | None = None) -> None:
        """Send *code* by SMS to *to*.

        Raises :class:`DeliveryError` when Twilio is not configured or the
        API call fails.
        """
        if not self.enabled:
            logger.error("SMS send to %s skipped because Twilio is not configured", to)
            raise DeliveryError(self.channel, to, "Twilio is not configured")

        body = self.build_body(code, user_name)
        logger.info("Sending OTP SMS to %s", to)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: self._client.messages.create(  # type: ignore[union-attr]
                    from_=self._from_number,
                    to=to,
                    body=body,
                ),
            )
        except TwilioException as exc:
            logger.warning("Twilio SMS send to %s failed: %s", to, exc)
            raise DeliveryError(self.channel, to, str(exc)) from exc

        logger.info("OTP SMS sent to %s", to)
