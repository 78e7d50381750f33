"""OTP API client — async HTTP client for the OTP service endpoints.

Wraps the three POST endpoints exposed by :mod:`otp_service.api.router`
so other services (a login backend, a chat bot) can request and check
codes without hand-building requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from otp_service.config import settings

logger = logging.getLogger(__name__)


@dataclass
class OTPReply:
    """Lightweight value object returned by every client call."""

    success: bool
    message: str
    status_code: int = 0
    expires_in: str | None = None


class OTPClient:
    """Async HTTP wrapper around the OTP service API."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.otp_service_base_url).rstrip("/")
        self._transport = transport

    # ── Issuance ─────────────────────────────────────────

    async def send_email_otp(self, email: str, user_name: str | None = None) -> OTPReply:
        """Ask the service to email a fresh OTP to *email*."""
        return await self._post("/send-email-otp", {"email": email, "userName": user_name})

    async def send_sms_otp(self, phone: str, user_name: str | None = None) -> OTPReply:
        """Ask the service to text a fresh OTP to *phone*."""
        return await self._post("/send-sms-otp", {"phone": phone, "userName": user_name})

    # ── Verification ─────────────────────────────────────

    async def verify_otp(self, identifier: str, otp: str) -> OTPReply:
        """Check *otp* for *identifier*.

        ``success`` is ``True`` only if the code matched and was consumed.
        """
        return await self._post("/verify-otp", {"identifier": identifier, "otp": otp})

    # ── Private helpers ──────────────────────────────────

    async def _post(self, path: str, payload: dict) -> OTPReply:
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.exception("OTP request to %s failed: %s", path, exc)
            return OTPReply(success=False, message=f"Request failed: {exc}")

        try:
            data = resp.json()
        except ValueError:
            logger.error("Non-JSON reply from %s: %s %s", path, resp.status_code, resp.text)
            return OTPReply(success=False, message=resp.text, status_code=resp.status_code)

        if resp.status_code >= 500:
            logger.error("OTP service error on %s: %s %s", path, resp.status_code, resp.text)
        return OTPReply(
            success=bool(data.get("success", False)),
            message=data.get("message", ""),
            status_code=resp.status_code,
            expires_in=data.get("expiresIn"),
        )
