"""Email service — delivers OTP codes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from otp_service.config import Settings, settings as default_settings
from otp_service.errors import DeliveryError

logger = logging.getLogger(__name__)

_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: linear-gradient(135deg, #4CAF50, #45a049); color: white; padding: 20px; border-radius: 10px 10px 0 0; text-align: center;">
    <h1 style="margin: 0; font-size: 24px;">{brand}</h1>
    <p style="margin: 10px 0 0 0; opacity: 0.9;">Secure Login Verification</p>
  </div>
  <div style="background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px;">
    <h2 style="color: #333; margin-top: 0;">Hello {name}!</h2>
    <p style="color: #666; font-size: 16px; line-height: 1.5;">
      You requested to log in to your account. Please use the following OTP to complete your login:
    </p>
    <div style="background: white; border: 2px dashed #4CAF50; border-radius: 10px; padding: 20px; text-align: center; margin: 20px 0;">
      <h1 style="color: #4CAF50; font-size: 32px; letter-spacing: 5px; margin: 0; font-family: 'Courier New', monospace;">{code}</h1>
    </div>
    <div style="background: #fff3cd; border: 1px solid #ffeaa7; border-radius: 5px; padding: 15px; margin: 20px 0;">
      <p style="margin: 0; color: #856404; font-size: 14px;">
        <strong>Important:</strong> This OTP will expire in {ttl}. Do not share this code with anyone.
      </p>
    </div>
    <p style="color: #666; font-size: 14px; line-height: 1.5;">
      If you didn't request this OTP, please ignore this email and ensure your account is secure.
    </p>
    <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
    <p style="color: #999; font-size: 12px; text-align: center;">
      This is an automated message from {brand}. Please do not reply to this email.
    </p>
  </div>
</div>
"""


class EmailService:
    """Sends OTP emails using the configured SMTP server."""

    channel = "email"

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings

    def build_message(
        self, to_email: str, code: str, user_name: str | None = None
    ) -> EmailMessage:
        """Compose the OTP email (plain-text body with an HTML alternative)."""
        name = user_name or "User"
        brand = self._settings.brand_name
        ttl = self._settings.otp_ttl_label

        msg = EmailMessage()
        msg["Subject"] = f"Your OTP for Login - {brand}"
        msg["From"] = self._settings.email_from or self._settings.smtp_username
        msg["To"] = to_email
        msg.set_content(
            f"Hello {name}!\n\n"
            f"Your OTP for {brand} login is: {code}\n\n"
            f"This OTP will expire in {ttl}. Do not share this code with anyone.\n\n"
            "If you didn't request this OTP, please ignore this email."
        )
        msg.add_alternative(
            _HTML_TEMPLATE.format(brand=brand, name=name, code=code, ttl=ttl),
            subtype="html",
        )
        return msg

    async def send_otp(
        self, to_email: str, code: str, user_name: str | None = None
    ) -> None:
        """Send *code* to *to_email*.

        Raises
        ------
        DeliveryError
            If the SMTP exchange fails.
        """
        msg = self.build_message(to_email, code, user_name)
        logger.info("Sending OTP email to %s", to_email)

        try:
            await aiosmtplib.send(
                msg,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username or None,
                password=self._settings.smtp_password or None,
                start_tls=self._settings.smtp_start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send OTP email to %s: %s", to_email, exc)
            raise DeliveryError(self.channel, to_email, str(exc)) from exc

        logger.info("OTP email sent to %s", to_email)
