"""Tests for the email and SMS delivery adapters."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest
from twilio.base.exceptions import TwilioRestException

from otp_service.config import Settings
from otp_service.errors import DeliveryError
from otp_service.services.email_service import EmailService
from otp_service.services.sms_service import TwilioSMSService


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        smtp_username="noreply@mindora.test",
        email_from="noreply@mindora.test",
        twilio_account_sid="AC123",
        twilio_auth_token="secret",
        twilio_from_number="+15550000000",
    )


# ── Email ────────────────────────────────────────────────

def test_email_message_contents(config):
    msg = EmailService(config).build_message("a@x.com", "482913", "Alice")

    assert msg["Subject"] == "Your OTP for Login - Mindora"
    assert msg["To"] == "a@x.com"
    assert msg["From"] == "noreply@mindora.test"
    text = msg.get_body(preferencelist=("plain",)).get_content()
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "482913" in text and "Hello Alice!" in text
    assert "482913" in html and "10 minutes" in html


def test_email_greeting_defaults_to_user(config):
    msg = EmailService(config).build_message("a@x.com", "482913")
    assert "Hello User!" in msg.get_body(preferencelist=("plain",)).get_content()


@pytest.mark.asyncio
async def test_email_send_uses_smtp_settings(config):
    with patch("otp_service.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await EmailService(config).send_otp("a@x.com", "482913")

    send.assert_awaited_once()
    kwargs = send.await_args.kwargs
    assert kwargs["hostname"] == config.smtp_host
    assert kwargs["port"] == config.smtp_port
    assert kwargs["username"] == "noreply@mindora.test"
    assert kwargs["password"] is None


@pytest.mark.asyncio
async def test_email_failure_raises_delivery_error(config):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPException("relay denied"))
    with patch("otp_service.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryError) as excinfo:
            await EmailService(config).send_otp("a@x.com", "482913")

    assert excinfo.value.channel == "email"
    assert excinfo.value.recipient == "a@x.com"


# ── SMS ──────────────────────────────────────────────────

def test_sms_body(config):
    body = TwilioSMSService(config, client=MagicMock()).build_body("482913", "Bob")

    assert body == (
        "Hello Bob! Your OTP for Mindora login is: 482913. This code will expire "
        "in 10 minutes. Do not share this code with anyone."
    )


@pytest.mark.asyncio
async def test_sms_send_calls_twilio(config):
    client = MagicMock()
    await TwilioSMSService(config, client=client).send_otp("+15551234567", "482913")

    client.messages.create.assert_called_once()
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["to"] == "+15551234567"
    assert kwargs["from_"] == "+15550000000"
    assert "482913" in kwargs["body"]


@pytest.mark.asyncio
async def test_sms_failure_raises_delivery_error(config):
    client = MagicMock()
    client.messages.create.side_effect = TwilioRestException(400, "uri", "bad number")

    with pytest.raises(DeliveryError) as excinfo:
        await TwilioSMSService(config, client=client).send_otp("+1", "482913")
    assert excinfo.value.channel == "sms"


@pytest.mark.asyncio
async def test_sms_unconfigured_raises_delivery_error():
    service = TwilioSMSService(Settings(_env_file=None))

    assert not service.enabled
    with pytest.raises(DeliveryError, match="not configured"):
        await service.send_otp("+15551234567", "482913")
