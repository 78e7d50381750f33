"""OTP HTTP API.

Endpoints
---------
POST /send-email-otp   → issue an OTP and email it
POST /send-sms-otp     → issue an OTP and text it
POST /verify-otp       → check a submitted OTP
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from otp_service.config import format_duration
from otp_service.errors import DeliveryError, MissingInputError
from otp_service.services.otp_service import OTPService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otp"])


def get_otp_service(request: Request) -> OTPService:
    """Resolve the service instance created in :func:`otp_service.main.create_app`."""
    return request.app.state.otp_service


# ── Request / response models ────────────────────────────

class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EmailOTPRequest(_CamelModel):
    email: str | None = None
    user_name: str | None = Field(default=None, alias="userName")


class SMSOTPRequest(_CamelModel):
    phone: str | None = None
    user_name: str | None = Field(default=None, alias="userName")


class VerifyOTPRequest(_CamelModel):
    identifier: str | None = None
    otp: str | None = None


class OTPResponse(_CamelModel):
    success: bool
    message: str
    expires_in: str | None = Field(default=None, alias="expiresIn")


def _reply(status_code: int, success: bool, message: str, **extra) -> JSONResponse:
    body = OTPResponse(success=success, message=message, **extra)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


# ── Endpoints ────────────────────────────────────────────

@router.post("/send-email-otp", response_model=OTPResponse)
async def send_email_otp(
    body: EmailOTPRequest, service: OTPService = Depends(get_otp_service)
):
    """Generate an OTP for *email* and deliver it over SMTP."""
    try:
        issued = await service.send_email_otp(body.email, body.user_name)
    except MissingInputError as exc:
        return _reply(400, False, str(exc))
    except DeliveryError as exc:
        logger.error("Email sending error: %s", exc)
        return _reply(500, False, "Failed to send OTP email")
    except Exception:
        logger.exception("Email OTP request failed")
        return _reply(500, False, "Failed to send OTP email")

    return _reply(
        200,
        True,
        "OTP sent successfully to your email",
        expires_in=format_duration(issued.expires_in_seconds),
    )


@router.post("/send-sms-otp", response_model=OTPResponse)
async def send_sms_otp(
    body: SMSOTPRequest, service: OTPService = Depends(get_otp_service)
):
    """Generate an OTP for *phone* and deliver it via Twilio."""
    try:
        issued = await service.send_sms_otp(body.phone, body.user_name)
    except MissingInputError as exc:
        return _reply(400, False, str(exc))
    except DeliveryError as exc:
        logger.error("SMS sending error: %s", exc)
        return _reply(500, False, "Failed to send OTP SMS")
    except Exception:
        logger.exception("SMS OTP request failed")
        return _reply(500, False, "Failed to send OTP SMS")

    return _reply(
        200,
        True,
        "OTP sent successfully to your phone",
        expires_in=format_duration(issued.expires_in_seconds),
    )


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(
    body: VerifyOTPRequest, service: OTPService = Depends(get_otp_service)
):
    """Validate an OTP for the given identifier."""
    try:
        result = service.verify(body.identifier, body.otp)
    except MissingInputError as exc:
        return _reply(400, False, str(exc))
    except Exception:
        logger.exception("OTP verification error")
        return _reply(500, False, "Failed to verify OTP")

    return _reply(200 if result.success else 400, result.success, result.message)
