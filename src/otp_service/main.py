"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otp_service.api.router import router as otp_router
from otp_service.config import Settings, settings as default_settings
from otp_service.core.otp_store import OTPStore
from otp_service.core.sweeper import ExpirySweeper
from otp_service.services.email_service import EmailService
from otp_service.services.otp_service import DeliveryAdapter, OTPService
from otp_service.services.sms_service import TwilioSMSService

logging.basicConfig(
    level=logging.DEBUG if default_settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    config: Settings | None = None,
    store: OTPStore | None = None,
    email_sender: DeliveryAdapter | None = None,
    sms_sender: DeliveryAdapter | None = None,
) -> FastAPI:
    """Build the application with its own store, sweeper and senders.

    Every collaborator can be injected, so tests get an isolated store
    instead of a process-wide one.
    """
    if config is None:
        config = default_settings
    # An empty store is falsy (it defines __len__), so test against None.
    if store is None:
        store = OTPStore(
            ttl_seconds=config.otp_ttl_seconds,
            max_attempts=config.otp_max_attempts,
        )
    if email_sender is None:
        email_sender = EmailService(config)
    if sms_sender is None:
        sms_sender = TwilioSMSService(config)

    sweeper = ExpirySweeper(store, interval_seconds=config.otp_sweep_interval_seconds)
    service = OTPService(store=store, email_sender=email_sender, sms_sender=sms_sender)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hook."""
        logger.info("Starting %s …", config.app_name)
        sweeper.start()
        yield
        logger.info("Shutting down %s …", config.app_name)
        await sweeper.stop()

    app = FastAPI(
        title=config.app_name,
        description="Issues and verifies one-time passcodes delivered by email or SMS",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.otp_store = store
    app.state.otp_service = service
    app.state.sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(otp_router)

    @app.get("/health")
    async def health_check():
        """Simple liveness probe."""
        return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    logger.info(
        "OTP Service running on http://%s:%s", default_settings.host, default_settings.port
    )
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
