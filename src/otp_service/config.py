"""OTP Service — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP lifecycle ─────────────────────────────────────
    otp_ttl_seconds: int = 600  # 10 minutes
    otp_max_attempts: int = 3
    otp_sweep_interval_seconds: int = 300  # 5 minutes

    # ── SMTP (email delivery) ─────────────────────────────
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    email_from: str = ""

    # ── Twilio (SMS delivery) ─────────────────────────────
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""

    # ── HTTP server ───────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # ── Client ────────────────────────────────────────────
    otp_service_base_url: str = "http://localhost:3000"

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Service"
    brand_name: str = "Mindora"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def otp_ttl_label(self) -> str:
        """Human-readable TTL, e.g. ``"10 minutes"``."""
        return format_duration(self.otp_ttl_seconds)


def format_duration(total_seconds: int) -> str:
    minutes, seconds = divmod(total_seconds, 60)
    if seconds:
        return f"{total_seconds} seconds"
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"


# Singleton settings instance
settings = Settings()
