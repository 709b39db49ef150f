"""Application configuration using pydantic-settings."""

import base64
import binascii
from datetime import datetime, timezone
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Platform API
    cf_api_url: str = "https://api.fr.cloud.gov"
    cf_api_token: Optional[str] = None  # Bearer token, obtained out of band
    request_timeout: float = 30.0

    # Sandbox lifecycle
    org_prefix: str = "sandbox-"
    notify_days: int = 76
    purge_days: int = 90
    disable_purge: bool = False
    dry_run: bool = False
    sandbox_quota_name: str = ""
    # Resources created before this point are aged from here instead
    time_starts_at: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # Space deletion jobs
    job_poll_interval: float = 5.0
    job_poll_timeout: float = 600.0  # 10 minutes

    # Mail
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None  # Raw or base64 encoded
    smtp_use_tls: bool = True
    mail_sender: str = "no-reply@sandbox.invalid"

    model_config = {"env_prefix": "SANDBOX_PURGE_"}

    @field_validator("cf_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("time_starts_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive epochs are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("smtp_password")
    @classmethod
    def decode_password_if_base64(cls, v: Optional[str]) -> Optional[str]:
        """Decode a base64 encoded SMTP password if it is prefixed with ``base64:``."""
        if not v or not v.startswith("base64:"):
            return v
        try:
            return base64.b64decode(v[len("base64:"):], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValueError("smtp_password has a base64: prefix but is not valid base64") from None

    @model_validator(mode="after")
    def check_thresholds(self) -> "Settings":
        if self.purge_days < self.notify_days:
            raise ValueError(
                f"purge_days ({self.purge_days}) must be >= notify_days ({self.notify_days})"
            )
        return self


settings = Settings()
