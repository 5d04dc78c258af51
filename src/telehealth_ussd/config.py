"""Application configuration."""

import os
from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_token: str
    ussd_session_timeout_seconds: int = 300
    ussd_sweep_interval_seconds: int = 60
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def ussd_session_timeout(self) -> timedelta:
        """Idle time after which a dialog is discarded."""
        return timedelta(seconds=self.ussd_session_timeout_seconds)
