# calendar_booking/config.py

from __future__ import annotations

import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Single project config. Reads environment variables.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # --- Core ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # --- Database ---
    DATABASE_URL: str = Field(..., description="Async database connection URL (e.g., postgresql+asyncpg://...)")

    # --- JWT (tokens are issued elsewhere, only verified here) ---
    JWT_SECRET_KEY: str = Field(..., description="Secret key for verifying JWT tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Algorithm for JWT signing")

    # --- Booking engine limits ---
    BOOKING_MAX_OCCURRENCES: int = Field(100, description="Safety cap on occurrences per recurring request")
    BOOKING_DEFAULT_HORIZON_MONTHS: int = Field(3, description="Recurrence horizon when no end date is given")

    @model_validator(mode="after")
    def check_booking_limits(self) -> "Settings":
        if self.BOOKING_MAX_OCCURRENCES < 1:
            raise ValueError("BOOKING_MAX_OCCURRENCES must be positive")
        if self.BOOKING_DEFAULT_HORIZON_MONTHS < 1:
            raise ValueError("BOOKING_DEFAULT_HORIZON_MONTHS must be positive")
        return self


try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug(
        "Loaded settings: DB URL=%s..., max occurrences=%d, horizon=%d months",
        str(settings.DATABASE_URL)[:25],
        settings.BOOKING_MAX_OCCURRENCES,
        settings.BOOKING_DEFAULT_HORIZON_MONTHS,
    )
except Exception:
    log.exception("Failed to instantiate Settings.")
    raise
