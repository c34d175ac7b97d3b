# backend/booking_engine/core/config.py
from functools import lru_cache
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import BRAND_NAME

logger = logging.getLogger(__name__)

# Load backend/.env only outside CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    if env_path.exists():
        logger.info(f"[CONFIG] Loading environment from {env_path}")
        load_dotenv(env_path)


class Settings(BaseSettings):
    """
    Runtime configuration for the booking engine.

    Every field can be overridden with a `BOOKING_`-prefixed environment
    variable, e.g. `BOOKING_DATABASE_URL`.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    database_url: str = Field(
        default="sqlite:///./booking_engine.db",
        description="SQLAlchemy URL of the booking store",
    )
    database_echo: bool = False

    # Email
    email_provider: Literal["console", "resend"] = "console"
    resend_api_key: Optional[SecretStr] = None
    email_from_address: str = "bookings@shaadisarthi.com"
    email_from_name: str = BRAND_NAME
    frontend_url: str = "http://localhost:3000"

    # Email background delivery
    email_worker_pool_size: int = Field(default=5, description="Fixed number of email worker threads")
    email_worker_queue_limit: int = Field(
        default=100,
        description="Max email jobs queued or running before new jobs are rejected",
    )
    email_shutdown_timeout_seconds: float = 10.0

    # Customer-entered booking dates and times are local to this zone
    platform_timezone: str = "Asia/Kolkata"

    @field_validator("email_worker_pool_size", "email_worker_queue_limit")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("platform_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"unknown timezone: {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _check_email_provider(self) -> "Settings":
        if self.email_provider == "resend" and not self.resend_api_key:
            raise ValueError("resend_api_key is required when email_provider is 'resend'")
        return self

    @property
    def email_sender(self) -> str:
        return f"{self.email_from_name} <{self.email_from_address}>"


@lru_cache
def get_settings() -> Settings:
    return Settings()
