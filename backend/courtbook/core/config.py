# backend/courtbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")
    log_level: str = Field(default="INFO", description="Root log level")
    is_testing: bool = Field(
        default_factory=is_running_tests,
        description="Set by the test suite; disables email delivery",
    )

    database_url: str = Field(
        default="sqlite:///./courtbook.db",
        description="SQLAlchemy URL of the bookings store",
    )
    database_echo: bool = False

    # Facility
    facility_name: str = BRAND_NAME
    facility_utc_offset: str = Field(
        default="-06:00",
        description="Fixed UTC offset used to qualify facility wall-clock times",
    )
    open_hour: int = Field(default=7, ge=0, le=23)
    close_hour: int = Field(default=22, ge=1, le=24)
    slot_step_minutes: int = Field(default=30, gt=0)
    min_booking_minutes: int = Field(default=60, gt=0)
    hold_ttl_minutes: int = Field(default=10, gt=0)
    arrival_tolerance_minutes: int = Field(default=15, ge=0)

    # Tariff
    day_rate: int = Field(default=350, ge=0, description="Hourly rate before the switch hour")
    evening_rate: int = Field(default=400, ge=0, description="Hourly rate from the switch hour on")
    rate_switch_hour: int = Field(default=18, ge=0, le=24)
    price_rounding: Literal["cent", "unit"] = "cent"

    # Customers
    default_phone_country_code: str = Field(
        default="52",
        description="Dialing code prefixed to 10-digit national numbers",
    )

    # Email
    resend_api_key: SecretStr | None = Field(default=None, description="Resend API key")
    from_email: str = "reservas@example.com"

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("facility_utc_offset")
    @classmethod
    def _validate_offset(cls, value: str) -> str:
        cleaned = value.strip()
        sign = cleaned[:1]
        hours, sep, minutes = cleaned[1:].partition(":")
        if sign not in {"+", "-"} or not sep or not hours.isdigit() or not minutes.isdigit():
            raise ValueError("FACILITY_UTC_OFFSET must look like -06:00 or +01:00")
        if int(hours) > 14 or int(minutes) > 59:
            raise ValueError("FACILITY_UTC_OFFSET is out of range")
        return cleaned

    @field_validator("default_phone_country_code")
    @classmethod
    def _validate_country_code(cls, value: str) -> str:
        cleaned = value.strip().lstrip("+")
        if not cleaned.isdigit() or not 1 <= len(cleaned) <= 3:
            raise ValueError("DEFAULT_PHONE_COUNTRY_CODE must be 1-3 digits")
        return cleaned

    @model_validator(mode="after")
    def _check_hours(self) -> "Settings":
        if self.close_hour <= self.open_hour:
            raise ValueError("CLOSE_HOUR must be after OPEN_HOUR")
        if (self.close_hour - self.open_hour) * 60 < self.min_booking_minutes:
            logger.warning(
                "MIN_BOOKING_MINUTES=%s does not fit inside operating hours %s-%s",
                self.min_booking_minutes,
                self.open_hour,
                self.close_hour,
            )
        return self

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key and self.resend_api_key.get_secret_value())


settings = Settings()
