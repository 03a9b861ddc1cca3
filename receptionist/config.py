"""Application configuration via environment variables."""

from __future__ import annotations

import logging
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings

log = logging.getLogger("receptionist.config")

_E164 = re.compile(r"^\+[1-9]\d{7,14}$")


class Settings(BaseSettings):
    # Google Calendar
    google_service_account_json: str = ""
    google_calendar_id: str = "primary"
    calendar_timezone: str = "America/New_York"
    calendar_timeout_seconds: float = 10.0
    appointment_summary: str = "Service Appointment"

    # Telephony command rendering
    voice: str = "female"
    speech_language: str = "en-US"
    speech_timeout: int = 5
    inter_digit_timeout: int = 2

    # Business parameters spoken to the caller
    business_name: str = "Baugh Electric"
    transfer_to_number: str = "+17177362829"
    transfer_from_number: str = "+17172978787"
    business_hours_text: str = (
        "We are open Monday through Friday from 8 AM to 6 PM, "
        "and Saturdays from 9 AM to 2 PM."
    )
    services_text: str = (
        "We provide residential electrical work, HVAC installation and repair, "
        "and smart home technology services. Would you like me to connect you "
        "with a representative?"
    )
    service_area_text: str = (
        "Baugh Electric proudly serves the greater Harrisburg, Pennsylvania area, "
        "including Mechanicsburg, Carlisle, and York."
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []
        _placeholders = {"path/to/service-account.json", "changeme"}

        try:
            ZoneInfo(self.calendar_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(
                f"CALENDAR_TIMEZONE {self.calendar_timezone!r} is not a valid "
                "IANA timezone name."
            )

        if not self.google_service_account_json:
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON not set. Scheduling calls will be "
                "transferred to a person."
            )
        elif self.google_service_account_json in _placeholders:
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON is a placeholder. Calendar integration disabled."
            )

        for name in ("transfer_to_number", "transfer_from_number"):
            value = getattr(self, name)
            if not _E164.match(value):
                warnings.append(f"{name.upper()} {value!r} is not an E.164 number.")

        if self.calendar_timeout_seconds <= 0:
            warnings.append(
                "CALENDAR_TIMEOUT_SECONDS must be positive; calendar calls will time out immediately."
            )

        return warnings


settings = Settings()
