"""Google Calendar provider implementation.

Uses a Google Cloud service account to interact with the Calendar API v3.
The service account JSON key path comes from ``GOOGLE_SERVICE_ACCOUNT_JSON``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone as dt_timezone
from functools import partial
from typing import Any
from zoneinfo import ZoneInfo

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from receptionist.errors import ConfigurationError, GatewayTransportError
from receptionist.models.booking import Appointment, BookingConfirmation, TimeSlot

from .base import CalendarProvider

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]

_TRANSPORT_ERRORS = (HttpError, GoogleAuthError, OSError)


class GoogleCalendarProvider(CalendarProvider):
    """CalendarProvider backed by Google Calendar API v3."""

    def __init__(self, service_account_path: str) -> None:
        if not service_account_path:
            raise ConfigurationError(
                "Google service account JSON path must be provided via "
                "GOOGLE_SERVICE_ACCOUNT_JSON."
            )
        try:
            self._credentials = Credentials.from_service_account_file(
                service_account_path, scopes=SCOPES
            )
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Could not load service account key {service_account_path!r}: {e}"
            ) from e
        self._service = build(
            "calendar", "v3", credentials=self._credentials, cache_discovery=False
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        """Run a synchronous Google API call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(func, *args, **kwargs)
        )

    def _authorized_http(self) -> AuthorizedHttp:
        """A fresh transport for one request. httplib2.Http is not thread-safe."""
        return AuthorizedHttp(self._credentials, http=httplib2.Http())

    async def _execute(self, request) -> Any:
        """Execute a prepared API request on its own connection."""
        return await self._run_in_executor(request.execute, http=self._authorized_http())

    @staticmethod
    def _to_rfc3339(dt: datetime) -> str:
        """Convert a datetime to an RFC 3339 string with timezone."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=dt_timezone.utc)
        return dt.isoformat()

    @staticmethod
    def _parse_rfc3339(value: str, tz: ZoneInfo) -> datetime:
        # freebusy answers in UTC with a trailing "Z"
        return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(tz)

    # ------------------------------------------------------------------
    # CalendarProvider interface
    # ------------------------------------------------------------------

    async def get_busy_intervals(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
        timezone: str = "UTC",
    ) -> list[TimeSlot]:
        """Query the Google freebusy API for ``[start, end)``."""
        body = {
            "timeMin": self._to_rfc3339(start),
            "timeMax": self._to_rfc3339(end),
            "timeZone": timezone,
            "items": [{"id": calendar_id}],
        }

        try:
            response = await self._execute(self._service.freebusy().query(body=body))
        except _TRANSPORT_ERRORS as e:
            raise GatewayTransportError("freebusy", str(e)) from e

        calendar = response.get("calendars", {}).get(calendar_id, {})
        if calendar.get("errors"):
            reasons = ", ".join(err.get("reason", "unknown") for err in calendar["errors"])
            raise GatewayTransportError("freebusy", reasons)

        tz = ZoneInfo(timezone)
        busy = [
            TimeSlot(
                start=self._parse_rfc3339(interval["start"], tz),
                end=self._parse_rfc3339(interval["end"], tz),
            )
            for interval in calendar.get("busy", [])
        ]
        busy.sort(key=lambda b: b.start)
        return busy

    async def create_event(
        self,
        calendar_id: str,
        appointment: Appointment,
        timezone: str = "UTC",
    ) -> BookingConfirmation:
        """Insert an event into the Google Calendar."""
        body: dict[str, Any] = {
            "summary": appointment.summary,
            "description": appointment.description,
            "start": {
                "dateTime": self._to_rfc3339(appointment.slot.start),
                "timeZone": timezone,
            },
            "end": {
                "dateTime": self._to_rfc3339(appointment.slot.end),
                "timeZone": timezone,
            },
        }

        try:
            result = await self._execute(
                self._service.events().insert(calendarId=calendar_id, body=body)
            )
        except _TRANSPORT_ERRORS as e:
            raise GatewayTransportError("events.insert", str(e)) from e

        logger.info("Created event %s on calendar %s", result["id"], calendar_id)

        return BookingConfirmation(
            event_id=result["id"],
            html_link=result.get("htmlLink", ""),
            status=result.get("status", "confirmed"),
        )
