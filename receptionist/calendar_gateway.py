"""Calendar gateway: the receptionist's only door to the shared calendar.

The gateway is built once at process start by ``init_calendar_gateway``.
If the credential cannot be loaded it is still returned, marked not ready,
so a misconfigured calendar degrades scheduling to a human hand-off instead
of taking the webhook down. Every live call is bounded by a timeout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Awaitable, TypeVar

from receptionist.calendar_providers.base import CalendarProvider
from receptionist.config import Settings
from receptionist.errors import GatewayNotReadyError, GatewayTransportError
from receptionist.models.booking import (
    Appointment,
    Available,
    AvailabilityResult,
    BookingConfirmation,
    Busy,
    TimeSlot,
)

log = logging.getLogger("receptionist.calendar_gateway")

T = TypeVar("T")


class SlotLocks:
    """Advisory locks over time ranges of one calendar.

    Held across the availability check and the insert so two turns in this
    process cannot both book overlapping hours: a request for 3:30 waits
    while 3:00 is being booked. Requests that do not overlap proceed in
    parallel.
    """

    def __init__(self) -> None:
        self._held: dict[str, list[TimeSlot]] = {}
        self._changed = asyncio.Condition()

    def _is_free(self, calendar_id: str, slot: TimeSlot) -> bool:
        return not any(
            held.overlaps(slot.start, slot.end) for held in self._held.get(calendar_id, ())
        )

    @asynccontextmanager
    async def hold(self, calendar_id: str, slot: TimeSlot) -> AsyncIterator[None]:
        async with self._changed:
            await self._changed.wait_for(lambda: self._is_free(calendar_id, slot))
            self._held.setdefault(calendar_id, []).append(slot)
        try:
            yield
        finally:
            async with self._changed:
                held = self._held[calendar_id]
                held.remove(slot)
                if not held:
                    del self._held[calendar_id]
                self._changed.notify_all()

    def __len__(self) -> int:
        return sum(len(slots) for slots in self._held.values())


class CalendarGateway:
    """Availability checks and bookings against one calendar backend."""

    def __init__(
        self,
        provider: CalendarProvider | None,
        timezone: str = "UTC",
        timeout_seconds: float = 10.0,
        reason: str = "",
    ) -> None:
        self._provider = provider
        self._timezone = timezone
        self._timeout = timeout_seconds
        self._reason = reason
        self.slot_locks = SlotLocks()

    @classmethod
    def not_ready(cls, reason: str) -> "CalendarGateway":
        return cls(provider=None, reason=reason)

    @property
    def ready(self) -> bool:
        return self._provider is not None

    @property
    def reason(self) -> str:
        """Why the gateway is not ready (empty when it is)."""
        return self._reason

    async def _call(self, operation: str, coro: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise GatewayTransportError(
                operation, f"timed out after {self._timeout:g}s"
            ) from e

    def _require_provider(self) -> CalendarProvider:
        if self._provider is None:
            raise GatewayNotReadyError(self._reason or "calendar gateway not ready")
        return self._provider

    async def check_availability(
        self, slot: TimeSlot, calendar_id: str
    ) -> AvailabilityResult:
        """Return ``Busy`` with every busy interval overlapping ``slot``.

        Intervals that only abut the slot are ignored.
        """
        provider = self._require_provider()
        intervals = await self._call(
            "freebusy",
            provider.get_busy_intervals(
                calendar_id, slot.start, slot.end, timezone=self._timezone
            ),
        )
        conflicts = [b for b in intervals if slot.overlaps(b.start, b.end)]
        if conflicts:
            log.info(
                "Slot %s is busy on %s (%d conflicts)",
                slot.start.isoformat(),
                calendar_id,
                len(conflicts),
            )
            return Busy(conflicts=conflicts)
        return Available()

    async def book_appointment(
        self, appointment: Appointment, calendar_id: str
    ) -> BookingConfirmation:
        """Insert ``appointment``. Not idempotent.

        A timeout only abandons the wait: the request may still land, so it is
        logged for staff to reconcile against the calendar.
        """
        provider = self._require_provider()
        try:
            return await self._call(
                "events.insert",
                provider.create_event(calendar_id, appointment, timezone=self._timezone),
            )
        except GatewayTransportError as e:
            if isinstance(e.__cause__, asyncio.TimeoutError):
                log.warning(
                    "Insert for %s on %s timed out; the event may still have been created",
                    appointment.slot.start.isoformat(),
                    calendar_id,
                )
            raise


def init_calendar_gateway(settings: Settings) -> CalendarGateway:
    """Build the process-wide gateway from settings.

    Never raises: any failure to construct the provider yields a gateway
    that reports itself not ready.
    """
    if not settings.google_service_account_json:
        log.warning("Google Calendar not configured: GOOGLE_SERVICE_ACCOUNT_JSON unset")
        return CalendarGateway.not_ready("GOOGLE_SERVICE_ACCOUNT_JSON unset")

    try:
        from receptionist.calendar_providers.google import GoogleCalendarProvider

        provider = GoogleCalendarProvider(
            service_account_path=settings.google_service_account_json,
        )
    except Exception as e:
        log.warning("Google Calendar not configured: %s", e)
        return CalendarGateway.not_ready(str(e))

    log.info(
        "Calendar gateway ready (calendar=%s tz=%s timeout=%gs)",
        settings.google_calendar_id,
        settings.calendar_timezone,
        settings.calendar_timeout_seconds,
    )
    return CalendarGateway(
        provider=provider,
        timezone=settings.calendar_timezone,
        timeout_seconds=settings.calendar_timeout_seconds,
    )
