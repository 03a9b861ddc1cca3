"""Scheduling engine: from a spoken request to a booked calendar slot.

One call turn runs the whole sequence: parse the requested time, check
the calendar for that exact hour, and book it if free. Calendar trouble
hands the caller to a person; a missing or taken time asks again.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from receptionist.calendar_gateway import CalendarGateway
from receptionist.config import Settings
from receptionist.dialogue import temporal
from receptionist.errors import GatewayTransportError
from receptionist.models.booking import APPOINTMENT_MINUTES, Appointment, Busy, TimeSlot
from receptionist.models.outcomes import (
    DialogueOutcome,
    GatherOptions,
    Speak,
    SpeakAndGather,
    SpeakAndTransfer,
)

log = logging.getLogger("receptionist.scheduler")

DATE_HINTS = [
    "today", "tomorrow", "next week", "morning", "afternoon", "evening",
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
]

ASK_FOR_TIME = (
    "Sure, I can help you schedule an appointment. "
    "What date and time works best for you?"
)
ASK_FOR_FUTURE_TIME = (
    "That time has already passed. What date and time works best for you?"
)
ASK_FOR_OTHER_TIME = (
    "I'm sorry, that time is already booked. "
    "What other date and time would work for you?"
)
CALENDAR_UNAVAILABLE = (
    "I'm sorry, I can't reach our scheduling calendar right now. "
    "Let me connect you with a team member who can book that for you."
)


def _clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")


def describe_slot(slot: TimeSlot, timezone: str) -> str:
    """Spoken form of a slot, e.g. ``Tuesday, October 20 from 3:00 PM to 4:00 PM``."""
    tz = ZoneInfo(timezone)
    start, end = slot.start.astimezone(tz), slot.end.astimezone(tz)
    return f"{start:%A, %B} {start.day} from {_clock(start)} to {_clock(end)}"


def caller_description(caller: str | None) -> str:
    if caller:
        return f"Booked by phone from {caller}."
    return "Booked by phone. Caller number unavailable."


class SchedulingEngine:
    """Books appointments through an injected ``CalendarGateway``.

    Args:
        gateway: Calendar gateway built at process start. Its readiness
            never changes afterwards.
        settings: Supplies the transfer number, appointment summary and
            business name used in replies.
        clock: Returns "now"; tests pass a fixed clock.
    """

    def __init__(
        self,
        gateway: CalendarGateway,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._gateway = gateway
        self._settings = settings
        self._clock = clock

    def _now(self, tz: ZoneInfo) -> datetime:
        return self._clock().astimezone(tz) if self._clock else datetime.now(tz)

    def _hand_off(self) -> SpeakAndTransfer:
        return SpeakAndTransfer(
            text=CALENDAR_UNAVAILABLE,
            destination=self._settings.transfer_to_number,
        )

    @staticmethod
    def _ask(text: str) -> SpeakAndGather:
        return SpeakAndGather(text=text, gather=GatherOptions(hints=list(DATE_HINTS)))

    async def schedule(
        self,
        transcript: str,
        caller: str | None,
        timezone: str,
        calendar_id: str,
    ) -> DialogueOutcome:
        if not self._gateway.ready:
            log.warning("Calendar gateway not ready (%s); transferring", self._gateway.reason)
            return self._hand_off()

        tz = ZoneInfo(timezone)
        now = self._now(tz)
        start = temporal.parse(transcript, timezone, now=now)
        if start is None:
            log.info("No date/time found in scheduling request")
            return self._ask(ASK_FOR_TIME)
        if start < now:
            log.info("Requested time %s is in the past", start.isoformat())
            return self._ask(ASK_FOR_FUTURE_TIME)

        slot = TimeSlot.starting_at(start, APPOINTMENT_MINUTES)

        async with self._gateway.slot_locks.hold(calendar_id, slot):
            try:
                availability = await self._gateway.check_availability(slot, calendar_id)
            except GatewayTransportError as e:
                log.error("Availability check failed: %s", e)
                return self._hand_off()

            if isinstance(availability, Busy):
                return self._ask(ASK_FOR_OTHER_TIME)

            appointment = Appointment(
                slot=slot,
                summary=self._settings.appointment_summary,
                description=caller_description(caller),
                caller=caller,
            )
            try:
                confirmation = await self._gateway.book_appointment(appointment, calendar_id)
            except GatewayTransportError as e:
                log.error("Booking failed: %s", e)
                return self._hand_off()

        log.info("Booked event %s for %s", confirmation.event_id, slot.start.isoformat())
        return Speak(
            text=(
                "You're all set. I've booked your appointment for "
                f"{describe_slot(slot, timezone)}. "
                f"Thank you for calling {self._settings.business_name}!"
            )
        )
