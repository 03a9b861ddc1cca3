"""Dialogue orchestrator: one inbound call event in, one outcome out.

Each webhook is handled on its own. There is no session between turns;
the caller's latest transcript is reclassified from scratch every time.
``handle`` never raises. Any fault below it turns into an apology and a
transfer to a person.
"""

from __future__ import annotations

import logging

from receptionist.config import Settings
from receptionist.dialogue.intents import Intent, classify, normalize_transcript
from receptionist.dialogue.scheduler import SchedulingEngine
from receptionist.models.events import CallEvent, CallInitiated, GatherEnded
from receptionist.models.outcomes import (
    Acknowledge,
    DialogueOutcome,
    GatherOptions,
    SpeakAndGather,
    SpeakAndTransfer,
    Transfer,
)

log = logging.getLogger("receptionist.orchestrator")

GREETING_HINTS = [
    "schedule", "appointment", "hours", "services", "location", "human", "representative",
]
HOURS_HINTS = ["schedule", "services", "location", "human"]
SERVICES_HINTS = ["schedule", "human", "representative", "yes", "no"]
LOCATION_HINTS = ["schedule", "human", "representative", "hours", "services"]
FALLBACK_HINTS = ["schedule", "human", "representative", "hours", "services", "location"]

FALLBACK_TEXT = (
    "I'm sorry, I didn't catch that. You can ask about our hours, services, "
    "or location, or say schedule to book an appointment. "
    "Or say representative to speak with a human."
)
FAULT_TEXT = (
    "I'm sorry, something went wrong on our end. "
    "Let me connect you with a member of our team."
)


def redact_pii(value: str | None) -> str:
    """Mask PII for logging: keep the first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


class DialogueOrchestrator:
    """Routes call events to scripted replies or the scheduling engine."""

    def __init__(self, settings: Settings, scheduler: SchedulingEngine) -> None:
        self._settings = settings
        self._scheduler = scheduler

    def greeting(self) -> SpeakAndGather:
        return SpeakAndGather(
            text=(
                f"Hello, thanks for calling {self._settings.business_name}, your "
                "trusted local electrical and HVAC experts. How can I help you today?"
            ),
            gather=GatherOptions(
                hints=list(GREETING_HINTS),
                inter_digit_timeout=self._settings.inter_digit_timeout,
            ),
        )

    def fallback(self) -> SpeakAndGather:
        return SpeakAndGather(text=FALLBACK_TEXT, gather=GatherOptions(hints=list(FALLBACK_HINTS)))

    async def handle(self, event: CallEvent) -> DialogueOutcome:
        try:
            return await self._dispatch(event)
        except Exception:
            log.exception("Unhandled fault during call turn (%s)", type(event).__name__)
            return SpeakAndTransfer(
                text=FAULT_TEXT,
                destination=self._settings.transfer_to_number,
            )

    async def _dispatch(self, event: CallEvent) -> DialogueOutcome:
        if isinstance(event, CallInitiated):
            log.info("Call initiated from %s", redact_pii(event.caller))
            return self.greeting()

        if isinstance(event, GatherEnded):
            return await self._handle_speech(event)

        log.debug("Acknowledging event %r", event.event_type)
        return Acknowledge(event_type=event.event_type)

    async def _handle_speech(self, event: GatherEnded) -> DialogueOutcome:
        transcript = normalize_transcript(event.transcript)
        intent = classify(transcript)
        log.info("Caller %s intent=%s", redact_pii(event.caller), intent.value)

        if intent is Intent.TRANSFER_TO_HUMAN:
            return Transfer(destination=self._settings.transfer_to_number)

        if intent is Intent.SCHEDULE_APPOINTMENT:
            return await self._scheduler.schedule(
                transcript,
                caller=event.caller,
                timezone=self._settings.calendar_timezone,
                calendar_id=self._settings.google_calendar_id,
            )

        if intent is Intent.ASK_HOURS:
            return SpeakAndGather(
                text=self._settings.business_hours_text,
                gather=GatherOptions(hints=list(HOURS_HINTS)),
            )

        if intent is Intent.ASK_SERVICES:
            return SpeakAndGather(
                text=self._settings.services_text,
                gather=GatherOptions(hints=list(SERVICES_HINTS)),
            )

        if intent is Intent.ASK_LOCATION:
            return SpeakAndGather(
                text=self._settings.service_area_text,
                gather=GatherOptions(hints=list(LOCATION_HINTS)),
            )

        return self.fallback()
