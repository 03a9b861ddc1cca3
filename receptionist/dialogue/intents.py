"""Keyword intent classifier for caller transcripts.

Rules are evaluated top to bottom and the first match wins. Transfer
requests come first so a caller asking for a person is never routed
anywhere else. Keywords match whole words only ("book" does not fire on
"facebook").
"""

from __future__ import annotations

import re
from enum import Enum


class Intent(str, Enum):
    TRANSFER_TO_HUMAN = "transfer_to_human"
    SCHEDULE_APPOINTMENT = "schedule_appointment"
    ASK_HOURS = "ask_hours"
    ASK_SERVICES = "ask_services"
    ASK_LOCATION = "ask_location"
    UNRECOGNIZED = "unrecognized"


def _words(*keywords: str) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


INTENT_RULES: tuple[tuple[Intent, re.Pattern[str]], ...] = (
    (
        Intent.TRANSFER_TO_HUMAN,
        _words("human", "representative", "agent", "person", "operator"),
    ),
    (
        Intent.SCHEDULE_APPOINTMENT,
        _words("schedule", "book", "booking", "appointment", "appointments", "reserve"),
    ),
    (Intent.ASK_HOURS, _words("hours", "open", "close", "closed", "closing")),
    (
        Intent.ASK_SERVICES,
        _words("service", "services", "repair", "repairs", "install", "installation"),
    ),
    (Intent.ASK_LOCATION, _words("location", "where", "address", "located", "area")),
)


def normalize_transcript(transcript: str | None) -> str:
    """Case-fold and collapse whitespace. ``None`` becomes ``""``."""
    if not transcript:
        return ""
    return " ".join(transcript.casefold().split())


def classify(transcript: str) -> Intent:
    """Map a normalized transcript to an ``Intent``. Total and pure."""
    for intent, pattern in INTENT_RULES:
        if pattern.search(transcript):
            return intent
    return Intent.UNRECOGNIZED
