"""Data models for the receptionist."""

from .booking import (
    Appointment,
    Available,
    AvailabilityResult,
    BookingConfirmation,
    Busy,
    TimeSlot,
)
from .events import CallEvent, CallInitiated, GatherEnded, OtherEvent, parse_call_event
from .outcomes import (
    Acknowledge,
    DialogueOutcome,
    GatherOptions,
    Speak,
    SpeakAndGather,
    SpeakAndTransfer,
    Transfer,
)

__all__ = [
    "Acknowledge",
    "Appointment",
    "Available",
    "AvailabilityResult",
    "BookingConfirmation",
    "Busy",
    "CallEvent",
    "CallInitiated",
    "DialogueOutcome",
    "GatherEnded",
    "GatherOptions",
    "OtherEvent",
    "Speak",
    "SpeakAndGather",
    "SpeakAndTransfer",
    "TimeSlot",
    "Transfer",
    "parse_call_event",
]
