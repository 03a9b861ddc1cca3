"""Booking data types shared by the calendar gateway and scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

APPOINTMENT_MINUTES = 60


@dataclass(frozen=True)
class TimeSlot:
    """A half-open interval ``[start, end)`` on the calendar."""

    start: datetime
    end: datetime

    @classmethod
    def starting_at(
        cls, start: datetime, minutes: int = APPOINTMENT_MINUTES
    ) -> "TimeSlot":
        """Build a slot of ``minutes`` length beginning at ``start``."""
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True if ``[start, end)`` shares any instant with this slot.

        Abutting intervals (one ends exactly where the other starts) do
        not overlap.
        """
        return start < self.end and end > self.start


@dataclass(frozen=True)
class Available:
    """The requested slot has no overlapping busy interval."""


@dataclass(frozen=True)
class Busy:
    """The requested slot collides with one or more busy intervals."""

    conflicts: list[TimeSlot] = field(default_factory=list)


AvailabilityResult = Available | Busy


@dataclass(frozen=True)
class Appointment:
    """An entry to be written to the shared calendar."""

    slot: TimeSlot
    summary: str
    description: str
    caller: str | None = None


@dataclass(frozen=True)
class BookingConfirmation:
    """What the calendar returned after inserting an appointment."""

    event_id: str
    html_link: str = ""
    status: str = "confirmed"
