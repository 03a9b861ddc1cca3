"""Abstract base class for calendar providers.

Defines the two calendar operations the receptionist needs: reading busy
intervals and inserting an appointment. Any calendar backend (Google,
Outlook, etc.) implements this ABC.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from receptionist.models.booking import Appointment, BookingConfirmation, TimeSlot


class CalendarProvider(ABC):
    """Abstract calendar backend.

    Implementations raise ``GatewayTransportError`` for any network,
    authentication or API failure.
    """

    @abstractmethod
    async def get_busy_intervals(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
        timezone: str = "UTC",
    ) -> list[TimeSlot]:
        """Return busy intervals on ``calendar_id`` within ``[start, end)``.

        Args:
            calendar_id: The calendar to query.
            start: Beginning of the query window.
            end: End of the query window.
            timezone: IANA name used to express the returned intervals.

        Returns:
            Busy ``TimeSlot`` intervals as reported by the backend, which
            may include intervals that merely touch the window.
        """

    @abstractmethod
    async def create_event(
        self,
        calendar_id: str,
        appointment: Appointment,
        timezone: str = "UTC",
    ) -> BookingConfirmation:
        """Insert ``appointment`` on ``calendar_id``.

        Inserting the same slot twice creates two entries.
        """
