"""Calendar provider abstractions and implementations."""

from .base import CalendarProvider

__all__ = ["CalendarProvider"]
