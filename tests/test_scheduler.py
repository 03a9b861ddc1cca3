"""Tests for SchedulingEngine: parse, check, book, and every degrade path."""

import os
import sys
from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from receptionist.calendar_gateway import CalendarGateway
from receptionist.config import Settings
from receptionist.dialogue.scheduler import (
    ASK_FOR_FUTURE_TIME,
    ASK_FOR_OTHER_TIME,
    ASK_FOR_TIME,
    SchedulingEngine,
    caller_description,
    describe_slot,
)
from receptionist.errors import GatewayTransportError
from receptionist.models.booking import (
    Available,
    BookingConfirmation,
    Busy,
    TimeSlot,
)
from receptionist.models.outcomes import Speak, SpeakAndGather, SpeakAndTransfer

TZ_NAME = "America/New_York"
TZ = ZoneInfo(TZ_NAME)
NOW = datetime(2026, 10, 19, 10, 0, tzinfo=TZ)


@pytest.fixture
def settings():
    return Settings(_env_file=None, calendar_timezone=TZ_NAME)


def make_gateway(availability=None, confirmation=None):
    """A ready gateway whose calendar calls are AsyncMocks."""
    gateway = CalendarGateway(provider=AsyncMock(), timezone=TZ_NAME)
    gateway.check_availability = AsyncMock(return_value=availability or Available())
    gateway.book_appointment = AsyncMock(
        return_value=confirmation or BookingConfirmation(event_id="evt_1")
    )
    return gateway


def make_engine(gateway, settings):
    return SchedulingEngine(gateway=gateway, settings=settings, clock=lambda: NOW)


async def schedule(engine, transcript, caller="+15551234567"):
    return await engine.schedule(transcript, caller=caller, timezone=TZ_NAME, calendar_id="primary")


class TestHappyPath:
    async def test_books_requested_hour(self, settings):
        gateway = make_gateway()
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "can i book an appointment tomorrow at 3pm")

        assert isinstance(outcome, Speak)
        assert "Tuesday, October 20 from 3:00 PM to 4:00 PM" in outcome.text
        gateway.check_availability.assert_awaited_once()
        slot, calendar_id = gateway.check_availability.await_args.args
        assert slot == TimeSlot(
            datetime(2026, 10, 20, 15, 0, tzinfo=TZ), datetime(2026, 10, 20, 16, 0, tzinfo=TZ)
        )
        assert calendar_id == "primary"
        gateway.book_appointment.assert_awaited_once()

    async def test_appointment_contents(self, settings):
        gateway = make_gateway()
        engine = make_engine(gateway, settings)

        await schedule(engine, "book me for tomorrow at 3pm", caller="+15551234567")

        appointment, calendar_id = gateway.book_appointment.await_args.args
        assert appointment.summary == "Service Appointment"
        assert "+15551234567" in appointment.description
        assert appointment.caller == "+15551234567"
        assert appointment.slot.duration_minutes == 60
        assert calendar_id == "primary"


class TestAskAgain:
    async def test_no_date(self, settings):
        gateway = make_gateway()
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "schedule something")

        assert isinstance(outcome, SpeakAndGather)
        assert outcome.text == ASK_FOR_TIME
        assert "what date and time works best" in outcome.text.lower()
        gateway.check_availability.assert_not_awaited()

    async def test_past_time(self, settings):
        gateway = make_gateway()
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "book today in the morning")

        assert isinstance(outcome, SpeakAndGather)
        assert outcome.text == ASK_FOR_FUTURE_TIME
        gateway.check_availability.assert_not_awaited()

    async def test_busy_never_books(self, settings):
        conflict = TimeSlot(
            datetime(2026, 10, 20, 15, 30, tzinfo=TZ), datetime(2026, 10, 20, 16, 30, tzinfo=TZ)
        )
        gateway = make_gateway(availability=Busy(conflicts=[conflict]))
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "can i book an appointment tomorrow at 3pm")

        assert isinstance(outcome, SpeakAndGather)
        assert outcome.text == ASK_FOR_OTHER_TIME
        gateway.book_appointment.assert_not_awaited()


class TestDegradeToTransfer:
    async def test_not_ready_makes_no_calls(self, settings):
        gateway = CalendarGateway.not_ready("no credential")
        gateway.check_availability = AsyncMock()
        gateway.book_appointment = AsyncMock()
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "book tomorrow at 3pm")

        assert isinstance(outcome, SpeakAndTransfer)
        assert outcome.destination == settings.transfer_to_number
        gateway.check_availability.assert_not_awaited()
        gateway.book_appointment.assert_not_awaited()

    async def test_availability_failure(self, settings):
        gateway = make_gateway()
        gateway.check_availability.side_effect = GatewayTransportError("freebusy", "timed out")
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "book tomorrow at 3pm")

        assert isinstance(outcome, SpeakAndTransfer)
        gateway.book_appointment.assert_not_awaited()

    async def test_insert_failure(self, settings):
        gateway = make_gateway()
        gateway.book_appointment.side_effect = GatewayTransportError("events.insert", "500")
        engine = make_engine(gateway, settings)

        outcome = await schedule(engine, "book tomorrow at 3pm")

        assert isinstance(outcome, SpeakAndTransfer)
        assert outcome.destination == settings.transfer_to_number

    async def test_unexpected_error_is_not_swallowed(self, settings):
        gateway = make_gateway()
        gateway.check_availability.side_effect = RuntimeError("bug")
        engine = make_engine(gateway, settings)

        with pytest.raises(RuntimeError):
            await schedule(engine, "book tomorrow at 3pm")


class TestSlotLockRelease:
    async def test_lock_released_after_failure(self, settings):
        gateway = make_gateway()
        gateway.check_availability.side_effect = GatewayTransportError("freebusy", "x")
        engine = make_engine(gateway, settings)

        await schedule(engine, "book tomorrow at 3pm")

        assert len(gateway.slot_locks) == 0


class TestFormatting:
    def test_describe_slot_in_local_time(self):
        utc_start = datetime(2026, 10, 20, 19, 0, tzinfo=ZoneInfo("UTC"))
        slot = TimeSlot.starting_at(utc_start)
        assert describe_slot(slot, TZ_NAME) == "Tuesday, October 20 from 3:00 PM to 4:00 PM"

    def test_describe_slot_morning(self):
        slot = TimeSlot.starting_at(datetime(2026, 11, 2, 9, 30, tzinfo=TZ))
        assert describe_slot(slot, TZ_NAME) == "Monday, November 2 from 9:30 AM to 10:30 AM"

    def test_caller_description(self):
        assert caller_description("+15551234567") == "Booked by phone from +15551234567."
        assert "unavailable" in caller_description(None)


def test_slot_is_exactly_one_hour():
    slot = TimeSlot.starting_at(NOW)
    assert slot.end == NOW + timedelta(minutes=60)
