"""End-to-end tests for the call-control webhook over HTTP."""

import os
import sys
from unittest.mock import AsyncMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient

from receptionist.app import create_app
from receptionist.calendar_gateway import CalendarGateway
from receptionist.config import Settings
from receptionist.models.events import (
    CallInitiated,
    GatherEnded,
    OtherEvent,
    parse_call_event,
)


def event(event_type, **payload):
    return {"data": {"event_type": event_type, "payload": payload}}


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def gateway():
    gw = CalendarGateway.not_ready("GOOGLE_SERVICE_ACCOUNT_JSON unset")
    gw.check_availability = AsyncMock()
    gw.book_appointment = AsyncMock()
    return gw


@pytest.fixture
def client(settings, gateway):
    return TestClient(create_app(settings=settings, gateway=gateway))


# ── Event parsing ──────────────────────────────────────────────────


class TestParseCallEvent:
    def test_initiated(self):
        assert parse_call_event(event("call.initiated", **{"from": "+15551234567"})) == CallInitiated(
            caller="+15551234567"
        )

    def test_gather_ended(self):
        parsed = parse_call_event(event("call.gather.ended", transcript="Hours?", **{"from": "+1555"}))
        assert parsed == GatherEnded(caller="+1555", transcript="Hours?")

    def test_null_transcript(self):
        parsed = parse_call_event(event("call.gather.ended", transcript=None))
        assert parsed == GatherEnded(caller=None, transcript=None)

    def test_missing_payload(self):
        assert parse_call_event({"data": {"event_type": "call.gather.ended"}}) == GatherEnded()

    def test_other(self):
        assert parse_call_event(event("call.hangup")) == OtherEvent(event_type="call.hangup")

    @pytest.mark.parametrize("body", [[], "text", {"data": None}, None])
    def test_malformed(self, body):
        assert isinstance(parse_call_event(body), OtherEvent)


# ── HTTP ───────────────────────────────────────────────────────────


class TestWebhook:
    def test_hello(self, client):
        resp = client.get("/webhook")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Hello from Telnyx Webhook"}

    def test_health_reports_calendar_readiness(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["calendar_ready"] is False

    def test_call_initiated(self, client):
        resp = client.post("/webhook", json=event("call.initiated", **{"from": "+15551234567"}))

        assert resp.status_code == 200
        speak, gather = resp.json()["commands"]
        assert speak["type"] == "speak"
        assert speak["params"]["voice"] == "female"
        assert "Baugh Electric" in speak["params"]["payload"]
        assert gather["type"] == "gather_using_speech"
        assert gather["params"]["language"] == "en-US"
        assert gather["params"]["speech_timeout"] == 5
        assert gather["params"]["inter_digit_timeout"] == 2
        assert {"schedule", "human"} <= set(gather["params"]["hints"])

    def test_representative_dials(self, client):
        resp = client.post(
            "/webhook",
            json=event("call.gather.ended", transcript="I want to talk to a representative please"),
        )
        assert resp.json() == {
            "commands": [
                {"type": "dial", "params": {"to": "+17177362829", "from": "+17172978787"}}
            ]
        }

    def test_hours(self, client, settings):
        resp = client.post("/webhook", json=event("call.gather.ended", transcript="what are your hours"))
        commands = resp.json()["commands"]
        assert commands[0]["params"]["payload"] == settings.business_hours_text
        assert commands[1]["type"] == "gather_using_speech"

    def test_empty_transcript_falls_back(self, client):
        resp = client.post("/webhook", json=event("call.gather.ended"))
        commands = resp.json()["commands"]
        assert "didn't catch that" in commands[0]["params"]["payload"]

    def test_schedule_without_calendar_transfers(self, client, gateway):
        resp = client.post(
            "/webhook",
            json=event("call.gather.ended", transcript="book an appointment tomorrow at 3pm"),
        )
        commands = resp.json()["commands"]
        assert [c["type"] for c in commands] == ["speak", "dial"]
        gateway.check_availability.assert_not_awaited()
        gateway.book_appointment.assert_not_awaited()

    def test_other_event_acknowledged(self, client):
        resp = client.post("/webhook", json=event("call.answered"))
        assert resp.status_code == 200
        assert resp.json() == {"commands": [], "message": "Webhook received"}

    def test_invalid_json_acknowledged(self, client):
        resp = client.post(
            "/webhook", content=b"not json", headers={"content-type": "application/json"}
        )
        assert resp.status_code == 200
        assert resp.json()["commands"] == []
