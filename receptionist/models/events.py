"""Inbound call-control webhook events.

The telephony platform POSTs one JSON document per call lifecycle event::

    {"data": {"event_type": "call.gather.ended",
              "payload": {"transcript": "...", "from": "+1..."}}}

``WebhookEvent`` is the lenient wire model; ``parse_call_event`` narrows it
to the ``CallEvent`` variants the dialogue understands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CALL_INITIATED = "call.initiated"
GATHER_ENDED = "call.gather.ended"


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transcript: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    call_control_id: Optional[str] = None


class WebhookData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_type: str = ""
    payload: WebhookPayload = Field(default_factory=WebhookPayload)


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: WebhookData = Field(default_factory=WebhookData)


@dataclass(frozen=True)
class CallInitiated:
    caller: str | None = None


@dataclass(frozen=True)
class GatherEnded:
    caller: str | None = None
    transcript: str | None = None


@dataclass(frozen=True)
class OtherEvent:
    event_type: str = ""
    caller: str | None = None


CallEvent = CallInitiated | GatherEnded | OtherEvent


def parse_call_event(body: Any) -> CallEvent:
    """Convert a decoded webhook body into a ``CallEvent``.

    Anything that does not validate (wrong shape, non-object body) becomes
    an ``OtherEvent`` so the caller still gets a well-formed reply.
    """
    try:
        event = WebhookEvent.model_validate(body)
    except ValidationError:
        return OtherEvent(event_type="invalid")

    data = event.data
    caller = data.payload.from_
    if data.event_type == CALL_INITIATED:
        return CallInitiated(caller=caller)
    if data.event_type == GATHER_ENDED:
        return GatherEnded(caller=caller, transcript=data.payload.transcript)
    return OtherEvent(event_type=data.event_type, caller=caller)
