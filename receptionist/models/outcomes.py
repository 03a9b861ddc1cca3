"""Dialogue outcomes: the single artifact produced for each call turn.

The orchestrator picks exactly one of these per inbound event and the
response compiler renders it into telephony commands.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatherOptions:
    """Parameters for collecting the caller's next utterance.

    ``language`` and the timeouts fall back to settings when left unset.
    """

    hints: list[str] = field(default_factory=list)
    language: str | None = None
    speech_timeout: int | None = None
    inter_digit_timeout: int | None = None


@dataclass(frozen=True)
class Speak:
    text: str


@dataclass(frozen=True)
class SpeakAndGather:
    text: str
    gather: GatherOptions = field(default_factory=GatherOptions)


@dataclass(frozen=True)
class Transfer:
    destination: str


@dataclass(frozen=True)
class SpeakAndTransfer:
    text: str
    destination: str


@dataclass(frozen=True)
class Acknowledge:
    """Neutral reply for platform events the dialogue does not act on."""

    event_type: str = ""


DialogueOutcome = Speak | SpeakAndGather | Transfer | SpeakAndTransfer | Acknowledge
