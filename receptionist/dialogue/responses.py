"""Response compiler: renders a ``DialogueOutcome`` as call-control commands.

Output shape::

    {"commands": [
        {"type": "speak", "params": {"voice": ..., "payload": ...}},
        {"type": "gather_using_speech", "params": {"language": ..., "hints": [...],
                                                    "speech_timeout": ...}},
        {"type": "dial", "params": {"to": ..., "from": ...}},
    ]}
"""

from __future__ import annotations

from typing import Any

from receptionist.config import Settings
from receptionist.models.outcomes import (
    Acknowledge,
    DialogueOutcome,
    GatherOptions,
    Speak,
    SpeakAndGather,
    SpeakAndTransfer,
    Transfer,
)

ACKNOWLEDGEMENT = "Webhook received"


def speak_command(text: str, settings: Settings) -> dict[str, Any]:
    return {"type": "speak", "params": {"voice": settings.voice, "payload": text}}


def gather_command(options: GatherOptions, settings: Settings) -> dict[str, Any]:
    params: dict[str, Any] = {
        "language": options.language or settings.speech_language,
    }
    if options.hints:
        params["hints"] = list(options.hints)
    params["speech_timeout"] = (
        options.speech_timeout
        if options.speech_timeout is not None
        else settings.speech_timeout
    )
    if options.inter_digit_timeout is not None:
        params["inter_digit_timeout"] = options.inter_digit_timeout
    return {"type": "gather_using_speech", "params": params}


def dial_command(destination: str, settings: Settings) -> dict[str, Any]:
    return {
        "type": "dial",
        "params": {"to": destination, "from": settings.transfer_from_number},
    }


def compile_outcome(outcome: DialogueOutcome, settings: Settings) -> dict[str, Any]:
    """Render one outcome as the JSON body returned to the platform."""
    if isinstance(outcome, Speak):
        commands = [speak_command(outcome.text, settings)]
    elif isinstance(outcome, SpeakAndGather):
        commands = [
            speak_command(outcome.text, settings),
            gather_command(outcome.gather, settings),
        ]
    elif isinstance(outcome, Transfer):
        commands = [dial_command(outcome.destination, settings)]
    elif isinstance(outcome, SpeakAndTransfer):
        commands = [
            speak_command(outcome.text, settings),
            dial_command(outcome.destination, settings),
        ]
    elif isinstance(outcome, Acknowledge):
        return {"commands": [], "message": ACKNOWLEDGEMENT}
    else:
        raise TypeError(f"Unknown dialogue outcome: {outcome!r}")
    return {"commands": commands}
