"""Exception types raised by the calendar side of the receptionist.

Expected dialogue branches (no date heard, slot already taken) are plain
return values. Only genuine faults travel as exceptions, and the dialogue
orchestrator turns every one of them into a hand-off to a person.
"""

from __future__ import annotations


class ReceptionistError(Exception):
    """Base class for receptionist errors."""


class ConfigurationError(ReceptionistError):
    """Calendar credential or settings are missing or malformed."""


class GatewayTransportError(ReceptionistError):
    """A calendar call failed or timed out during a live call turn."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class GatewayNotReadyError(ReceptionistError):
    """A calendar call was attempted on a gateway that never initialised."""
