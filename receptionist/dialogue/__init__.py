"""Dialogue engine: intent classification, scheduling and reply rendering."""

from .intents import Intent, classify
from .orchestrator import DialogueOrchestrator
from .responses import compile_outcome
from .scheduler import SchedulingEngine

__all__ = [
    "DialogueOrchestrator",
    "Intent",
    "SchedulingEngine",
    "classify",
    "compile_outcome",
]
