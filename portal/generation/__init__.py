"""Timetable generation trigger and status polling."""

from .orchestrator import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
    GENERATION_FAILED_MESSAGE,
    START_FAILED_MESSAGE,
    GenerationOrchestrator,
    GenerationState,
    PollSession,
)

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_POLL_TIMEOUT",
    "GENERATION_FAILED_MESSAGE",
    "START_FAILED_MESSAGE",
    "GenerationOrchestrator",
    "GenerationState",
    "PollSession",
]
