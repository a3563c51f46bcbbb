"""Workout session engine."""
from .engine import (
    HistoryRecorder,
    RestTimer,
    SessionStatus,
    WorkoutSession,
    format_elapsed,
)
from .registry import SessionRegistry
from .timers import AsyncioScheduler, Scheduler, TickHandle

__all__ = [
    "AsyncioScheduler",
    "HistoryRecorder",
    "RestTimer",
    "Scheduler",
    "SessionRegistry",
    "SessionStatus",
    "TickHandle",
    "WorkoutSession",
    "format_elapsed",
]
