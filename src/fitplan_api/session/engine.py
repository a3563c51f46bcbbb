"""
Workout Session Engine

Owns the state of one timed workout session:
- elapsed-time tick while the session is running
- per-set completion tracking
- rest countdown auto-started when a set is marked complete
- finalization into a CompletedSession handed to a recorder

Status flow:
    idle -> running -> finalizing -> committed
    running -> abandoned
    finalizing -> finalize_failed -> finalizing (retry) | abandoned

The engine never persists anything itself; the recorder passed to finish()
does. A failed recorder call leaves the finalized snapshot in place so the
same record can be sent again.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from fitplan_api.config import settings
from fitplan_api.errors import (
    InvalidSessionStart,
    PersistenceFailure,
    SessionNotActive,
    ValidationError,
)
from fitplan_api.models import (
    AccountContext,
    CompletedSession,
    ExerciseCompletion,
    SessionSummary,
    WorkoutInput,
)
from fitplan_api.repositories.history import HistoryRepository
from fitplan_api.session.timers import Scheduler, TickHandle

logger = logging.getLogger(__name__)

TICK_SECONDS = 1


class SessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"
    FINALIZE_FAILED = "finalize_failed"
    COMMITTED = "committed"
    ABANDONED = "abandoned"


TERMINAL_STATUSES = {SessionStatus.COMMITTED, SessionStatus.ABANDONED}


def format_elapsed(seconds: int) -> str:
    """Render seconds as zero-padded HH:MM:SS."""
    hours, rest = divmod(max(int(seconds), 0), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class SessionRecorder(Protocol):
    async def record(self, session: CompletedSession) -> CompletedSession:
        ...


class HistoryRecorder:
    """Writes completed sessions to workout_history off the event loop."""

    def __init__(self, repository: Optional[HistoryRepository] = None):
        self.repository = repository or HistoryRepository()

    async def record(self, session: CompletedSession) -> CompletedSession:
        return await asyncio.to_thread(self.repository.insert, session)


class RestTimer:
    """Countdown between sets. Starting while active restarts it; nothing queues."""

    def __init__(
        self,
        scheduler: Scheduler,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        self._scheduler = scheduler
        self._on_complete = on_complete
        self._handle: Optional[TickHandle] = None
        self.remaining = 0
        self.paused = False
        self.active = False

    def start(self, duration: int) -> None:
        if duration <= 0:
            raise ValidationError("Rest duration must be positive")
        self._cancel_handle()
        self.remaining = int(duration)
        self.paused = False
        self.active = True
        self._handle = self._scheduler.every(TICK_SECONDS, self.tick)

    def pause(self) -> None:
        if not self.active or self.paused:
            return
        self.paused = True
        self._cancel_handle()

    def resume(self) -> None:
        if not self.active or not self.paused:
            return
        self.paused = False
        self._handle = self._scheduler.every(TICK_SECONDS, self.tick)

    def reset(self) -> None:
        self._cancel_handle()
        self.active = False
        self.paused = False
        self.remaining = 0

    def tick(self) -> None:
        if not self.active or self.paused:
            return
        self.remaining -= 1
        if self.remaining <= 0:
            self.remaining = 0
            self.active = False
            self._cancel_handle()
            if self._on_complete:
                self._on_complete()

    def snapshot(self) -> Optional[Dict[str, Any]]:
        if not self.active:
            return None
        return {"remaining": self.remaining, "paused": self.paused}

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class WorkoutSession:
    """One timed execution of a workout, owned by a single account."""

    def __init__(
        self,
        account: AccountContext,
        scheduler: Scheduler,
        rest_seconds: Optional[int] = None,
        on_rest_complete: Optional[Callable[[], None]] = None,
    ):
        self.account = account
        self.rest_seconds = settings.REST_TIMER_SECONDS if rest_seconds is None else rest_seconds
        if self.rest_seconds <= 0:
            raise ValidationError("Rest duration must be positive")
        self.status = SessionStatus.IDLE
        self.workout: Optional[WorkoutInput] = None
        self.elapsed_seconds = 0
        self.completion: Dict[str, List[bool]] = {}
        self.rest_timer = RestTimer(scheduler, on_complete=on_rest_complete)
        self._scheduler = scheduler
        self._elapsed_handle: Optional[TickHandle] = None
        self._pending_record: Optional[CompletedSession] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, workout: Optional[WorkoutInput]) -> None:
        if self.status != SessionStatus.IDLE:
            raise InvalidSessionStart("Session has already been started")
        if workout is None or not workout.exercises:
            raise InvalidSessionStart("Select a workout with at least one exercise")

        ids = [exercise.id for exercise in workout.exercises]
        if len(set(ids)) != len(ids):
            raise ValidationError("Workout exercises must have unique ids")

        # Later edits to the workout definition must not leak into the session
        self.workout = workout.model_copy(deep=True)
        self.completion = {
            exercise.id: [False] * exercise.sets for exercise in self.workout.exercises
        }
        self.elapsed_seconds = 0
        self.status = SessionStatus.RUNNING
        self._elapsed_handle = self._scheduler.every(TICK_SECONDS, self._on_elapsed_tick)
        logger.info(f"Session started for user {self.account.user_id}: '{self.workout.name}'")

    def toggle_set(self, exercise_id: str, set_index: int) -> bool:
        """Flip one set's completion. Returns the new value."""
        self._require(SessionStatus.RUNNING)
        sets = self.completion.get(exercise_id)
        if sets is None:
            raise ValidationError(f"Unknown exercise {exercise_id}")
        if not 0 <= set_index < len(sets):
            raise ValidationError(f"Set index {set_index} out of range for {exercise_id}")

        sets[set_index] = not sets[set_index]
        if sets[set_index]:
            self.rest_timer.start(self.rest_seconds)
        return sets[set_index]

    async def finish(self, recorder: SessionRecorder) -> SessionSummary:
        """
        Finalize the session and hand the record to the recorder.

        Raises:
            PersistenceFailure: the recorder failed; the session moves to
                finalize_failed and finish() may be called again.
        """
        if self.status == SessionStatus.RUNNING:
            self._pending_record = self.build_record()
            self._stop_timers()
        elif self.status != SessionStatus.FINALIZE_FAILED:
            raise SessionNotActive(f"Cannot finish a session that is {self.status.value}")

        record = self._pending_record
        self.status = SessionStatus.FINALIZING
        try:
            saved = await recorder.record(record)
        except Exception as e:
            self.status = SessionStatus.FINALIZE_FAILED
            logger.error(f"Failed to save session for user {self.account.user_id}: {e}")
            if isinstance(e, PersistenceFailure):
                raise
            raise PersistenceFailure(f"Could not save workout session: {e}") from e

        self.status = SessionStatus.COMMITTED
        message = (
            f"{record.completed_sets}/{record.total_sets} sets completed "
            f"in {format_elapsed(record.duration)}"
        )
        logger.info(f"Session committed for user {self.account.user_id}: {message}")
        return SessionSummary(
            completed_sets=record.completed_sets,
            total_sets=record.total_sets,
            elapsed_seconds=record.duration,
            message=message,
            record=saved or record,
        )

    def abandon(self) -> None:
        """Discard the session without saving anything."""
        if self.status in TERMINAL_STATUSES:
            return
        if self.status == SessionStatus.FINALIZING:
            raise SessionNotActive("Session is being saved")
        if self.status == SessionStatus.RUNNING:
            self._stop_timers()
        self.status = SessionStatus.ABANDONED
        self.completion = {}
        self._pending_record = None
        logger.info(f"Session abandoned for user {self.account.user_id}")

    # ------------------------------------------------------------------
    # Rest timer controls
    # ------------------------------------------------------------------

    def pause_rest(self) -> None:
        self._require(SessionStatus.RUNNING)
        self.rest_timer.pause()

    def resume_rest(self) -> None:
        self._require(SessionStatus.RUNNING)
        self.rest_timer.resume()

    def reset_rest(self) -> None:
        self._require(SessionStatus.RUNNING)
        self.rest_timer.reset()

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    @property
    def total_target_sets(self) -> int:
        if self.workout is None:
            return 0
        return sum(exercise.sets for exercise in self.workout.exercises)

    @property
    def completed_set_count(self) -> int:
        return sum(sum(1 for done in sets if done) for sets in self.completion.values())

    def completed_sets_for(self, exercise_id: str) -> int:
        return sum(1 for done in self.completion.get(exercise_id, []) if done)

    @property
    def total_weight_lifted(self) -> float:
        # Target weight and reps are applied to every completed set
        if self.workout is None:
            return 0
        return sum(
            exercise.weight * exercise.reps * self.completed_sets_for(exercise.id)
            for exercise in self.workout.exercises
        )

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    def build_record(self) -> CompletedSession:
        """Snapshot the current state as a history record."""
        if self.workout is None:
            raise SessionNotActive("No workout in session")

        muscle_groups: List[str] = []
        for exercise in self.workout.exercises:
            group = exercise.body_part or exercise.target
            if group and group not in muscle_groups:
                muscle_groups.append(group)

        return CompletedSession(
            user_id=self.account.user_id,
            workout_name=self.workout.name,
            duration=self.elapsed_seconds,
            total_weight=self.total_weight_lifted,
            total_sets=self.total_target_sets,
            completed_sets=self.completed_set_count,
            muscle_groups=muscle_groups,
            exercises=[
                ExerciseCompletion(
                    name=exercise.name,
                    sets=exercise.sets,
                    reps=exercise.reps,
                    weight=exercise.weight,
                    completed_sets=self.completed_sets_for(exercise.id),
                )
                for exercise in self.workout.exercises
            ],
        )

    def snapshot(self) -> Dict[str, Any]:
        """Plain view of the session for API responses."""
        return {
            "status": self.status.value,
            "workout_name": self.workout.name if self.workout else None,
            "elapsed_seconds": self.elapsed_seconds,
            "elapsed": self.elapsed_display,
            "completion": {key: list(value) for key, value in self.completion.items()},
            "rest_timer": self.rest_timer.snapshot(),
            "total_sets": self.total_target_sets,
            "completed_sets": self.completed_set_count,
            "total_weight": self.total_weight_lifted,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_elapsed_tick(self) -> None:
        if self.status == SessionStatus.RUNNING:
            self.elapsed_seconds += 1

    def _stop_timers(self) -> None:
        if self._elapsed_handle is not None:
            self._elapsed_handle.cancel()
            self._elapsed_handle = None
        self.rest_timer.reset()

    def _require(self, status: SessionStatus) -> None:
        if self.status != status:
            raise SessionNotActive(f"Session is {self.status.value}, expected {status.value}")
