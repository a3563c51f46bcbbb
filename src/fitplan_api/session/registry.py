"""Live sessions keyed by account, for the HTTP surface."""
import logging
from typing import Dict, Optional

from fitplan_api.errors import NotFound, SessionNotActive
from fitplan_api.models import AccountContext, SessionSummary, WorkoutInput
from fitplan_api.session.engine import (
    HistoryRecorder,
    SessionRecorder,
    SessionStatus,
    TERMINAL_STATUSES,
    WorkoutSession,
)
from fitplan_api.session.timers import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


class SessionRegistry:
    """At most one live session per account. Terminal sessions are dropped."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        recorder: Optional[SessionRecorder] = None,
        rest_seconds: Optional[int] = None,
    ):
        self.scheduler = scheduler or AsyncioScheduler()
        self.recorder = recorder or HistoryRecorder()
        self.rest_seconds = rest_seconds
        self._sessions: Dict[str, WorkoutSession] = {}

    def start(self, account: AccountContext, workout: Optional[WorkoutInput]) -> WorkoutSession:
        existing = self._sessions.get(account.user_id)
        if existing is not None and existing.status not in TERMINAL_STATUSES:
            if existing.status == SessionStatus.FINALIZING:
                raise SessionNotActive("Previous session is still being saved")
            if existing.status == SessionStatus.FINALIZE_FAILED:
                raise SessionNotActive("Previous session has not been saved; finish or abandon it first")

        # The replacement must start cleanly before the old session is dropped
        session = WorkoutSession(account, self.scheduler, rest_seconds=self.rest_seconds)
        session.start(workout)

        if existing is not None and existing.status not in TERMINAL_STATUSES:
            logger.info(f"Replacing unfinished session for user {account.user_id}")
            existing.abandon()
        self._sessions[account.user_id] = session
        return session

    def current(self, account: AccountContext) -> WorkoutSession:
        session = self._sessions.get(account.user_id)
        if session is None or session.status in TERMINAL_STATUSES:
            raise NotFound("No active workout session")
        return session

    async def finish(self, account: AccountContext) -> SessionSummary:
        session = self.current(account)
        summary = await session.finish(self.recorder)
        self._sessions.pop(account.user_id, None)
        return summary

    def abandon(self, account: AccountContext) -> None:
        session = self._sessions.get(account.user_id)
        if session is None:
            return
        session.abandon()
        self._sessions.pop(account.user_id, None)
