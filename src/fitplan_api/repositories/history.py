"""Gateway for the insert-only workout_history table."""
import logging
from typing import List

from fitplan_api.models import AccountContext, CompletedSession
from fitplan_api.repositories.base import SupabaseRepository

logger = logging.getLogger(__name__)


class HistoryRepository(SupabaseRepository):
    """Completed sessions. Rows are never updated or deleted."""

    TABLE_NAME = "workout_history"

    def insert(self, session: CompletedSession) -> CompletedSession:
        rows = self._write(self.table().insert(session.to_record()), "save workout history")
        logger.info(
            f"Saved session '{session.workout_name}' for user {session.user_id} "
            f"({session.completed_sets}/{session.total_sets} sets)"
        )
        return CompletedSession(**rows[0]) if rows else session

    def list_for(self, account: AccountContext) -> List[CompletedSession]:
        rows = self._read(
            self.table()
            .select("*")
            .eq("user_id", account.user_id)
            .order("completed_at", desc=True),
            "load workout history",
        )
        return [CompletedSession(**row) for row in rows]
