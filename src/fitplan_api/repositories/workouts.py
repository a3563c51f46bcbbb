"""Gateways for the workouts and workout_templates tables."""
import logging
from typing import List, Optional

from fitplan_api.errors import NotFound
from fitplan_api.models import AccountContext, Workout, WorkoutTemplate
from fitplan_api.repositories.base import SupabaseRepository

logger = logging.getLogger(__name__)


class WorkoutRepository(SupabaseRepository):
    """Workout definitions, always scoped to the owning account."""

    TABLE_NAME = "workouts"

    def list_for(self, account: AccountContext) -> List[Workout]:
        rows = self._read(
            self.table()
            .select("*")
            .eq("user_id", account.user_id)
            .order("created_at", desc=True),
            "list workouts",
        )
        return [Workout(**row) for row in rows]

    def get(self, account: AccountContext, workout_id: str) -> Optional[Workout]:
        rows = self._read(
            self.table()
            .select("*")
            .eq("id", workout_id)
            .eq("user_id", account.user_id)
            .limit(1),
            "load workout",
        )
        return Workout(**rows[0]) if rows else None

    def get_shared(self, workout_id: str) -> Optional[Workout]:
        """Load a workout regardless of owner (share-code redemption only)."""
        rows = self._read(
            self.table().select("*").eq("id", workout_id).limit(1),
            "load shared workout",
        )
        return Workout(**rows[0]) if rows else None

    def insert(self, workout: Workout) -> Workout:
        rows = self._write(self.table().insert(workout.to_record()), "create workout")
        logger.info(f"Created workout {workout.id} for user {workout.user_id}")
        return Workout(**rows[0]) if rows else workout

    def update(self, account: AccountContext, workout: Workout) -> Workout:
        record = workout.to_record()
        payload = {"name": record["name"], "exercises": record["exercises"]}
        rows = self._write(
            self.table()
            .update(payload)
            .eq("id", workout.id)
            .eq("user_id", account.user_id),
            "update workout",
        )
        if not rows:
            raise NotFound(f"Workout {workout.id} not found")
        return Workout(**rows[0])

    def delete(self, account: AccountContext, workout_id: str) -> None:
        rows = self._write(
            self.table()
            .delete()
            .eq("id", workout_id)
            .eq("user_id", account.user_id),
            "delete workout",
        )
        if not rows:
            raise NotFound(f"Workout {workout_id} not found")
        logger.info(f"Deleted workout {workout_id}")


class TemplateRepository(SupabaseRepository):
    """Read-only workout templates."""

    TABLE_NAME = "workout_templates"

    def list_all(self) -> List[WorkoutTemplate]:
        rows = self._read(self.table().select("*").order("name"), "list templates")
        return [WorkoutTemplate(**row) for row in rows]

    def get(self, template_id: str) -> Optional[WorkoutTemplate]:
        rows = self._read(
            self.table().select("*").eq("id", template_id).limit(1),
            "load template",
        )
        return WorkoutTemplate(**rows[0]) if rows else None
