"""Workout CRUD, duplication and template seeding."""
import logging
from typing import Any, Dict, List, Optional

from fitplan_api.errors import NotFound
from fitplan_api.models import (
    AccountContext,
    Workout,
    WorkoutExercise,
    WorkoutTemplate,
    new_id,
    parse_workout_input,
)
from fitplan_api.repositories.workouts import TemplateRepository, WorkoutRepository

logger = logging.getLogger(__name__)

MAX_WORKOUT_NAME_LENGTH = 100


def copy_exercises(exercises: List[WorkoutExercise]) -> List[WorkoutExercise]:
    """Deep copies with fresh ids, so no two workouts share exercise objects."""
    return [exercise.model_copy(update={"id": new_id()}, deep=True) for exercise in exercises]


def suffixed_name(name: str, suffix: str) -> str:
    """Append a suffix while staying within the workout name limit."""
    base = name[: MAX_WORKOUT_NAME_LENGTH - len(suffix)].rstrip()
    return f"{base}{suffix}"


class WorkoutService:
    """Account-scoped workout operations. Input is validated before any write."""

    def __init__(
        self,
        repository: Optional[WorkoutRepository] = None,
        templates: Optional[TemplateRepository] = None,
    ):
        self.repository = repository or WorkoutRepository()
        self.templates = templates or TemplateRepository()

    def list(self, account: AccountContext) -> List[Workout]:
        return self.repository.list_for(account)

    def get(self, account: AccountContext, workout_id: str) -> Workout:
        workout = self.repository.get(account, workout_id)
        if workout is None:
            raise NotFound(f"Workout {workout_id} not found")
        return workout

    def create(self, account: AccountContext, payload: Dict[str, Any]) -> Workout:
        data = parse_workout_input(payload)
        workout = Workout(
            user_id=account.user_id,
            name=data.name,
            exercises=data.exercises,
        )
        return self.repository.insert(workout)

    def update(self, account: AccountContext, workout_id: str, payload: Dict[str, Any]) -> Workout:
        data = parse_workout_input(payload)
        existing = self.get(account, workout_id)
        workout = existing.model_copy(update={"name": data.name, "exercises": data.exercises})
        return self.repository.update(account, workout)

    def delete(self, account: AccountContext, workout_id: str) -> None:
        self.repository.delete(account, workout_id)

    def duplicate(self, account: AccountContext, workout_id: str) -> Workout:
        source = self.get(account, workout_id)
        copy = Workout(
            user_id=account.user_id,
            name=suffixed_name(source.name, " (Copy)"),
            exercises=copy_exercises(source.exercises),
        )
        return self.repository.insert(copy)

    def list_templates(self) -> List[WorkoutTemplate]:
        return self.templates.list_all()

    def create_from_template(self, account: AccountContext, template_id: str) -> Workout:
        template = self.templates.get(template_id)
        if template is None:
            raise NotFound(f"Template {template_id} not found")
        data = parse_workout_input({
            "name": template.name,
            "exercises": [exercise.model_dump() for exercise in copy_exercises(template.exercises)],
        })
        logger.info(f"Creating workout from template '{template.name}' for user {account.user_id}")
        return self.repository.insert(Workout(
            user_id=account.user_id,
            name=data.name,
            exercises=data.exercises,
        ))
