"""Supabase table gateways."""
from .exercises import ExerciseRepository
from .history import HistoryRepository
from .shared import ShareRepository
from .workouts import TemplateRepository, WorkoutRepository

__all__ = [
    "ExerciseRepository",
    "HistoryRepository",
    "ShareRepository",
    "TemplateRepository",
    "WorkoutRepository",
]
