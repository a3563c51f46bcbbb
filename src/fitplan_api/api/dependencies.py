"""Service singletons exposed as FastAPI dependencies (overridable in tests)."""
from functools import lru_cache

from fitplan_api.catalog.client import ExerciseCatalogClient
from fitplan_api.catalog.importer import ExerciseImporter
from fitplan_api.repositories.history import HistoryRepository
from fitplan_api.services.share_service import ShareService
from fitplan_api.services.workout_service import WorkoutService
from fitplan_api.session.registry import SessionRegistry


@lru_cache
def get_workout_service() -> WorkoutService:
    return WorkoutService()


@lru_cache
def get_share_service() -> ShareService:
    return ShareService()


@lru_cache
def get_history_repository() -> HistoryRepository:
    return HistoryRepository()


@lru_cache
def get_catalog_client() -> ExerciseCatalogClient:
    return ExerciseCatalogClient()


@lru_cache
def get_exercise_importer() -> ExerciseImporter:
    return ExerciseImporter()


@lru_cache
def get_session_registry() -> SessionRegistry:
    return SessionRegistry()
