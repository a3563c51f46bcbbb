"""
Test fixtures for fitplan-api.

Provides auth overrides, Supabase doubles and sample workouts so tests run
offline and deterministically.
"""
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from fitplan_api.auth import get_current_account
from fitplan_api.main import app
from fitplan_api.models import AccountContext, WorkoutExercise, WorkoutInput

from fakes import FakeRecorder, ManualScheduler


# ---------------------------------------------------------------------------
# Auth Mock
# ---------------------------------------------------------------------------


TEST_USER_ID = "test-user-123"


async def mock_get_current_account() -> AccountContext:
    """Mock auth dependency that returns the test account."""
    return AccountContext(user_id=TEST_USER_ID)


@pytest.fixture
def account() -> AccountContext:
    return AccountContext(user_id=TEST_USER_ID)


@pytest.fixture
def other_account() -> AccountContext:
    return AccountContext(user_id="other-user-456")


# ---------------------------------------------------------------------------
# Test Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """Per-test FastAPI TestClient with auth overridden. Overrides are cleared afterwards."""
    app.dependency_overrides[get_current_account] = mock_get_current_account
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Session doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recorder() -> FakeRecorder:
    return FakeRecorder()


# ---------------------------------------------------------------------------
# Supabase doubles
# ---------------------------------------------------------------------------


def mock_supabase(data=None, raise_exc=None) -> MagicMock:
    """
    MagicMock client whose every query chain ends in execute() returning `data`.

    Builder methods (select/eq/order/limit/...) all return the same query
    object, so any chain the repositories build resolves to one execute().
    """
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "insert", "update", "upsert", "delete", "eq", "ilike", "order", "limit"):
        getattr(query, method).return_value = query
    if raise_exc is not None:
        query.execute.side_effect = raise_exc
    else:
        query.execute.return_value = MagicMock(data=data)
    client.table.return_value = query
    return client


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def push_day() -> WorkoutInput:
    return WorkoutInput(
        name="Push Day",
        exercises=[WorkoutExercise(id="bench", name="Bench Press", sets=3, reps=8, weight=40)],
    )


@pytest.fixture
def full_body() -> WorkoutInput:
    return WorkoutInput(
        name="Full Body",
        exercises=[
            WorkoutExercise(id="squat", name="Squat", sets=4, reps=5, weight=100, body_part="Pernas"),
            WorkoutExercise(id="row", name="Barbell Row", sets=3, reps=10, weight=20, body_part="Costas"),
            WorkoutExercise(id="plank", name="Plank", sets=2, reps=1, weight=0, target="Abdominais"),
        ],
    )


@pytest.fixture
def sample_workout_dict() -> Dict[str, Any]:
    return {
        "name": "Leg Day",
        "exercises": [
            {"name": "Squat", "sets": 5, "reps": 5, "weight": 120},
            {"name": "Leg Press", "sets": 3, "reps": 12, "weight": 200},
        ],
    }
