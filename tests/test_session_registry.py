"""Tests for per-account live session bookkeeping."""
from unittest.mock import MagicMock

import pytest

from fitplan_api.errors import (
    InvalidSessionStart,
    NotFound,
    PersistenceFailure,
    SessionNotActive,
    ValidationError,
)
from fitplan_api.models import CompletedSession, WorkoutExercise, WorkoutInput
from fitplan_api.repositories.history import HistoryRepository
from fitplan_api.session.engine import HistoryRecorder, SessionStatus
from fitplan_api.session.registry import SessionRegistry

from conftest import mock_supabase
from fakes import FakeRecorder


@pytest.fixture
def registry(scheduler, recorder):
    return SessionRegistry(scheduler=scheduler, recorder=recorder)


def test_current_without_session_raises(registry, account):
    with pytest.raises(NotFound):
        registry.current(account)


def test_start_and_lookup(registry, account, push_day):
    session = registry.start(account, push_day)
    assert registry.current(account) is session
    assert session.status == SessionStatus.RUNNING


def test_sessions_are_isolated_per_account(registry, account, other_account, push_day):
    registry.start(account, push_day)
    with pytest.raises(NotFound):
        registry.current(other_account)


def test_starting_again_abandons_previous(registry, scheduler, account, push_day, full_body):
    first = registry.start(account, push_day)
    second = registry.start(account, full_body)
    assert first.status == SessionStatus.ABANDONED
    assert registry.current(account) is second
    # Only the new session's elapsed tick is left
    assert len(scheduler.active_handles) == 1


def test_rejected_start_keeps_previous_session(registry, scheduler, account, push_day):
    first = registry.start(account, push_day)
    first.toggle_set("bench", 0)
    duplicate = WorkoutInput.model_construct(
        name="Twins",
        exercises=[
            WorkoutExercise(id="same", name="Curl", sets=2, reps=10),
            WorkoutExercise(id="same", name="Curl again", sets=2, reps=10),
        ],
    )

    with pytest.raises(ValidationError):
        registry.start(account, duplicate)
    with pytest.raises(InvalidSessionStart):
        registry.start(account, None)

    assert registry.current(account) is first
    assert first.status == SessionStatus.RUNNING
    assert first.completion["bench"] == [True, False, False]


@pytest.mark.asyncio
async def test_unsaved_session_is_not_replaced(scheduler, account, push_day, full_body):
    registry = SessionRegistry(scheduler=scheduler, recorder=FakeRecorder(fail_times=1))
    session = registry.start(account, push_day)
    with pytest.raises(PersistenceFailure):
        await registry.finish(account)

    with pytest.raises(SessionNotActive):
        registry.start(account, full_body)

    assert registry.current(account) is session
    assert session.status == SessionStatus.FINALIZE_FAILED


@pytest.mark.asyncio
async def test_finish_removes_session(registry, recorder, account, push_day):
    registry.start(account, push_day)
    summary = await registry.finish(account)
    assert summary.total_sets == 3
    assert len(recorder.saved) == 1
    with pytest.raises(NotFound):
        registry.current(account)


@pytest.mark.asyncio
async def test_failed_finish_keeps_session(scheduler, account, push_day):
    registry = SessionRegistry(scheduler=scheduler, recorder=FakeRecorder(fail_times=1))
    session = registry.start(account, push_day)
    with pytest.raises(PersistenceFailure):
        await registry.finish(account)
    assert registry.current(account) is session
    await registry.finish(account)
    assert session.status == SessionStatus.COMMITTED


def test_abandon(registry, account, push_day):
    session = registry.start(account, push_day)
    registry.abandon(account)
    assert session.status == SessionStatus.ABANDONED
    with pytest.raises(NotFound):
        registry.current(account)


def test_abandon_without_session_is_noop(registry, account):
    registry.abandon(account)


@pytest.mark.asyncio
async def test_history_recorder_inserts_record():
    repository = MagicMock(spec=HistoryRepository)
    repository.insert.side_effect = lambda session: session.model_copy(update={"id": "h-1"})
    record = CompletedSession(workout_name="Push Day", duration=60, total_weight=960, total_sets=3, completed_sets=3)

    saved = await HistoryRecorder(repository).record(record)

    repository.insert.assert_called_once_with(record)
    assert saved.id == "h-1"


def test_history_repository_insert_failure():
    client = mock_supabase(raise_exc=Exception("timeout"))
    record = CompletedSession(workout_name="Push Day", duration=60, total_weight=0, total_sets=3, completed_sets=0)
    with pytest.raises(PersistenceFailure):
        HistoryRepository(client=client).insert(record)
