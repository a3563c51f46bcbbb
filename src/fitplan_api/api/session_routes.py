"""
Session API Routes

The live session runs on the server event loop, so every handler here is
async: starting a session or completing a set schedules ticks on the running
loop.
"""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fitplan_api.api.dependencies import get_session_registry, get_workout_service
from fitplan_api.auth import get_current_account
from fitplan_api.errors import InvalidSessionStart
from fitplan_api.models import AccountContext
from fitplan_api.services.workout_service import WorkoutService
from fitplan_api.session.registry import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class StartSessionRequest(BaseModel):
    workout_id: Optional[str] = None


class ToggleSetRequest(BaseModel):
    exercise_id: str
    set_index: int


@router.post("", status_code=201)
async def start_session(
    request: StartSessionRequest,
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
    workouts: WorkoutService = Depends(get_workout_service),
):
    if not request.workout_id:
        raise InvalidSessionStart("Select a workout to start a session")
    workout = await asyncio.to_thread(workouts.get, account, request.workout_id)
    session = registry.start(account, workout)
    return session.snapshot()


@router.get("/current")
async def current_session(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    return registry.current(account).snapshot()


@router.post("/current/sets")
async def toggle_set(
    request: ToggleSetRequest,
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.current(account)
    completed = session.toggle_set(request.exercise_id, request.set_index)
    return {"completed": completed, "session": session.snapshot()}


@router.post("/current/rest/pause")
async def pause_rest(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.current(account)
    session.pause_rest()
    return session.snapshot()


@router.post("/current/rest/resume")
async def resume_rest(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.current(account)
    session.resume_rest()
    return session.snapshot()


@router.post("/current/rest/reset")
async def reset_rest(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.current(account)
    session.reset_rest()
    return session.snapshot()


@router.post("/current/finish")
async def finish_session(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    summary = await registry.finish(account)
    return summary.model_dump(mode="json")


@router.delete("/current", status_code=204)
async def abandon_session(
    account: AccountContext = Depends(get_current_account),
    registry: SessionRegistry = Depends(get_session_registry),
):
    registry.abandon(account)
