"""API routes for workouts, templates, sharing and history."""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import HTMLResponse, Response

from fitplan_api.api.dependencies import (
    get_history_repository,
    get_share_service,
    get_workout_service,
)
from fitplan_api.auth import get_current_account
from fitplan_api.models import AccountContext
from fitplan_api.reporting.export import (
    export_filename,
    render_csv,
    render_printable_html,
)
from fitplan_api.reporting.progress import daily_buckets, summarize
from fitplan_api.repositories.history import HistoryRepository
from fitplan_api.services.share_service import ShareService
from fitplan_api.services.workout_service import WorkoutService

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


@router.get("/workouts")
def list_workouts(
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return [w.model_dump(mode="json") for w in service.list(account)]


@router.post("/workouts", status_code=201)
def create_workout(
    payload: Dict[str, Any] = Body(...),
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create(account, payload).model_dump(mode="json")


@router.get("/workouts/{workout_id}")
def get_workout(
    workout_id: str,
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get(account, workout_id).model_dump(mode="json")


@router.put("/workouts/{workout_id}")
def update_workout(
    workout_id: str,
    payload: Dict[str, Any] = Body(...),
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.update(account, workout_id, payload).model_dump(mode="json")


@router.delete("/workouts/{workout_id}", status_code=204)
def delete_workout(
    workout_id: str,
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete(account, workout_id)
    return Response(status_code=204)


@router.post("/workouts/{workout_id}/duplicate", status_code=201)
def duplicate_workout(
    workout_id: str,
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.duplicate(account, workout_id).model_dump(mode="json")


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@router.get("/templates")
def list_templates(service: WorkoutService = Depends(get_workout_service)):
    return [t.model_dump(mode="json") for t in service.list_templates()]


@router.post("/templates/{template_id}/workouts", status_code=201)
def create_workout_from_template(
    template_id: str,
    account: AccountContext = Depends(get_current_account),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create_from_template(account, template_id).model_dump(mode="json")


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------


@router.post("/workouts/{workout_id}/share")
def share_workout(
    workout_id: str,
    account: AccountContext = Depends(get_current_account),
    service: ShareService = Depends(get_share_service),
):
    return service.issue(account, workout_id).model_dump()


@router.post("/shared/{code}/import", status_code=201)
def import_shared_workout(
    code: str,
    account: AccountContext = Depends(get_current_account),
    service: ShareService = Depends(get_share_service),
):
    return service.redeem(account, code).model_dump(mode="json")


# ---------------------------------------------------------------------------
# History & progress
# ---------------------------------------------------------------------------


@router.get("/history")
def list_history(
    account: AccountContext = Depends(get_current_account),
    history: HistoryRepository = Depends(get_history_repository),
):
    return [s.model_dump(mode="json") for s in history.list_for(account)]


@router.get("/history/progress")
def history_progress(
    days: int = Query(30, ge=1, le=365),
    account: AccountContext = Depends(get_current_account),
    history: HistoryRepository = Depends(get_history_repository),
):
    sessions = history.list_for(account)
    summary = summarize(sessions)
    return {
        "days": [
            {
                "date": bucket.day.isoformat(),
                "label": bucket.label,
                "weight": bucket.weight,
                "duration": bucket.duration,
                "workouts": bucket.workouts,
                "sets": bucket.sets,
            }
            for bucket in daily_buckets(sessions, days=days)
        ],
        "summary": {
            "total_workouts": summary.total_workouts,
            "total_minutes": summary.total_minutes,
            "total_weight": summary.total_weight,
            "total_sets": summary.total_sets,
        },
    }


@router.get("/history/export.csv")
def export_history_csv(
    account: AccountContext = Depends(get_current_account),
    history: HistoryRepository = Depends(get_history_repository),
):
    content = render_csv(history.list_for(account))
    filename = export_filename(datetime.now(timezone.utc).date())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/history/export.html", response_class=HTMLResponse)
def export_history_html(
    account: AccountContext = Depends(get_current_account),
    history: HistoryRepository = Depends(get_history_repository),
):
    return HTMLResponse(render_printable_html(history.list_for(account)))
