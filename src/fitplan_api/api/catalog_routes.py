"""
Exercise Catalog API Routes

Search and filter the exercise catalog, and load it from a CSV export.
"""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File as FastAPIFile, Query, UploadFile

from fitplan_api.api.dependencies import get_catalog_client, get_exercise_importer
from fitplan_api.auth import get_admin_account, get_current_account
from fitplan_api.catalog.client import ExerciseCatalogClient
from fitplan_api.catalog.importer import ExerciseImporter
from fitplan_api.models import AccountContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exercises", tags=["Exercise Catalog"])


@router.get("")
async def search_exercises(
    q: Optional[str] = Query(None, description="Name search term"),
    body_part: Optional[str] = Query(None, alias="bodyPart"),
    equipment: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    account: AccountContext = Depends(get_current_account),
    catalog: ExerciseCatalogClient = Depends(get_catalog_client),
):
    exercises = await catalog.search(q, body_part, equipment, limit)
    return [exercise.model_dump() for exercise in exercises]


@router.get("/filters/{kind}")
async def filter_options(
    kind: str,
    account: AccountContext = Depends(get_current_account),
    catalog: ExerciseCatalogClient = Depends(get_catalog_client),
):
    return {"type": kind, "values": await catalog.filter_options(kind)}


@router.get("/{exercise_id}")
async def get_exercise(
    exercise_id: str,
    account: AccountContext = Depends(get_current_account),
    catalog: ExerciseCatalogClient = Depends(get_catalog_client),
):
    return (await catalog.get_exercise(exercise_id)).model_dump()


@router.post("/import")
async def import_exercises(
    file: UploadFile = FastAPIFile(..., description="Exercise catalog CSV"),
    account: AccountContext = Depends(get_admin_account),
    importer: ExerciseImporter = Depends(get_exercise_importer),
):
    """
    Upsert the catalog from a CSV export.

    Rows are translated to pt-BR and written in batches; re-running the same
    file is a no-op apart from refreshed values.
    """
    content = await file.read()
    logger.info(f"Catalog import requested by {account.user_id}: {file.filename} ({len(content)} bytes)")
    report = await asyncio.to_thread(importer.import_csv, content)
    return {
        "success": True,
        "count": report.count,
        "batches": report.batches,
        "skipped": report.skipped,
        "message": report.message,
    }
