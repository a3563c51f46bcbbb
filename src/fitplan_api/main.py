"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fitplan_api.api.catalog_routes import router as catalog_router
from fitplan_api.api.routes import router
from fitplan_api.api.session_routes import router as session_router
from fitplan_api.errors import (
    AuthRequired,
    ExhaustedRetries,
    FitPlanError,
    ImportBatchError,
    InvalidSessionStart,
    NotFound,
    PermissionDenied,
    PersistenceFailure,
    RateLimited,
    RemoteUnavailable,
    SessionNotActive,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases
ERROR_STATUS_CODES = [
    (InvalidSessionStart, 409),
    (SessionNotActive, 409),
    (ValidationError, 422),
    (RateLimited, 429),
    (RemoteUnavailable, 503),
    (ImportBatchError, 502),
    (PersistenceFailure, 502),
    (NotFound, 404),
    (AuthRequired, 401),
    (PermissionDenied, 403),
    (ExhaustedRetries, 500),
]


def status_code_for(exc: FitPlanError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def fitplan_error_handler(request: Request, exc: FitPlanError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    content = {"error": exc.code, "detail": exc.message}
    if isinstance(exc, ValidationError) and len(exc.errors) > 1:
        content["errors"] = exc.errors
    if isinstance(exc, ImportBatchError):
        content["batch"] = exc.batch_number
        content["imported"] = exc.imported
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthRequired) else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


app = FastAPI(title="FitPlan API")

# Configure CORS to allow requests from the UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(FitPlanError, fitplan_error_handler)

app.include_router(router)
app.include_router(session_router)
app.include_router(catalog_router)
