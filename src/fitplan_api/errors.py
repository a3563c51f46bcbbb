"""Error taxonomy shared by the session engine, services and API layer."""
from __future__ import annotations

from typing import List, Optional


class FitPlanError(Exception):
    """Base class for all expected, user-facing failures."""

    code = "fitplan_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or (self.__class__.__doc__ or self.code).strip()


class InvalidSessionStart(FitPlanError):
    """No workout with exercises was selected for the session."""

    code = "invalid_session_start"


class ValidationError(FitPlanError):
    """Workout, exercise or share-code fields are out of bounds."""

    code = "validation_error"

    def __init__(self, message: str = "", errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or ([message] if message else [])


class RemoteUnavailable(FitPlanError):
    """The exercise catalog or backend could not be reached."""

    code = "remote_unavailable"

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimited(FitPlanError):
    """The remote exercise catalog is rate limiting requests. Try again later."""

    code = "rate_limited"


class PersistenceFailure(FitPlanError):
    """A write to the backend failed."""

    code = "persistence_failure"


class ImportBatchError(PersistenceFailure):
    """An exercise import batch failed to upsert."""

    code = "import_batch_failed"

    def __init__(self, message: str, batch_number: int, imported: int):
        super().__init__(message)
        self.batch_number = batch_number
        self.imported = imported


class NotFound(FitPlanError):
    """The requested record does not exist or is not visible to this account."""

    code = "not_found"


class AuthRequired(FitPlanError):
    """No authenticated account is available for this action."""

    code = "auth_required"


class PermissionDenied(FitPlanError):
    """The authenticated account may not perform this action."""

    code = "forbidden"


class ExhaustedRetries(FitPlanError):
    """Gave up after too many attempts."""

    code = "exhausted_retries"


class SessionNotActive(FitPlanError):
    """The session is not in a state that allows this action."""

    code = "session_not_active"
