"""Share-code issuance and redemption."""
import logging
import re
import secrets
import string
from typing import Callable, Optional

from fitplan_api.config import settings
from fitplan_api.errors import ExhaustedRetries, NotFound, ValidationError
from fitplan_api.models import AccountContext, ShareLink, Workout
from fitplan_api.repositories.shared import ShareRepository
from fitplan_api.repositories.workouts import WorkoutRepository
from fitplan_api.services.workout_service import copy_exercises, suffixed_name

logger = logging.getLogger(__name__)

SHARE_CODE_LENGTH = 6
SHARE_CODE_ALPHABET = string.ascii_uppercase + string.digits
SHARE_CODE_PATTERN = re.compile(r"^[A-Z0-9]{6}$")


def generate_share_code() -> str:
    return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(SHARE_CODE_LENGTH))


def validate_share_code(code: Optional[str]) -> str:
    """Return the trimmed code or raise ValidationError. Case is not folded."""
    cleaned = (code or "").strip()
    if not SHARE_CODE_PATTERN.match(cleaned):
        raise ValidationError("Share code must be 6 uppercase alphanumeric characters")
    return cleaned


class ShareService:
    def __init__(
        self,
        shares: Optional[ShareRepository] = None,
        workouts: Optional[WorkoutRepository] = None,
        code_factory: Callable[[], str] = generate_share_code,
        max_attempts: Optional[int] = None,
    ):
        self.shares = shares or ShareRepository()
        self.workouts = workouts or WorkoutRepository()
        self.code_factory = code_factory
        self.max_attempts = max_attempts or settings.SHARE_CODE_MAX_ATTEMPTS

    def issue(self, account: AccountContext, workout_id: str) -> ShareLink:
        """Return the workout's share code, creating one if it has none."""
        if self.workouts.get(account, workout_id) is None:
            raise NotFound(f"Workout {workout_id} not found")

        existing = self.shares.get_by_workout(workout_id)
        if existing is not None:
            return existing

        for attempt in range(1, self.max_attempts + 1):
            code = self.code_factory()
            if not self.shares.code_exists(code):
                return self.shares.create(ShareLink(
                    share_code=code,
                    workout_id=workout_id,
                    created_by=account.user_id,
                ))
            logger.info(f"Share code collision on attempt {attempt}/{self.max_attempts}")

        raise ExhaustedRetries(f"Could not generate a unique share code in {self.max_attempts} attempts")

    def redeem(self, account: AccountContext, code: str) -> Workout:
        """Copy the shared workout into the redeeming account."""
        share_code = validate_share_code(code)

        link = self.shares.get_by_code(share_code)
        if link is None:
            raise NotFound("Invalid or expired share code")

        source = self.workouts.get_shared(link.workout_id)
        if source is None:
            raise NotFound("Invalid or expired share code")

        self.shares.increment_access(link)

        imported = Workout(
            user_id=account.user_id,
            name=suffixed_name(source.name, " (Imported)"),
            exercises=copy_exercises(source.exercises),
        )
        logger.info(f"User {account.user_id} imported workout {source.id} via {share_code}")
        return self.workouts.insert(imported)
