"""Gateway for the shared_workouts table."""
import logging
from typing import Optional

from fitplan_api.models import ShareLink
from fitplan_api.repositories.base import SupabaseRepository

logger = logging.getLogger(__name__)


class ShareRepository(SupabaseRepository):
    """Share codes aliasing workouts."""

    TABLE_NAME = "shared_workouts"

    def get_by_workout(self, workout_id: str) -> Optional[ShareLink]:
        rows = self._read(
            self.table().select("*").eq("workout_id", workout_id).limit(1),
            "look up share code",
        )
        return ShareLink(**rows[0]) if rows else None

    def get_by_code(self, share_code: str) -> Optional[ShareLink]:
        rows = self._read(
            self.table().select("*").eq("share_code", share_code).limit(1),
            "look up shared workout",
        )
        return ShareLink(**rows[0]) if rows else None

    def code_exists(self, share_code: str) -> bool:
        rows = self._read(
            self.table().select("id").eq("share_code", share_code).limit(1),
            "check share code",
        )
        return bool(rows)

    def create(self, link: ShareLink) -> ShareLink:
        rows = self._write(
            self.table().insert(link.model_dump(exclude={"access_count"})),
            "create share code",
        )
        logger.info(f"Issued share code {link.share_code} for workout {link.workout_id}")
        return ShareLink(**rows[0]) if rows else link

    def increment_access(self, link: ShareLink) -> int:
        count = link.access_count + 1
        self._write(
            self.table()
            .update({"access_count": count})
            .eq("share_code", link.share_code),
            "update share access count",
        )
        return count
