"""Gateway for the local exercises table."""
import logging
from typing import Any, Dict, List, Optional

from fitplan_api.models import Exercise
from fitplan_api.repositories.base import SupabaseRepository

logger = logging.getLogger(__name__)

# Filter kind -> column name
FILTER_COLUMNS = {
    "bodyPart": "body_part",
    "equipment": "equipment",
}

MIN_NAME_FILTER_LENGTH = 2


def is_active_filter(value: Optional[str]) -> bool:
    return bool(value) and value != "all"


class ExerciseRepository(SupabaseRepository):
    """Catalog rows, written only by the importer."""

    TABLE_NAME = "exercises"

    def search(
        self,
        term: Optional[str] = None,
        body_part: Optional[str] = None,
        equipment: Optional[str] = None,
        limit: int = 50,
    ) -> List[Exercise]:
        query = self.table().select("*")

        term = (term or "").strip()
        if len(term) >= MIN_NAME_FILTER_LENGTH:
            query = query.ilike("name", f"%{term}%")
        if is_active_filter(body_part):
            query = query.eq("body_part", body_part)
        if is_active_filter(equipment):
            query = query.eq("equipment", equipment)

        rows = self._read(query.limit(limit), "search exercises")
        return [Exercise.from_record(row) for row in rows]

    def get(self, exercise_id: str) -> Optional[Exercise]:
        rows = self._read(
            self.table().select("*").eq("id", exercise_id).limit(1),
            "load exercise",
        )
        return Exercise.from_record(rows[0]) if rows else None

    def distinct_values(self, kind: str) -> List[str]:
        """Sorted, non-empty distinct values of a filter column."""
        column = FILTER_COLUMNS[kind]
        rows = self._read(self.table().select(column), f"list {column} values")
        return sorted({row.get(column) for row in rows if row.get(column)})

    def upsert(self, records: List[Dict[str, Any]]) -> int:
        """Insert or overwrite rows keyed by id. Returns the number of rows sent."""
        self._write(
            self.table().upsert(records, on_conflict="id"),
            "upsert exercises",
        )
        return len(records)
