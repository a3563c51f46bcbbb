"""
Catalog Import Pipeline

Turns rows of the exercise dataset (one column per secondary muscle and per
instruction step) into exercise records, translates the controlled
vocabularies and upserts them in fixed-size batches keyed by id.

Expected columns:
    id, name, bodyPart, equipment, target, gifUrl,
    secondaryMuscles/0 .. secondaryMuscles/5,
    instructions/0 .. instructions/10
"""
import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from fitplan_api.catalog.translations import (
    translate_body_part,
    translate_equipment,
    translate_target,
)
from fitplan_api.config import settings
from fitplan_api.errors import ImportBatchError, PersistenceFailure, ValidationError
from fitplan_api.repositories.exercises import ExerciseRepository

logger = logging.getLogger(__name__)

MAX_SECONDARY_MUSCLES = 6
MAX_INSTRUCTIONS = 11

SECONDARY_MUSCLE_COLUMNS = [f"secondaryMuscles/{i}" for i in range(MAX_SECONDARY_MUSCLES)]
INSTRUCTION_COLUMNS = [f"instructions/{i}" for i in range(MAX_INSTRUCTIONS)]


@dataclass
class ImportReport:
    """Outcome of a completed import."""
    count: int
    batches: int
    skipped: int = 0

    @property
    def message(self) -> str:
        return f"Successfully imported {self.count} exercises"


def _cell(row: Dict[str, Any], column: str) -> str:
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""


def normalize_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Map one dataset row to an exercises-table record, or None if it has no id."""
    exercise_id = _cell(row, "id")
    if not exercise_id:
        return None

    secondary_muscles = [
        translate_target(_cell(row, column))
        for column in SECONDARY_MUSCLE_COLUMNS
        if _cell(row, column)
    ]
    instructions = [_cell(row, column) for column in INSTRUCTION_COLUMNS if _cell(row, column)]

    return {
        "id": exercise_id,
        "name": _cell(row, "name"),
        "body_part": translate_body_part(_cell(row, "bodyPart")),
        "equipment": translate_equipment(_cell(row, "equipment")),
        "gif_url": _cell(row, "gifUrl") or None,
        "target": translate_target(_cell(row, "target")),
        "secondary_muscles": secondary_muscles,
        "instructions": instructions,
    }


def decode_content(content: Union[bytes, str]) -> str:
    """Decode bytes to string, trying multiple encodings."""
    if isinstance(content, str):
        return content

    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue

    return content.decode("utf-8", errors="replace")


def detect_delimiter(text: str) -> str:
    """Pick the most frequent of comma, semicolon and tab in the first lines."""
    sample = "\n".join(text.split("\n")[:5])
    delimiters = {
        ",": sample.count(","),
        ";": sample.count(";"),
        "\t": sample.count("\t"),
    }
    return max(delimiters, key=delimiters.get)


def parse_csv(content: Union[bytes, str]) -> List[Dict[str, Any]]:
    """Parse a delimited dataset with a header row, skipping empty lines."""
    text = decode_content(content)
    if not text.strip():
        raise ValidationError("CSV file is empty")

    reader = csv.DictReader(io.StringIO(text), delimiter=detect_delimiter(text))
    if not reader.fieldnames or "id" not in [name.strip() for name in reader.fieldnames]:
        raise ValidationError("CSV header must include an 'id' column")

    rows = []
    for row in reader:
        cleaned = {(key or "").strip(): value for key, value in row.items()}
        if any(isinstance(value, str) and value.strip() for value in cleaned.values()):
            rows.append(cleaned)
    return rows


class ExerciseImporter:
    """Batched, idempotent catalog import."""

    def __init__(
        self,
        repository: Optional[ExerciseRepository] = None,
        batch_size: Optional[int] = None,
    ):
        self.repository = repository or ExerciseRepository()
        self.batch_size = batch_size or settings.IMPORT_BATCH_SIZE

    def import_csv(self, content: Union[bytes, str]) -> ImportReport:
        return self.import_rows(parse_csv(content))

    def import_rows(self, rows: Iterable[Dict[str, Any]]) -> ImportReport:
        """
        Normalize and upsert rows.

        Raises:
            ImportBatchError: a batch failed; earlier batches stay committed.
        """
        records: Dict[str, Dict[str, Any]] = {}
        skipped = 0
        for row in rows:
            record = normalize_row(row)
            if record is None:
                skipped += 1
                continue
            # One upsert statement must not touch the same id twice; last row wins
            records.pop(record["id"], None)
            records[record["id"]] = record

        if skipped:
            logger.warning(f"Skipped {skipped} rows without an id")

        ordered = list(records.values())
        total = len(ordered)
        logger.info(f"Starting import of {total} exercises...")

        imported = 0
        batches = 0
        for start in range(0, total, self.batch_size):
            batch = ordered[start:start + self.batch_size]
            batch_number = start // self.batch_size + 1
            try:
                self.repository.upsert(batch)
            except PersistenceFailure as e:
                logger.error(f"Error importing batch {batch_number}: {e}")
                raise ImportBatchError(
                    f"Batch {batch_number} failed after {imported} exercises were imported: {e.message}",
                    batch_number=batch_number,
                    imported=imported,
                ) from e
            imported += len(batch)
            batches += 1
            logger.info(f"Imported {imported}/{total} exercises")

        return ImportReport(count=imported, batches=batches, skipped=skipped)
