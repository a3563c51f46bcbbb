"""Data models for workouts, sessions and the exercise catalog."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from fitplan_api.errors import ValidationError

TemplateLevel = Literal["beginner", "intermediate", "advanced"]

# Remote catalog (camelCase) -> local table (snake_case)
_REMOTE_FIELD_NAMES = {
    "bodyPart": "body_part",
    "gifUrl": "gif_url",
    "secondaryMuscles": "secondary_muscles",
}


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccountContext:
    """Identity of the account an operation runs on behalf of."""
    user_id: str
    access_token: Optional[str] = None


class Exercise(BaseModel):
    """Catalog exercise (reference data, written only by the importer)."""
    id: str
    name: str
    target: str = ""
    body_part: str = ""
    equipment: str = ""
    gif_url: Optional[str] = None
    secondary_muscles: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Exercise":
        """
        Build an Exercise from either a local table row or a remote catalog item.

        The remote catalog uses camelCase keys (bodyPart, gifUrl, ...); local rows
        use snake_case. Snake_case wins when both are present.
        """
        data = dict(record)
        for remote_key, local_key in _REMOTE_FIELD_NAMES.items():
            if remote_key in data:
                value = data.pop(remote_key)
                if data.get(local_key) in (None, "", []):
                    data[local_key] = value
        data["id"] = str(data.get("id", ""))
        for key in ("secondary_muscles", "instructions"):
            if data.get(key) is None:
                data[key] = []
        for key in ("target", "body_part", "equipment"):
            if data.get(key) is None:
                data[key] = ""
        return cls(**data)


class WorkoutExercise(BaseModel):
    """An exercise as planned inside a workout."""
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    sets: int = Field(..., ge=1, le=20)
    reps: int = Field(..., ge=1, le=200)
    weight: float = Field(default=0, ge=0, le=1000)
    gif_url: Optional[str] = None
    # Carried over from the catalog when the exercise was picked from it
    body_part: Optional[str] = None
    target: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("gif_url")
    @classmethod
    def _check_gif_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value.strip() == "":
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("gif_url must be an http(s) URL")
        return value


class WorkoutInput(BaseModel):
    """Editable part of a workout (what the user submits)."""
    name: str = Field(..., min_length=1, max_length=100)
    exercises: List[WorkoutExercise] = Field(..., min_length=1, max_length=20)

    class Config:
        extra = "ignore"

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_unique_exercise_ids(self) -> "WorkoutInput":
        ids = [exercise.id for exercise in self.exercises]
        if len(set(ids)) != len(ids):
            raise ValueError("Workout exercises must have unique ids")
        return self


class Workout(WorkoutInput):
    """A stored workout, owned by exactly one account."""
    id: str = Field(default_factory=new_id)
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        """Row shape of the workouts table."""
        record = self.model_dump(mode="json")
        if record.get("created_at") is None:
            record.pop("created_at", None)
        return record


class WorkoutTemplate(BaseModel):
    """Pre-built workout that can seed a user's workout."""
    id: str
    name: str
    description: str = ""
    level: TemplateLevel = "beginner"
    exercises: List[WorkoutExercise] = Field(default_factory=list)

    class Config:
        extra = "ignore"


class ExerciseCompletion(BaseModel):
    """Per-exercise snapshot stored with a completed session."""
    name: str
    sets: int
    reps: int
    weight: float
    completed_sets: int


class CompletedSession(BaseModel):
    """Immutable history record written once per finished session."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    workout_name: str
    duration: int
    total_weight: float
    total_sets: int
    completed_sets: int
    muscle_groups: List[str] = Field(default_factory=list)
    exercises: List[ExerciseCompletion] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=utc_now)

    class Config:
        extra = "ignore"

    def to_record(self) -> Dict[str, Any]:
        """Row shape of the workout_history table."""
        return self.model_dump(mode="json", exclude_none=True)


class ShareLink(BaseModel):
    """Short code aliasing a workout for cross-account import."""
    share_code: str
    workout_id: str
    access_count: int = 0
    created_by: Optional[str] = None

    class Config:
        extra = "ignore"


class SessionSummary(BaseModel):
    """Human-readable result of a committed session."""
    completed_sets: int
    total_sets: int
    elapsed_seconds: int
    message: str
    record: CompletedSession


def validation_messages(exc: PydanticValidationError) -> List[str]:
    """Flatten a pydantic error into 'field.path: message' strings."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return messages


def parse_workout_input(payload: Dict[str, Any]) -> WorkoutInput:
    """Validate a user-submitted workout, raising the domain ValidationError."""
    try:
        return WorkoutInput(**payload)
    except PydanticValidationError as e:
        messages = validation_messages(e)
        raise ValidationError("; ".join(messages), errors=messages) from e
