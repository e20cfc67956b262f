"""WorkoutSession and ExerciseSet schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import PRType


class ExerciseRef(BaseModel):
    """Minimal exercise info for embedding in set responses (id + name only)."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class ExerciseSetBase(BaseModel):
    exercise_id: UUID
    set_order: int = Field(0, ge=0)
    weight: float | None = Field(None, ge=0)  # kg
    reps: int | None = Field(None, ge=0)


class ExerciseSetCreate(ExerciseSetBase):
    pass


class ExerciseSetUpdate(BaseModel):
    set_order: int | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)
    reps: int | None = Field(None, ge=0)


class ExerciseSetRead(ExerciseSetBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    session_id: UUID
    is_pr: bool = False
    pr_type: PRType | None = None
    created_at: datetime
    exercise: ExerciseRef | None = None


class WorkoutSessionCreate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    routine_id: UUID | None = None
    notes: str | None = None


class WorkoutSessionFinish(BaseModel):
    ended_at: datetime | None = None
    notes: str | None = None


class WorkoutSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    routine_id: UUID | None = None
    name: str
    started_at: datetime
    ended_at: datetime | None = None
    duration_seconds: int | None = None
    total_volume: float | None = None
    notes: str | None = None


class WorkoutSessionStarted(WorkoutSessionRead):
    """Returned on start: the routine's exercises in order, empty for a free session."""

    exercise_order: list[UUID] = []


class WorkoutSessionReadWithSets(WorkoutSessionRead):
    sets: list[ExerciseSetRead] = []


class RecentSets(BaseModel):
    """Sets for one exercise from the most recent session that included it."""

    session_id: UUID | None = None
    session_started_at: datetime | None = None
    sets: list[ExerciseSetRead] = []
