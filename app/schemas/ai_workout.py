"""AI workout generation schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import (
    Equipment,
    FeedbackKind,
    FitnessLevel,
    Intensity,
    TargetMuscleGroup,
    WorkoutType,
)


class GenerateWorkoutRequest(BaseModel):
    fitness_level: FitnessLevel
    available_equipment: list[Equipment] = Field(..., min_length=1)
    target_muscle_groups: list[TargetMuscleGroup] | None = None
    workout_type: WorkoutType

    target_duration: int = Field(..., ge=10, le=180)  # minutes
    intensity: Intensity | None = None

    exclude_exercises: list[str] | None = None
    include_exercises: list[str] | None = None

    focus_areas: list[str] | None = None
    limitations: list[str] | None = None

    # Caching hints
    allow_cached_results: bool = True
    regenerate: bool = False


class GeneratedExercise(BaseModel):
    id: UUID
    name: str
    muscle_group: str
    equipment: Equipment
    sets: int = Field(..., ge=1)
    min_reps: int | None = Field(None, ge=1)
    max_reps: int | None = Field(None, ge=1)
    target_weight: float | None = None
    rest_time: int = Field(..., ge=0)  # seconds
    notes: str | None = None
    order_index: int = Field(..., ge=0)


class GeneratedWorkout(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    estimated_duration: int  # minutes
    exercises: list[GeneratedExercise]
    difficulty: FitnessLevel
    tags: list[str] = []
    created_at: datetime
    spec_hash: str
    from_cache: bool = False


class WorkoutFeedback(BaseModel):
    workout_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    feedback: FeedbackKind
    comments: str | None = Field(None, max_length=2000)
    completed_exercises: list[str] | None = None
    skipped_exercises: list[str] | None = None


class FeedbackReceipt(BaseModel):
    message: str
    feedback_id: UUID


class BlueprintRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    spec_hash: str
    routine_data: str
    created_at: datetime
    last_used_at: datetime
    usage_count: int


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int
    has_more: bool


class BlueprintPage(BaseModel):
    blueprints: list[BlueprintRead]
    pagination: Pagination
