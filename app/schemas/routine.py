"""Workout routine schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.exercise import ExerciseRead


class RoutineExerciseBase(BaseModel):
    exercise_id: UUID
    order_index: int = Field(0, ge=0)
    sets: int = Field(3, ge=1, le=20)
    min_reps: int | None = Field(None, ge=1)
    max_reps: int | None = Field(None, ge=1)
    target_weight: float | None = Field(None, ge=0)
    rest_time: int | None = Field(None, ge=0)  # seconds
    notes: str | None = None

    @model_validator(mode="after")
    def _rep_range(self):
        if self.min_reps is not None and self.max_reps is not None and self.min_reps > self.max_reps:
            raise ValueError("min_reps cannot exceed max_reps")
        return self


class RoutineExerciseCreate(RoutineExerciseBase):
    pass


class RoutineExerciseRead(RoutineExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    routine_id: UUID
    exercise: ExerciseRead | None = None


class WorkoutRoutineBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    estimated_duration: int | None = Field(None, ge=1)  # minutes


class WorkoutRoutineCreate(WorkoutRoutineBase):
    exercises: list[RoutineExerciseCreate] = []


class WorkoutRoutineUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    estimated_duration: int | None = Field(None, ge=1)
    is_active: bool | None = None


class WorkoutRoutineRead(WorkoutRoutineBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime
    exercises: list[RoutineExerciseRead] = []


class WorkoutRoutineCreateFromBlueprint(BaseModel):
    """Save a generated blueprint as a routine (blueprint_id + optional name)."""
    blueprint_id: UUID
    name: str | None = Field(None, min_length=1, max_length=255)
