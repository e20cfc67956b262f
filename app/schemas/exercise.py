"""Exercise schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Equipment


class ExerciseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    muscle_group: str | None = Field(None, max_length=100)
    equipment: Equipment | None = None  # None = bodyweight
    is_public: bool = True


class ExerciseCreate(ExerciseBase):
    pass


class ExerciseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    muscle_group: str | None = Field(None, max_length=100)
    equipment: Equipment | None = None
    is_public: bool | None = None


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    created_at: datetime
