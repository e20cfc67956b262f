"""Exercise model - catalog entries used by routines, sessions and the workout generator."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Exercise(Base):
    """Exercise definition with its muscle group and required equipment."""

    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    muscle_group: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    equipment: Mapped[str | None] = mapped_column(String(50), nullable=True)  # None = bodyweight
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    exercise_sets: Mapped[list["ExerciseSet"]] = relationship(
        "ExerciseSet", back_populates="exercise", cascade="all, delete-orphan"
    )
    routine_entries: Mapped[list["RoutineExercise"]] = relationship(
        "RoutineExercise", back_populates="exercise", cascade="all, delete-orphan"
    )
