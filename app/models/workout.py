"""WorkoutSession and ExerciseSet models."""

from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.core.enums import PRType
from app.db.base import Base


class WorkoutSession(Base):
    """A timed workout; duration and total volume are stamped when it is finished."""

    __tablename__ = "workout_sessions"
    __table_args__ = (Index("ix_workout_sessions_user_started", "user_id", "started_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    routine_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workout_routines.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_volume: Mapped[float | None] = mapped_column(Numeric(10, 2), nullable=True)  # kg
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    sets: Mapped[list["ExerciseSet"]] = relationship(
        "ExerciseSet", back_populates="session", cascade="all, delete-orphan"
    )


class ExerciseSet(Base):
    """One logged set: weight/reps with PR flags."""

    __tablename__ = "exercise_sets"
    __table_args__ = (
        Index("ix_exercise_sets_session_id", "session_id"),
        Index("ix_exercise_sets_exercise_id", "exercise_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False)
    exercise_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False)
    set_order: Mapped[int] = mapped_column(Integer, default=0)
    weight: Mapped[float | None] = mapped_column(Numeric(8, 2), nullable=True)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_pr: Mapped[bool] = mapped_column(default=False, nullable=False)
    pr_type: Mapped[PRType | None] = mapped_column(Enum(PRType), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="sets")
    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="exercise_sets")
