"""AI workout generation: cached blueprints and idempotent generation requests."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import GenerationStatus
from app.db.base import Base


class AiWorkoutBlueprint(Base):
    """Generated workout cached by the hash of its normalized request."""

    __tablename__ = "ai_workout_blueprints"
    __table_args__ = (Index("ix_ai_workout_blueprints_last_used", "last_used_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    spec_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    routine_data: Mapped[str] = mapped_column(Text, nullable=False)  # JSON of the generated workout
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    last_used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    usage_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class AiGenerationRequest(Base):
    """Idempotency ledger row.

    A key belongs to one user for its lifetime. Status moves pending -> completed once,
    or pending -> failed when generation raised (a retry with the same key re-claims it).
    """

    __tablename__ = "ai_generation_requests"
    __table_args__ = (
        Index("ix_ai_generation_requests_user_created", "user_id", "created_at"),
        Index("ix_ai_generation_requests_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=GenerationStatus.PENDING.value)
    spec_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    request_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    blueprint_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("ai_workout_blueprints.id", ondelete="SET NULL"), nullable=True
    )
    result: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
