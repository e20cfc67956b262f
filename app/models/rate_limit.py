"""RateLimitRecord - one row per admitted attempt, counted within a sliding window."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class RateLimitRecord(Base):
    """Never updated; rows older than the window are deleted lazily."""

    __tablename__ = "rate_limits"
    __table_args__ = (
        Index("ix_rate_limits_identifier_created", "identifier", "created_at"),
        Index("ix_rate_limits_identifier_action", "identifier", "action"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    identifier: Mapped[str] = mapped_column(String(255), nullable=False)  # "action:userId"
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
