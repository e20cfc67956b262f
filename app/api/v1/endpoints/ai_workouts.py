"""AI workout generation, cached blueprints and feedback."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Header, Query, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings, get_settings
from app.core.constants import MAX_BLUEPRINT_PAGE_SIZE
from app.core.security import get_current_user_id
from app.db.session import get_db, get_session_maker
from app.models.ai_generation import AiWorkoutBlueprint
from app.schemas.ai_workout import (
    BlueprintPage,
    BlueprintRead,
    FeedbackReceipt,
    GeneratedWorkout,
    GenerateWorkoutRequest,
    Pagination,
    WorkoutFeedback,
)
from app.services.idempotency import IdempotencyLedger
from app.services.rate_limit import RateLimiter
from app.services.workout_generation import AiWorkoutGenerationService, BlueprintCache
from app.services.workout_generator import RuleBasedWorkoutGenerator

logger = logging.getLogger(__name__)
router = APIRouter()


def get_generation_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
    settings: Settings = Depends(get_settings),
) -> AiWorkoutGenerationService:
    return AiWorkoutGenerationService(
        RateLimiter(session_maker),
        IdempotencyLedger(session_maker),
        BlueprintCache(session_maker),
        RuleBasedWorkoutGenerator(session_maker),
        rate_limit=settings.ai_generate_rate_limit,
        rate_window_ms=settings.ai_generate_rate_window_ms,
        retry_attempts=settings.db_retry_attempts,
        retry_base_delay_ms=settings.db_retry_base_delay_ms,
    )


@router.post("/generate", response_model=GeneratedWorkout)
async def generate_workout(
    payload: GenerateWorkoutRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    service: AiWorkoutGenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings),
    x_idempotency_key: str | None = Header(default=None, max_length=255),
):
    """
    Generate a workout blueprint. Replays with the same X-Idempotency-Key return the
    stored result; 429 when the per-user limit is hit, 409 while the first request
    with the key is still running.
    """
    key = (x_idempotency_key or "").strip() or str(uuid.uuid4())
    outcome = await service.generate(user_id, key, payload)
    response.headers["X-Idempotency-Key"] = key
    response.headers["X-RateLimit-Limit"] = str(settings.ai_generate_rate_limit)
    response.headers["X-RateLimit-Remaining"] = str(outcome.rate_limit.remaining)
    return outcome.workout


@router.get("/blueprints", response_model=BlueprintPage)
async def list_blueprints(
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    spec_hash: str | None = None,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cached blueprints, most recently used first. Optional spec_hash filter."""
    limit = min(limit, MAX_BLUEPRINT_PAGE_SIZE)
    conditions = []
    if spec_hash:
        conditions.append(AiWorkoutBlueprint.spec_hash == spec_hash)

    total = (
        await db.execute(select(func.count(AiWorkoutBlueprint.id)).where(*conditions))
    ).scalar_one()
    result = await db.execute(
        select(AiWorkoutBlueprint)
        .where(*conditions)
        .order_by(AiWorkoutBlueprint.last_used_at.desc())
        .offset(offset)
        .limit(limit)
    )
    blueprints = result.scalars().all()
    return BlueprintPage(
        blueprints=[BlueprintRead.model_validate(b) for b in blueprints],
        pagination=Pagination(
            limit=limit,
            offset=offset,
            total=total,
            has_more=offset + len(blueprints) < total,
        ),
    )


@router.post("/feedback", response_model=FeedbackReceipt)
async def submit_feedback(
    payload: WorkoutFeedback,
    user_id: str = Depends(get_current_user_id),
):
    """Record feedback on a generated workout (logged for tuning generation)."""
    feedback_id = uuid.uuid4()
    logger.info(
        "Workout feedback %s user=%s workout=%s rating=%d feedback=%s comments=%r",
        feedback_id,
        user_id,
        payload.workout_id,
        payload.rating,
        payload.feedback.value,
        payload.comments,
    )
    return FeedbackReceipt(message="Feedback received successfully", feedback_id=feedback_id)
