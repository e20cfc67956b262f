"""AI workout generation: rate limit -> idempotency -> blueprint cache or generator -> ledger.

Rate limiting runs before any idempotency bookkeeping, so churning idempotency
keys cannot be used to get around the throttle.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.constants import AI_GENERATE_ACTION, AI_GENERATE_RATE_LIMIT_PREFIX
from app.core.dates import utcnow
from app.core.errors import PendingDuplicate, RateLimitExceeded
from app.models.ai_generation import AiWorkoutBlueprint
from app.schemas.ai_workout import GeneratedWorkout, GenerateWorkoutRequest
from app.services.db_retry import execute_with_retry
from app.services.idempotency import IdempotencyLedger
from app.services.rate_limit import RateLimiter, RateLimitResult
from app.services.workout_generator import WorkoutGenerator

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (SQLAlchemyError, OSError)


def compute_spec_hash(request: GenerateWorkoutRequest) -> str:
    """SHA-256 of the normalized request; list order and unset fields do not matter."""

    def sorted_values(items):
        if items is None:
            return None
        return sorted(getattr(i, "value", i) for i in items)

    normalized = {
        "fitness_level": request.fitness_level.value,
        "available_equipment": sorted_values(request.available_equipment),
        "target_muscle_groups": sorted_values(request.target_muscle_groups),
        "workout_type": request.workout_type.value,
        "target_duration": request.target_duration,
        "intensity": request.intensity.value if request.intensity else None,
        "exclude_exercises": sorted_values(request.exclude_exercises),
        "include_exercises": sorted_values(request.include_exercises),
    }
    payload = json.dumps({k: v for k, v in normalized.items() if v is not None}, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class BlueprintCache:
    """Generated workouts keyed by spec hash (one row per hash)."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def fetch(self, spec_hash: str) -> tuple[uuid.UUID, GeneratedWorkout] | None:
        """Return the cached workout and record the hit."""
        now = utcnow()
        async with self._session_maker() as session:
            async with session.begin():
                await session.execute(
                    update(AiWorkoutBlueprint)
                    .where(AiWorkoutBlueprint.spec_hash == spec_hash)
                    .values(usage_count=AiWorkoutBlueprint.usage_count + 1, last_used_at=now)
                    .execution_options(synchronize_session=False)
                )
                row = (
                    await session.execute(
                        select(AiWorkoutBlueprint.id, AiWorkoutBlueprint.routine_data).where(
                            AiWorkoutBlueprint.spec_hash == spec_hash
                        )
                    )
                ).one_or_none()
        if row is None:
            return None
        workout = GeneratedWorkout.model_validate_json(row.routine_data)
        return row.id, workout.model_copy(update={"from_cache": True, "created_at": now})

    async def save(self, spec_hash: str, workout: GeneratedWorkout) -> uuid.UUID:
        """Insert the blueprint; if the hash is already cached, replace it with this generation."""
        now = utcnow()
        data = workout.model_dump_json()
        blueprint_id = uuid.uuid4()
        async with self._session_maker() as session:
            try:
                async with session.begin():
                    session.add(
                        AiWorkoutBlueprint(
                            id=blueprint_id,
                            spec_hash=spec_hash,
                            routine_data=data,
                            created_at=now,
                            last_used_at=now,
                            usage_count=1,
                        )
                    )
                return blueprint_id
            except IntegrityError:
                pass

            async with session.begin():
                await session.execute(
                    update(AiWorkoutBlueprint)
                    .where(AiWorkoutBlueprint.spec_hash == spec_hash)
                    .values(
                        routine_data=data,
                        usage_count=AiWorkoutBlueprint.usage_count + 1,
                        last_used_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                return (
                    await session.execute(
                        select(AiWorkoutBlueprint.id).where(AiWorkoutBlueprint.spec_hash == spec_hash)
                    )
                ).scalar_one()


@dataclass(frozen=True)
class GenerationOutcome:
    workout: GeneratedWorkout
    rate_limit: RateLimitResult


class AiWorkoutGenerationService:
    def __init__(
        self,
        limiter: RateLimiter,
        ledger: IdempotencyLedger,
        blueprints: BlueprintCache,
        generator: WorkoutGenerator,
        *,
        rate_limit: int,
        rate_window_ms: int,
        retry_attempts: int = 3,
        retry_base_delay_ms: int = 100,
    ):
        self._limiter = limiter
        self._ledger = ledger
        self._blueprints = blueprints
        self._generator = generator
        self._rate_limit = rate_limit
        self._rate_window_ms = rate_window_ms
        self._retry_attempts = retry_attempts
        self._retry_base_delay_ms = retry_base_delay_ms

    async def generate(
        self,
        user_id: str,
        idempotency_key: str,
        request: GenerateWorkoutRequest,
    ) -> GenerationOutcome:
        rate = await self._limiter.attempt(
            f"{AI_GENERATE_RATE_LIMIT_PREFIX}:{user_id}",
            self._rate_limit,
            self._rate_window_ms,
            action=AI_GENERATE_ACTION,
        )
        if not rate.admitted:
            raise RateLimitExceeded(rate.reset_time_ms, limit=self._rate_limit)

        spec_hash = compute_spec_hash(request)
        existing = await self._ledger.lookup(
            idempotency_key,
            user_id,
            spec_hash=spec_hash,
            request_data=request.model_dump(mode="json"),
        )
        if not existing.is_new:
            if existing.data is None:
                raise PendingDuplicate()
            return GenerationOutcome(GeneratedWorkout.model_validate(existing.data), rate)

        try:
            blueprint_id, workout = await self._produce(request, spec_hash)
            await self._with_retry(
                lambda: self._ledger.store(
                    idempotency_key,
                    user_id,
                    workout.model_dump(mode="json"),
                    blueprint_id=blueprint_id,
                )
            )
        except Exception as exc:
            logger.exception("Workout generation failed for idempotency key %s", idempotency_key)
            await self._mark_failed(idempotency_key, user_id, str(exc) or type(exc).__name__)
            raise
        return GenerationOutcome(workout, rate)

    async def _produce(
        self, request: GenerateWorkoutRequest, spec_hash: str
    ) -> tuple[uuid.UUID, GeneratedWorkout]:
        if request.allow_cached_results and not request.regenerate:
            cached = await self._blueprints.fetch(spec_hash)
            if cached is not None:
                return cached
        workout = await self._generator.generate(request, spec_hash)
        blueprint_id = await self._blueprints.save(spec_hash, workout)
        return blueprint_id, workout

    async def _mark_failed(self, key: str, user_id: str, error: str) -> None:
        try:
            await self._with_retry(lambda: self._ledger.mark_failed(key, user_id, error))
        except STORAGE_ERRORS:
            logger.exception("Could not mark generation request %s as failed", key)

    async def _with_retry(self, operation):
        return await execute_with_retry(
            operation,
            attempts=self._retry_attempts,
            base_delay_ms=self._retry_base_delay_ms,
            retry_on=STORAGE_ERRORS,
        )
