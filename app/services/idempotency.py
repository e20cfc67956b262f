"""Idempotency ledger for AI generation requests.

`lookup` is a find-or-create: it inserts a pending row for a fresh key before
the caller starts generating, so a concurrent duplicate sees `pending` instead
of racing into a second generation. The unique constraint on
`idempotency_key` decides the winner.

Storage errors are not caught here; masking a failed lookup could trigger
duplicate paid generation.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.dates import utcnow
from app.core.enums import GenerationStatus
from app.core.errors import IdempotencyConflict
from app.models.ai_generation import AiGenerationRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class IdempotencyResult(Generic[T]):
    is_new: bool
    data: T | None = None


class IdempotencyLedger:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def lookup(
        self,
        key: str,
        user_id: str,
        *,
        spec_hash: str | None = None,
        request_data: dict[str, Any] | None = None,
    ) -> IdempotencyResult[Any]:
        """Claim `key` for `user_id` or report what an earlier request left behind.

        - fresh key: a pending row is committed, is_new=True
        - other owner: IdempotencyConflict
        - completed: is_new=False with the stored result
        - pending: is_new=False, data=None (another request is generating)
        - failed: re-claimed as pending by exactly one caller, who gets is_new=True
        """
        async with self._session_maker() as session:
            try:
                async with session.begin():
                    session.add(
                        AiGenerationRequest(
                            idempotency_key=key,
                            user_id=user_id,
                            status=GenerationStatus.PENDING.value,
                            spec_hash=spec_hash,
                            request_data=json.dumps(request_data) if request_data is not None else None,
                        )
                    )
                return IdempotencyResult(is_new=True)
            except IntegrityError:
                pass

            async with session.begin():
                existing = (
                    await session.execute(
                        select(AiGenerationRequest).where(AiGenerationRequest.idempotency_key == key)
                    )
                ).scalar_one()

                if existing.user_id != user_id:
                    logger.warning("Idempotency key %s reused by a different user", key)
                    raise IdempotencyConflict()

                if existing.status == GenerationStatus.COMPLETED.value and existing.result is not None:
                    return IdempotencyResult(is_new=False, data=json.loads(existing.result))

                if existing.status == GenerationStatus.FAILED.value:
                    claimed = await session.execute(
                        update(AiGenerationRequest)
                        .where(
                            AiGenerationRequest.idempotency_key == key,
                            AiGenerationRequest.user_id == user_id,
                            AiGenerationRequest.status == GenerationStatus.FAILED.value,
                        )
                        .values(
                            status=GenerationStatus.PENDING.value,
                            error=None,
                            completed_at=None,
                            spec_hash=spec_hash if spec_hash is not None else existing.spec_hash,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    if claimed.rowcount == 1:
                        logger.info("Retrying failed generation for idempotency key %s", key)
                        return IdempotencyResult(is_new=True)

                return IdempotencyResult(is_new=False)

    async def store(
        self,
        key: str,
        user_id: str,
        data: Any,
        *,
        blueprint_id: uuid.UUID | None = None,
    ) -> None:
        """Complete the pending row for `key`. Exactly one terminal write per key."""
        async with self._session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    update(AiGenerationRequest)
                    .where(
                        AiGenerationRequest.idempotency_key == key,
                        AiGenerationRequest.user_id == user_id,
                        AiGenerationRequest.status == GenerationStatus.PENDING.value,
                    )
                    .values(
                        status=GenerationStatus.COMPLETED.value,
                        result=json.dumps(data),
                        blueprint_id=blueprint_id,
                        completed_at=utcnow(),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise IdempotencyConflict("No pending request for this idempotency key")

    async def mark_failed(self, key: str, user_id: str, error: str) -> None:
        async with self._session_maker() as session:
            async with session.begin():
                await session.execute(
                    update(AiGenerationRequest)
                    .where(
                        AiGenerationRequest.idempotency_key == key,
                        AiGenerationRequest.user_id == user_id,
                        AiGenerationRequest.status == GenerationStatus.PENDING.value,
                    )
                    .values(
                        status=GenerationStatus.FAILED.value,
                        error=error[:1000],
                        completed_at=utcnow(),
                    )
                    .execution_options(synchronize_session=False)
                )
