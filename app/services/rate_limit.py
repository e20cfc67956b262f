"""Sliding-window rate limiter backed by the rate_limits table.

Each admitted attempt inserts one row. An attempt is admitted when fewer than
`limit` rows for the identifier fall inside the last `window_ms`. Cleanup,
count and insert run in one transaction that first takes a per-identifier
lock, so concurrent attempts cannot both take the last slot.

Storage failures fail OPEN: the request is admitted and the error is logged.
This throttle protects cost, not security, and availability wins during a
database outage. Changing it to fail closed changes outage behaviour of the
generation endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.dates import as_utc, utcnow
from app.db.session import lock_for_key
from app.models.rate_limit import RateLimitRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    admitted: bool
    remaining: int
    reset_time_ms: int


class RateLimiter:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_maker = session_maker
        self._clock = clock

    async def attempt(
        self,
        identifier: str,
        limit: int,
        window_ms: int,
        action: str = "generate-workout",
    ) -> RateLimitResult:
        now = self._clock()
        window = timedelta(milliseconds=window_ms)
        window_start = now - window
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    await lock_for_key(session, identifier)
                    await session.execute(
                        delete(RateLimitRecord).where(
                            RateLimitRecord.identifier == identifier,
                            RateLimitRecord.created_at < window_start,
                        )
                    )
                    row = (
                        await session.execute(
                            select(
                                func.count(RateLimitRecord.id).label("n"),
                                func.min(RateLimitRecord.created_at).label("oldest"),
                            ).where(
                                RateLimitRecord.identifier == identifier,
                                RateLimitRecord.created_at >= window_start,
                            )
                        )
                    ).one()
                    count = int(row.n or 0)

                    if count >= limit:
                        reset_ms = 0
                        if row.oldest is not None:
                            delta = as_utc(row.oldest) + window - now
                            reset_ms = max(0, int(delta.total_seconds() * 1000))
                        return RateLimitResult(admitted=False, remaining=0, reset_time_ms=reset_ms)

                    session.add(RateLimitRecord(identifier=identifier, action=action, created_at=now))
            return RateLimitResult(admitted=True, remaining=limit - count - 1, reset_time_ms=window_ms)
        except (SQLAlchemyError, OSError):
            logger.exception("Rate limit check failed for %s; admitting request", identifier)
            return RateLimitResult(admitted=True, remaining=limit - 1, reset_time_ms=window_ms)
