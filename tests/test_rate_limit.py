"""Sliding-window rate limiter against a real (SQLite) database."""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from app.core.errors import RateLimitExceeded
from app.db.session import build_engine, build_session_maker
from app.models.rate_limit import RateLimitRecord
from app.services.rate_limit import RateLimiter

WINDOW_MS = 60_000


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


async def _count(session_maker, identifier: str) -> int:
    async with session_maker() as session:
        return (
            await session.execute(
                select(func.count(RateLimitRecord.id)).where(RateLimitRecord.identifier == identifier)
            )
        ).scalar_one()


async def test_five_admitted_then_sixth_rejected(session_maker):
    clock = FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
    limiter = RateLimiter(session_maker, clock=clock)

    remaining = []
    for _ in range(5):
        result = await limiter.attempt("u1", 5, WINDOW_MS)
        assert result.admitted
        remaining.append(result.remaining)
    assert remaining == [4, 3, 2, 1, 0]

    rejected = await limiter.attempt("u1", 5, WINDOW_MS)
    assert not rejected.admitted
    assert rejected.remaining == 0
    assert rejected.reset_time_ms == WINDOW_MS
    assert RateLimitExceeded(rejected.reset_time_ms).retry_after_seconds == 60

    # Rejected attempts are not recorded
    assert await _count(session_maker, "u1") == 5


async def test_reset_time_counts_down_from_oldest_record(session_maker):
    clock = FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
    limiter = RateLimiter(session_maker, clock=clock)
    await limiter.attempt("u1", 2, WINDOW_MS)
    clock.advance(seconds=20)
    await limiter.attempt("u1", 2, WINDOW_MS)
    clock.advance(seconds=10)

    rejected = await limiter.attempt("u1", 2, WINDOW_MS)
    assert not rejected.admitted
    assert rejected.reset_time_ms == 30_000


async def test_window_slides_and_old_records_are_deleted(session_maker):
    clock = FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
    limiter = RateLimiter(session_maker, clock=clock)
    for _ in range(3):
        assert (await limiter.attempt("u1", 3, WINDOW_MS)).admitted
    assert not (await limiter.attempt("u1", 3, WINDOW_MS)).admitted

    clock.advance(milliseconds=WINDOW_MS + 1)
    result = await limiter.attempt("u1", 3, WINDOW_MS)
    assert result.admitted
    assert result.remaining == 2
    assert await _count(session_maker, "u1") == 1


async def test_identifiers_are_independent(session_maker):
    limiter = RateLimiter(session_maker)
    assert (await limiter.attempt("u1", 1, WINDOW_MS)).admitted
    assert not (await limiter.attempt("u1", 1, WINDOW_MS)).admitted
    assert (await limiter.attempt("u2", 1, WINDOW_MS)).admitted


async def test_concurrent_attempts_never_exceed_limit(session_maker):
    limiter = RateLimiter(session_maker)
    results = await asyncio.gather(*(limiter.attempt("burst", 5, WINDOW_MS) for _ in range(12)))

    assert sum(r.admitted for r in results) == 5
    assert await _count(session_maker, "burst") == 5


async def test_storage_failure_fails_open(tmp_path, caplog):
    # Parent directory does not exist, so every connection attempt fails.
    broken = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}")
    try:
        limiter = RateLimiter(build_session_maker(broken))
        result = await limiter.attempt("u1", 5, WINDOW_MS)
    finally:
        await broken.dispose()

    assert result.admitted
    assert result.remaining == 4
    assert result.reset_time_ms == WINDOW_MS
    assert "admitting request" in caplog.text
