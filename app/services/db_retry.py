"""Retry an async database operation with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_MS = 100


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay_ms: int = 100,
    retry_on: Iterable[type[BaseException]] = (Exception,),
) -> T:
    """Run `operation` up to `attempts` times; the last error is re-raised unchanged.

    Delay before retry n (1-based) is base * 2**(n-1) ms plus up to 100 ms jitter.
    Errors not in `retry_on` propagate immediately.
    """
    exc_types = tuple(retry_on)
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except exc_types as exc:
            if attempt == attempts:
                raise
            delay_ms = base_delay_ms * 2 ** (attempt - 1) + random.uniform(0, JITTER_MS)
            logger.warning("DB operation failed (attempt %d/%d): %s", attempt, attempts, exc)
            await asyncio.sleep(delay_ms / 1000)
    raise AssertionError("unreachable")
