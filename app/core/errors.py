"""Domain errors raised by services and mapped to HTTP responses in app.main."""

from __future__ import annotations

import math


class AppError(Exception):
    """Base for errors that carry their own HTTP status."""

    status_code: int = 500
    detail: str = "Internal error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)

    def headers(self) -> dict[str, str]:
        return {}

    def payload(self) -> dict:
        return {"detail": self.detail}


class RateLimitExceeded(AppError):
    status_code = 429
    detail = "Rate limit exceeded"

    def __init__(self, reset_time_ms: int, limit: int | None = None, detail: str | None = None):
        self.reset_time_ms = reset_time_ms
        self.limit = limit
        super().__init__(detail)

    @property
    def retry_after_seconds(self) -> int:
        return max(1, math.ceil(self.reset_time_ms / 1000))

    def headers(self) -> dict[str, str]:
        headers = {"Retry-After": str(self.retry_after_seconds), "X-RateLimit-Remaining": "0"}
        if self.limit is not None:
            headers["X-RateLimit-Limit"] = str(self.limit)
        return headers

    def payload(self) -> dict:
        return {"detail": self.detail, "reset_time_ms": self.reset_time_ms}


class IdempotencyConflict(AppError):
    """Idempotency key reused by a different user (or no longer pending on store)."""

    status_code = 409
    detail = "Idempotency key conflict"


class PendingDuplicate(AppError):
    """Same key and owner: the first request is still generating."""

    status_code = 409
    detail = "A request with this idempotency key is still processing"

    def headers(self) -> dict[str, str]:
        return {"Retry-After": "1"}


class GenerationFailure(AppError):
    status_code = 503
    detail = "AI service temporarily unavailable. Please try again."
