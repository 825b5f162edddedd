"""Per-token rate limiting.

Fixed one-hour window per token fingerprint, kept in process memory.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from fastapi import HTTPException, status

from app.core.config import get_hourly_limit


class RateLimitExceeded(HTTPException):
    pass


@dataclass(slots=True)
class _Window:
    start_hour: int
    count: int


class InMemoryHourlyRateLimiter:
    """Simple per-process limiter.

    With several workers the limit applies per worker.
    """

    def __init__(self, *, limit_per_hour: int) -> None:
        self._limit = limit_per_hour
        self._windows: dict[str, _Window] = {}

    def check(self, key: str) -> None:
        hour = int(time.time()) // 3600
        w = self._windows.get(key)
        if w is None or w.start_hour != hour:
            w = _Window(start_hour=hour, count=0)
            self._windows[key] = w
        w.count += 1
        if w.count > self._limit:
            raise RateLimitExceeded(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please slow down.",
            )

    def reset(self) -> None:
        self._windows.clear()


LIMITER = InMemoryHourlyRateLimiter(limit_per_hour=get_hourly_limit())
