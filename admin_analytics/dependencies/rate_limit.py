"""Per-IP per-path sliding window limiter for the unauthenticated write endpoints."""
import time
from collections import defaultdict, deque
from typing import Callable

from fastapi import HTTPException, Request, status

from admin_analytics.core.config import settings
from admin_analytics.utils.helpers import get_client_ip


class SlidingWindowLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._buckets: dict[str, deque] = defaultdict(deque)

    def hit(self, key: str, limit: int, window: float) -> bool:
        """Record one hit for ``key``; False when the window is already full."""
        now = self._clock()
        bucket = self._buckets[key]
        while bucket and bucket[0] <= now - window:
            bucket.popleft()
        if len(bucket) >= limit:
            return False
        bucket.append(now)
        return True

    def reset(self) -> None:
        self._buckets.clear()


limiter = SlidingWindowLimiter()


async def rate_limit(request: Request):
    if not settings.RATE_LIMIT_ENABLED:
        return True

    key = f"{get_client_ip(request)}:{request.url.path}"
    if not limiter.hit(key, settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_PERIOD_SECONDS):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please slow down.",
        )
    return True
