"""Fixed-window request rate limiter on top of ``limits``.

The counters live in Redis (``async+redis://``) so every worker shares one
budget per client. ``hit`` raises ``limits.errors.StorageError`` when the
backend is unreachable; callers decide whether to fail open.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable

from limits import parse
from limits.aio.storage import Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after_seconds: int


def create_rate_limit_storage(redis_uri: str) -> Storage:
    """Async limits storage for *redis_uri*, with backend errors wrapped."""
    return storage_from_string(f"async+{redis_uri}", wrap_exceptions=True)


class RequestRateLimiter:
    def __init__(
        self,
        storage: Storage,
        limit: str,
        namespace: str = "ratelimit",
        time_func: Callable[[], float] = time.time,
    ) -> None:
        self._strategy = FixedWindowRateLimiter(storage)
        self._item = parse(limit)
        self._namespace = namespace
        self._time = time_func

    async def hit(self, key: str) -> RateLimitResult:
        allowed = await self._strategy.hit(self._item, self._namespace, key)
        stats = await self._strategy.get_window_stats(self._item, self._namespace, key)
        if allowed:
            return RateLimitResult(True, stats.remaining, 0)
        retry_after = max(1, math.ceil(stats.reset_time - self._time()))
        return RateLimitResult(False, 0, retry_after)
