"""Rolling-window submission limits per author identity."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Protocol
from uuid import uuid4

from redis.asyncio import Redis
from redis.exceptions import WatchError

from reviewguard.infra.redis import RedisProxy

logger = logging.getLogger(__name__)

DEFAULT_MAX_PER_WINDOW = 3
DEFAULT_WINDOW_SECONDS = 24 * 60 * 60


class RateLimiter(Protocol):
    """Boolean gate; only accepted attempts consume quota."""

    async def allow(self, key: str) -> bool:
        ...


class InMemoryRateLimiter:
    """Process-local sliding window guarded by a single mutex.

    Suitable for single-instance deployments; state is lost on restart.
    """

    def __init__(
        self,
        *,
        max_per_window: int = DEFAULT_MAX_PER_WINDOW,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_tracked_keys: int = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max = max_per_window
        self._window = float(window_seconds)
        self._max_tracked = max(1, max_tracked_keys)
        self._next_scan = self._max_tracked
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = {}
        # threading.Lock covers both worker threads and tasks: nothing awaits while held.
        self._lock = threading.Lock()

    async def allow(self, key: str) -> bool:
        return self.check(key)

    def check(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            window = self._windows.get(key)
            if window is None:
                if len(self._windows) >= self._next_scan:
                    self._evict_stale(now)
                window = deque()
                self._windows[key] = window
            self._prune(window, now)
            if len(window) >= self._max:
                return False
            window.append(now)
            return True

    def remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if not window:
                return self._max
            self._prune(window, self._clock())
            return max(0, self._max - len(window))

    def tracked_keys(self) -> int:
        return len(self._windows)

    def _prune(self, window: Deque[float], now: float) -> None:
        cutoff = now - self._window
        while window and window[0] <= cutoff:
            window.popleft()

    def _evict_stale(self, now: float) -> None:
        evicted = 0
        for key in list(self._windows):
            window = self._windows[key]
            self._prune(window, now)
            if not window:
                del self._windows[key]
                evicted += 1
        # Survivors are active; rescan only once the map has doubled again.
        self._next_scan = max(self._max_tracked, 2 * len(self._windows))
        if evicted:
            logger.debug("rate_limit_evicted", extra={"evicted": evicted})


class RedisRateLimiter:
    """Sliding window stored in a Redis sorted set, shared by all instances.

    WATCH/MULTI keeps read-compare-append atomic per key: a concurrent writer
    invalidates the transaction and the check is retried.
    """

    def __init__(
        self,
        redis: Redis | RedisProxy,
        *,
        namespace: str = "rl:review",
        max_per_window: int = DEFAULT_MAX_PER_WINDOW,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
        max_retries: int = 10,
    ) -> None:
        self._redis = redis
        self._namespace = namespace
        self._max = max_per_window
        self._window = int(window_seconds)
        self._clock = clock
        self._max_retries = max_retries

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def allow(self, key: str) -> bool:
        redis_key = self._key(key)
        async with self._redis.pipeline(transaction=True) as pipe:
            for _ in range(self._max_retries):
                now = self._clock()
                cutoff = now - self._window
                try:
                    await pipe.watch(redis_key)
                    in_window = await pipe.zcount(redis_key, f"({cutoff}", "+inf")
                    if int(in_window) >= self._max:
                        await pipe.unwatch()
                        return False
                    pipe.multi()
                    pipe.zremrangebyscore(redis_key, "-inf", cutoff)
                    pipe.zadd(redis_key, {f"{now}:{uuid4().hex}": now})
                    pipe.expire(redis_key, self._window)
                    await pipe.execute()
                    return True
                except WatchError:
                    await pipe.reset()
                    continue
        raise RuntimeError(f"rate limit contention on {redis_key}")

    async def reset(self, key: str) -> None:
        await self._redis.delete(self._key(key))
