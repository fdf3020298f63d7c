import asyncio
import threading

import pytest

from reviewguard.moderation.domain.rate_limit import InMemoryRateLimiter, RedisRateLimiter


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.mark.asyncio
async def test_memory_limiter_allows_three_per_day() -> None:
    clock = FakeClock()
    limiter = InMemoryRateLimiter(clock=clock)

    assert await limiter.allow("author")
    assert await limiter.allow("author")
    assert await limiter.allow("author")
    assert not await limiter.allow("author")


@pytest.mark.asyncio
async def test_memory_limiter_rejections_do_not_consume_quota() -> None:
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_per_window=2, window_seconds=100, clock=clock)

    assert await limiter.allow("a")
    clock.advance(10)
    assert await limiter.allow("a")
    for _ in range(5):
        assert not await limiter.allow("a")

    # Only the first accepted attempt has aged out.
    clock.advance(90)
    assert await limiter.allow("a")
    assert not await limiter.allow("a")


@pytest.mark.asyncio
async def test_memory_limiter_window_is_rolling() -> None:
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_per_window=1, window_seconds=60, clock=clock)

    assert await limiter.allow("a")
    clock.advance(59)
    assert not await limiter.allow("a")
    clock.advance(1)
    assert await limiter.allow("a")


@pytest.mark.asyncio
async def test_memory_limiter_keys_are_independent() -> None:
    limiter = InMemoryRateLimiter(max_per_window=1)

    assert await limiter.allow("a")
    assert await limiter.allow("b")
    assert not await limiter.allow("a")


def test_memory_limiter_reports_remaining_quota() -> None:
    limiter = InMemoryRateLimiter(max_per_window=3)

    assert limiter.remaining("a") == 3
    limiter.check("a")
    assert limiter.remaining("a") == 2


def test_memory_limiter_evicts_idle_authors() -> None:
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_per_window=1, window_seconds=10, max_tracked_keys=2, clock=clock)

    limiter.check("a")
    limiter.check("b")
    clock.advance(11)
    limiter.check("c")

    assert limiter.tracked_keys() == 1


def test_memory_limiter_keeps_active_authors_when_full() -> None:
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_per_window=1, window_seconds=10, max_tracked_keys=2, clock=clock)

    limiter.check("a")
    limiter.check("b")
    limiter.check("c")

    assert limiter.tracked_keys() == 3
    assert not limiter.check("a")


@pytest.mark.asyncio
async def test_redis_limiter_enforces_window(fake_redis) -> None:
    clock = FakeClock()
    limiter = RedisRateLimiter(fake_redis, max_per_window=3, window_seconds=86400, clock=clock)

    results = []
    for _ in range(5):
        results.append(await limiter.allow("author"))
        clock.advance(1)

    assert results == [True, True, True, False, False]
    assert await fake_redis.zcard("rl:review:author") == 3


@pytest.mark.asyncio
async def test_redis_limiter_expires_old_attempts(fake_redis) -> None:
    clock = FakeClock()
    limiter = RedisRateLimiter(fake_redis, namespace="rl:test", max_per_window=1, window_seconds=60, clock=clock)

    assert await limiter.allow("a")
    clock.advance(30)
    assert not await limiter.allow("a")
    clock.advance(30)
    assert await limiter.allow("a")
    assert await fake_redis.zcard("rl:test:a") == 1


@pytest.mark.asyncio
async def test_redis_limiter_reset_clears_author(fake_redis) -> None:
    limiter = RedisRateLimiter(fake_redis, max_per_window=1)

    assert await limiter.allow("a")
    assert not await limiter.allow("a")
    await limiter.reset("a")
    assert await limiter.allow("a")


class ScanCountingLimiter(InMemoryRateLimiter):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.scans = 0

    def _evict_stale(self, now: float) -> None:
        self.scans += 1
        super()._evict_stale(now)


def test_full_map_of_active_authors_is_not_rescanned_per_insert() -> None:
    clock = FakeClock()
    limiter = ScanCountingLimiter(max_per_window=1, window_seconds=60, max_tracked_keys=4, clock=clock)

    for idx in range(8):
        limiter.check(f"author-{idx}")

    # One scan at 4 tracked authors; the next is due at 8.
    assert limiter.scans == 1
    assert limiter.tracked_keys() == 8

    limiter.check("author-8")
    assert limiter.scans == 2


def test_scan_threshold_resets_after_eviction() -> None:
    clock = FakeClock()
    limiter = ScanCountingLimiter(max_per_window=1, window_seconds=60, max_tracked_keys=2, clock=clock)

    limiter.check("a")
    limiter.check("b")
    limiter.check("c")
    assert limiter.scans == 1
    clock.advance(61)
    limiter.check("d")
    limiter.check("e")

    assert limiter.scans == 2
    assert limiter.tracked_keys() == 2


def test_threads_cannot_share_the_last_slot() -> None:
    limiter = InMemoryRateLimiter(max_per_window=3)
    barrier = threading.Barrier(50)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _worker() -> None:
        barrier.wait()
        allowed = limiter.check("author")
        with results_lock:
            results.append(allowed)

    threads = [threading.Thread(target=_worker) for _ in range(50)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 3
    assert results.count(False) == 47


@pytest.mark.asyncio
async def test_concurrent_redis_attempts_respect_quota(fake_redis) -> None:
    limiter = RedisRateLimiter(fake_redis, max_per_window=3, window_seconds=86400)

    results = await asyncio.gather(*(limiter.allow("author") for _ in range(20)))

    assert results.count(True) == 3
    assert await fake_redis.zcard("rl:review:author") == 3
