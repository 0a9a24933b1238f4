from __future__ import annotations

import threading
from typing import Any

import pytest

from input_processing.stages.counting_store import (
    CountingStore,
    InMemoryCountingStore,
    RedisCountingStore,
)
from input_processing.stages.rate_limiter import RateLimitConfig, RateLimiter


def _limiter(clock, max_requests: int = 3, window: int = 60) -> RateLimiter:
    return RateLimiter(RateLimitConfig(max_requests=max_requests, window_seconds=window), clock=clock)


def test_admits_up_to_limit_then_denies(clock):
    limiter = _limiter(clock)
    remaining = [limiter.check("1.2.3.4").remaining for _ in range(3)]
    assert remaining == [2, 1, 0]

    denied = limiter.check("1.2.3.4")
    assert denied.allowed is False
    assert denied.remaining == 0
    assert denied.limit == 3
    assert denied.message.startswith("Rate limit exceeded. Reset at ")


def test_reset_at_is_aligned_to_window_end(clock):
    limiter = _limiter(clock)
    status = limiter.check("a")
    # 1_000_000 falls in the window [999_960, 1_000_020)
    assert status.reset_at == 1_000_020.0

    clock.advance(15)
    assert limiter.check("a").reset_at == 1_000_020.0


def test_new_window_restores_admissions(clock):
    limiter = _limiter(clock, max_requests=1)
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed

    clock.advance(60)
    status = limiter.check("a")
    assert status.allowed
    assert status.remaining == 0


def test_identities_are_counted_independently(clock):
    limiter = _limiter(clock, max_requests=1)
    assert limiter.check("alice").allowed
    assert limiter.check("bob").allowed
    assert not limiter.check("alice").allowed


def test_per_call_limit_override(clock):
    limiter = _limiter(clock, max_requests=100)
    assert limiter.check("a", limit=1).allowed
    assert not limiter.check("a", limit=1).allowed


def test_is_rate_limited_consumes_an_admission(clock):
    limiter = _limiter(clock, max_requests=1)
    assert limiter.is_rate_limited("a") is False
    assert limiter.is_rate_limited("a") is True


def test_stats_track_blocked_requests(clock):
    limiter = _limiter(clock, max_requests=1)
    limiter.check("a")
    limiter.check("a")
    limiter.check("b")
    stats = limiter.get_stats()
    assert stats["total_requests"] == 3
    assert stats["blocked_requests"] == 1
    assert stats["unique_identities"] == 2
    assert stats["block_rate"] == 1 / 3


def test_retry_after_follows_the_limiter_clock(clock):
    limiter = _limiter(clock, max_requests=1)
    assert limiter.check("a").retry_after == 20

    clock.advance(14.5)
    status = limiter.check("a")
    assert not status.allowed
    # 5.5 seconds left in the window, rounded up
    assert status.retry_after == 6


def test_sub_second_windows_do_not_share_counts(clock):
    clock.now = 10.2
    limiter = RateLimiter(RateLimitConfig(max_requests=1, window_seconds=0.5), clock=clock)
    first = limiter.check("a")
    assert first.allowed
    assert first.reset_at == 10.5

    clock.now = 10.7
    second = limiter.check("a")
    assert second.allowed
    assert second.reset_at == 11.0
    assert not limiter.check("a").allowed


@pytest.mark.parametrize("window", [0, -5])
def test_non_positive_window_is_rejected_by_config(window):
    with pytest.raises(ValueError, match="window_seconds must be positive"):
        RateLimitConfig(window_seconds=window)


@pytest.mark.parametrize("window", [0, -1.5])
def test_non_positive_window_override_falls_back_to_config(clock, window):
    limiter = _limiter(clock, max_requests=1)
    status = limiter.check("a", window_seconds=window)
    assert status.allowed
    assert status.reset_at == 1_000_020.0
    assert not limiter.check("a").allowed


def test_concurrent_checks_never_exceed_limit(clock):
    limiter = _limiter(clock, max_requests=50)
    results: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        allowed = limiter.check("shared").allowed
        with lock:
            results.append(allowed)

    threads = [threading.Thread(target=worker) for _ in range(200)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 200
    assert sum(results) == 50


def test_sweep_evicts_expired_windows(clock):
    store = InMemoryCountingStore()
    limiter = RateLimiter(RateLimitConfig(max_requests=5, window_seconds=60), store=store, clock=clock)
    limiter.check("a")
    limiter.check("b")
    assert len(store) == 2

    # Next check runs past the first window's end and sweeps both records
    clock.advance(61)
    limiter.check("c")
    assert len(store) == 1


def test_in_memory_store_get_and_clear():
    store = InMemoryCountingStore()
    store.increment_if_below("a:0", 2, 60.0)
    store.increment_if_below("a:0", 2, 60.0)
    assert store.increment_if_below("a:0", 2, 60.0) == (False, 2)

    record = store.get("a:0")
    assert record is not None
    assert record.count == 2
    record.count = 99
    assert store.get("a:0").count == 2

    store.increment_if_below("b:0", 2, 60.0)
    store.clear("a:")
    assert store.get("a:0") is None
    assert store.get("b:0") is not None
    store.clear()
    assert len(store) == 0


class _FakePipe:
    def __init__(self, data: dict[str, int], expiries: dict[str, int]):
        self._data = data
        self._expiries = expiries
        self._queued: list[tuple[str, Any]] = []

    def get(self, key: str):
        value = self._data.get(key)
        return None if value is None else str(value)

    def multi(self) -> None:
        self._queued.clear()

    def incr(self, key: str) -> None:
        self._queued.append(("incr", key))

    def expireat(self, key: str, when: int) -> None:
        self._queued.append(("expireat", (key, when)))

    def execute(self) -> None:
        for op, arg in self._queued:
            if op == "incr":
                self._data[arg] = self._data.get(arg, 0) + 1
            else:
                key, when = arg
                self._expiries[key] = when


class _FakeRedis:
    """Implements the slice of redis.Redis that RedisCountingStore uses."""

    def __init__(self):
        self.data: dict[str, int] = {}
        self.expiries: dict[str, int] = {}

    def transaction(self, func, *watches, value_from_callable: bool = False):
        pipe = _FakePipe(self.data, self.expiries)
        value = func(pipe)
        pipe.execute()
        return value if value_from_callable else None


def test_redis_store_increments_and_expires_at_window_end():
    client = _FakeRedis()
    store = RedisCountingStore(client, key_prefix="t:")  # type: ignore[arg-type]

    assert store.increment_if_below("a:0", 2, 59.5) == (True, 1)
    assert store.increment_if_below("a:0", 2, 59.5) == (True, 2)
    assert store.increment_if_below("a:0", 2, 59.5) == (False, 2)

    assert client.data == {"t:a:0": 2}
    assert client.expiries == {"t:a:0": 60}
    assert store.sweep(1e12) == 0


def test_stores_satisfy_protocol():
    assert isinstance(InMemoryCountingStore(), CountingStore)
    assert isinstance(RedisCountingStore(_FakeRedis()), CountingStore)  # type: ignore[arg-type]
