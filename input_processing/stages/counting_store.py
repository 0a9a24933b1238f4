"""Counting stores backing the fixed-window rate limiter.

The rate limiter only needs an atomic "increment if below limit" primitive
keyed by ``identity:window_start``. Two implementations are provided:

- ``InMemoryCountingStore`` for single-process deployments
- ``RedisCountingStore`` for deployments sharing counts across processes
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from redis import Redis


@dataclass
class RateLimitRecord:
    """Count for one identity within one window."""

    key: str
    count: int
    reset_at: float


@runtime_checkable
class CountingStore(Protocol):
    """Storage contract used by ``RateLimiter``."""

    def increment_if_below(self, key: str, limit: int, reset_at: float) -> tuple[bool, int]:
        """Atomically increment ``key`` when its count is below ``limit``.

        Returns:
            Tuple of (incremented, count after the call)
        """
        ...

    def sweep(self, now: float) -> int:
        """Evict records whose ``reset_at`` has passed. Returns evicted count."""
        ...


class InMemoryCountingStore:
    """Lock-protected dict of ``RateLimitRecord`` objects."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    def increment_if_below(self, key: str, limit: int, reset_at: float) -> tuple[bool, int]:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                record = RateLimitRecord(key=key, count=0, reset_at=reset_at)
                self._records[key] = record

            if record.count >= limit:
                return False, record.count

            record.count += 1
            return True, record.count

    def sweep(self, now: float) -> int:
        with self._lock:
            expired = [k for k, r in self._records.items() if r.reset_at < now]
            for key in expired:
                del self._records[key]
            return len(expired)

    def get(self, key: str) -> RateLimitRecord | None:
        """Return a copy of the record for ``key`` if present."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(key=record.key, count=record.count, reset_at=record.reset_at)

    def clear(self, prefix: str = "") -> None:
        """Drop all records, or only those whose key starts with ``prefix``."""
        with self._lock:
            if not prefix:
                self._records.clear()
                return
            for key in [k for k in self._records if k.startswith(prefix)]:
                del self._records[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisCountingStore:
    """Counting store shared between processes through Redis.

    Each window key is incremented inside a WATCH/MULTI transaction so the
    stored count never passes ``limit``. Keys expire at the window end, so
    ``sweep`` has nothing to do.
    """

    def __init__(self, client: Redis, key_prefix: str = "vibegate:rate:") -> None:
        self._redis = client
        self._prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "vibegate:rate:") -> RedisCountingStore:
        from redis import Redis

        return cls(Redis.from_url(url, decode_responses=True), key_prefix=key_prefix)

    def increment_if_below(self, key: str, limit: int, reset_at: float) -> tuple[bool, int]:
        redis_key = f"{self._prefix}{key}"
        expire_at = int(math.ceil(reset_at))

        def _txn(pipe) -> tuple[bool, int]:
            current = int(pipe.get(redis_key) or 0)
            pipe.multi()
            if current >= limit:
                return False, current
            pipe.incr(redis_key)
            pipe.expireat(redis_key, expire_at)
            return True, current + 1

        return self._redis.transaction(_txn, redis_key, value_from_callable=True)

    def sweep(self, now: float) -> int:
        return 0
