"""Rate limiting module for per-identity request admission control.

Uses fixed, aligned time windows: every identity gets ``limit`` admissions
per window, and the count resets at the next window boundary. Counts live
in an injected ``CountingStore`` so the same limiter works in-process or
against a shared counter service.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from .counting_store import CountingStore, InMemoryCountingStore

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    max_requests: int = 100  # Max admissions per window
    window_seconds: float = 60  # Fixed window length

    def __post_init__(self) -> None:
        if self.window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {self.window_seconds!r}")


@dataclass(frozen=True)
class RateLimitStatus:
    """Result of a single admission check."""

    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds at which the window ends
    limit: int
    message: str = ""
    retry_after: int = 0  # whole seconds until reset, from the limiter's clock


class RateLimiter:
    """Fixed window rate limiter.

    This class never raises for a well-formed call; it only allows or
    denies. Identity is whatever the caller supplies (IP address, user id).
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        store: CountingStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize with configuration and storage.

        Args:
            config: Rate limit configuration
            store: Counting store; defaults to an in-memory store
            clock: Time source returning epoch seconds
        """
        self.config = config or RateLimitConfig()
        self.store = store if store is not None else InMemoryCountingStore()
        self._clock = clock

        self._stats_lock = threading.Lock()
        self.stats = {
            "total_requests": 0,
            "blocked_requests": 0,
            "unique_identities": set(),
        }

    def check(
        self,
        identity: str,
        limit: int | None = None,
        window_seconds: float | None = None,
    ) -> RateLimitStatus:
        """Check whether a request from ``identity`` is admitted.

        Args:
            identity: Caller identity (network address, user id ...)
            limit: Admissions per window; defaults to ``config.max_requests``
            window_seconds: Window length; defaults to ``config.window_seconds``.
                A non-positive override is ignored.

        Returns:
            RateLimitStatus with result and details
        """
        limit = self.config.max_requests if limit is None else limit
        window = self.config.window_seconds
        if window_seconds is not None and window_seconds > 0:
            window = window_seconds
        now = self._clock()

        # Window index, not start time, so fractional windows never share a key
        index = int(now // window)
        reset_at = (index + 1) * window
        key = f"{identity}:{window}:{index}"

        allowed, count = self.store.increment_if_below(key, limit, reset_at)
        self.store.sweep(now)

        with self._stats_lock:
            self.stats["total_requests"] += 1
            self.stats["unique_identities"].add(identity)
            if not allowed:
                self.stats["blocked_requests"] += 1

        if not allowed:
            reset_time = datetime.fromtimestamp(reset_at)
            logger.info(
                "Rate limit exceeded",
                extra={"identity": identity, "limit": limit, "reset_at": reset_at},
            )
            return RateLimitStatus(
                allowed=False,
                remaining=0,
                reset_at=reset_at,
                limit=limit,
                message=f"Rate limit exceeded. Reset at {reset_time.strftime('%H:%M:%S')}",
                retry_after=max(0, math.ceil(reset_at - now)),
            )

        return RateLimitStatus(
            allowed=True,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            limit=limit,
            retry_after=max(0, math.ceil(reset_at - now)),
        )

    def is_rate_limited(self, identity: str) -> bool:
        """Quick check if ``identity`` is rate limited (consumes an admission)."""
        return not self.check(identity).allowed

    def get_stats(self) -> dict[str, object]:
        """Get rate limiter statistics.

        Returns:
            Dictionary of statistics
        """
        with self._stats_lock:
            total = self.stats["total_requests"]
            blocked = self.stats["blocked_requests"]
            return {
                "total_requests": total,
                "blocked_requests": blocked,
                "block_rate": blocked / total if total > 0 else 0,
                "unique_identities": len(self.stats["unique_identities"]),
                "strategy": "fixed_window",
            }
