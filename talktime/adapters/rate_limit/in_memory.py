"""In-memory sliding-log rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the identifier map.
- Exact: every decision is re-derived from stored timestamps, so there is no
  double admission at window edges as with fixed-window counters.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable

from talktime.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitConfigError,
    RateLimitResult,
)


def epoch_millis() -> int:
    """Return the current UNIX time in milliseconds."""
    return time.time_ns() // 1_000_000


class SlidingLogRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a log of admitted timestamps per identifier.

    Each identifier may be admitted at most ``max_requests`` times within any
    trailing ``window_ms`` interval. Expired timestamps are pruned lazily on
    the identifier's next check.

    Important:
        Memory grows with the number of distinct identifiers seen. Pass
        ``max_identifiers`` to evict the least recently checked identifier
        once the bound is hit, or call :meth:`sweep` periodically.
    """

    def __init__(
        self,
        *,
        window_ms: int = 60000,
        max_requests: int = 10,
        clock: Callable[[], int] = epoch_millis,
        max_identifiers: int | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_ms: Sliding window length in milliseconds.
            max_requests: Maximum admitted requests per identifier per window.
            clock: Time source returning UNIX time in milliseconds.
            max_identifiers: Optional bound on tracked identifiers (LRU eviction).

        Raises:
            RateLimitConfigError: If any bound is not a positive integer.
        """
        if window_ms < 1:
            raise RateLimitConfigError("window_ms must be >= 1")
        if max_requests < 1:
            raise RateLimitConfigError("max_requests must be >= 1")
        if max_identifiers is not None and max_identifiers < 1:
            raise RateLimitConfigError("max_identifiers must be >= 1 when set")

        self._window_ms = window_ms
        self._max_requests = max_requests
        self._clock = clock
        self._max_identifiers = max_identifiers
        self._lock = threading.RLock()
        self._requests: OrderedDict[str, list[int]] = OrderedDict()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SlidingLogRateLimiter(window_ms={self._window_ms}, "
            f"max_requests={self._max_requests}, tracked={len(self._requests)})"
        )

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def tracked_identifiers(self) -> int:
        """Number of identifiers currently holding state."""
        with self._lock:
            return len(self._requests)

    def _prune(self, timestamps: list[int], now: int) -> list[int]:
        # A timestamp exactly one window old has expired.
        return [t for t in timestamps if now - t < self._window_ms]

    def _store(self, identifier: str, timestamps: list[int]) -> None:
        self._requests[identifier] = timestamps
        self._requests.move_to_end(identifier)
        if self._max_identifiers is not None:
            while len(self._requests) > self._max_identifiers:
                self._requests.popitem(last=False)

    def check_limit(self, identifier: str) -> RateLimitResult:
        """Check and record an attempt for ``identifier``.

        Args:
            identifier: Quota pool key. Not validated; empty strings are a
                valid (shared) pool.

        Returns:
            RateLimitResult; ``remaining`` counts the just-admitted request.
        """
        with self._lock:
            # Read the clock under the lock so stored timestamps stay ordered.
            now = self._clock()
            live = self._prune(self._requests.get(identifier, []), now)

            if len(live) >= self._max_requests:
                self._store(identifier, live)
                retry_after = max(0, self._window_ms - (now - live[0]))
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    limit=self._max_requests,
                    retry_after_ms=retry_after,
                )

            live.append(now)
            self._store(identifier, live)
            return RateLimitResult(
                allowed=True,
                remaining=self._max_requests - len(live),
                limit=self._max_requests,
            )

    def reset(self, identifier: str) -> None:
        """Discard all state for ``identifier``. Unknown identifiers are ignored."""
        with self._lock:
            self._requests.pop(identifier, None)

    def sweep(self) -> int:
        """Drop identifiers whose timestamps have all expired.

        Returns:
            Number of identifiers removed.
        """
        removed = 0

        with self._lock:
            now = self._clock()
            for identifier, timestamps in list(self._requests.items()):
                if not self._prune(timestamps, now):
                    del self._requests[identifier]
                    removed += 1

        return removed
