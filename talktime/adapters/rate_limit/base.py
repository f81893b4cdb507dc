"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so a store-backed limiter can replace the in-memory one without touching
route code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class RateLimitConfigError(ValueError):
    """Raised at construction when a limiter is configured with invalid bounds."""


class RateLimiterUnavailableError(RuntimeError):
    """Raised by store-backed limiters when the backing store cannot be reached.

    The in-memory limiter never raises it. Callers decide whether to admit
    (fail open) or deny (fail closed) when they see it.
    """


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single admission check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: Requests still admissible in the current window (0 when denied).
        limit: Max requests per window.
        retry_after_ms: Milliseconds until a slot frees up when denied, else None.
    """

    allowed: bool
    remaining: int
    limit: int
    retry_after_ms: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for per-identifier admission control."""

    @abstractmethod
    def check_limit(self, identifier: str) -> RateLimitResult:
        """Record an attempt for ``identifier`` and decide whether to admit it.

        Args:
            identifier: Caller-chosen key partitioning quota pools
                (e.g., ``api_key:<key>`` or ``ip:<address>``).

        Returns:
            RateLimitResult describing the decision.

        Raises:
            RateLimiterUnavailableError: If a store-backed limiter cannot reach its store.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, identifier: str) -> None:
        """Forget every recorded attempt for ``identifier``."""
        raise NotImplementedError
