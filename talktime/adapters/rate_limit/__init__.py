"""Rate limiting adapters.

A small abstraction layer: the API depends on ``AbstractRateLimiter`` while
the service ships with the in-process sliding-log implementation.
"""

from talktime.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitConfigError,
    RateLimiterUnavailableError,
    RateLimitResult,
)
from talktime.adapters.rate_limit.in_memory import SlidingLogRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitConfigError",
    "RateLimiterUnavailableError",
    "RateLimitResult",
    "SlidingLogRateLimiter",
]
