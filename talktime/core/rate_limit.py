"""Rate limiting dependency for FastAPI routes.

Wires the rate limiting adapter into the HTTP layer.

- One limiter per application, built by the app factory and stored on
  ``app.state.rate_limiter``; routes reach it through ``get_rate_limiter``.
- Callers are identified by API key when present, otherwise by client IP
  (first X-Forwarded-For hop, then the socket peer).
- A store outage (``RateLimiterUnavailableError``) is resolved by the
  APP_RATE_LIMIT_FAIL_OPEN policy: admit and warn, or deny with 503.
"""

from __future__ import annotations

import logging
import math
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from talktime.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimiterUnavailableError,
    RateLimitResult,
)
from talktime.adapters.rate_limit.in_memory import SlidingLogRateLimiter
from talktime.core.auth import hash_secret
from talktime.core.config import AppSettings, settings

logger = logging.getLogger(__name__)

RATE_LIMITED_DETAIL = "Too many requests. Please wait a moment."


def build_rate_limiter(app_settings: AppSettings | None = None) -> SlidingLogRateLimiter:
    """Build the application's limiter from configuration.

    Args:
        app_settings: Optional settings; defaults to the global app settings.

    Returns:
        SlidingLogRateLimiter: Fresh limiter with empty state.
    """

    cfg = app_settings or settings.app
    return SlidingLogRateLimiter(
        window_ms=cfg.rate_limit_window_ms,
        max_requests=cfg.rate_limit_requests,
        max_identifiers=cfg.rate_limit_max_identifiers or None,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.rate_limiter


def build_rate_limit_identifier(request: Request, api_key: str | None) -> str:
    """Build the namespaced quota key for the current request.

    Args:
        request: FastAPI request.
        api_key: Value of the X-API-Key header, if any.

    Returns:
        str: ``api_key:<key>`` or ``ip:<address>``.
    """

    if api_key:
        return f"api_key:{api_key}"

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return f"ip:{first_hop}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _retry_after_seconds(result: RateLimitResult) -> int:
    return max(1, math.ceil((result.retry_after_ms or 0) / 1000))


def _throttle_headers(result: RateLimitResult) -> dict[str, str] | None:
    if not settings.app.rate_limit_include_headers:
        return None
    return {
        "Retry-After": str(_retry_after_seconds(result)),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
    }


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency admitting or throttling the caller.

    Raises:
        HTTPException: 429 when the caller's quota is exhausted; 503 when the
            limiter backend is down and the fail-closed policy is configured.
    """

    if not settings.app.rate_limit_enabled:
        return

    identifier = build_rate_limit_identifier(request, x_api_key)
    key_type = identifier.split(":", 1)[0]
    key_hash = hash_secret(identifier)

    try:
        result = limiter.check_limit(identifier)
    except RateLimiterUnavailableError as exc:
        fail_open = settings.app.rate_limit_fail_open
        logger.warning(
            "rate_limit.backend_unavailable",
            extra={
                "key_type": key_type,
                "key_hash": key_hash,
                "fail_open": fail_open,
                "error_msg": str(exc),
            },
        )
        if fail_open:
            return
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting is temporarily unavailable. Please try again later.",
        ) from exc

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_type": key_type,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_type": key_type,
            "key_hash": key_hash,
            "limit": result.limit,
            "retry_after_ms": result.retry_after_ms,
        },
    )

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=RATE_LIMITED_DETAIL,
        headers=_throttle_headers(result),
    )
