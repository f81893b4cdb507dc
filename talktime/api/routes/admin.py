"""Operator endpoints for the rate limiter.

Guarded by operator keys (APP_ADMIN_API_KEYS), never chat keys. Intended for
support staff unblocking a caller and for periodic cleanup jobs; the app
factory does not mount these routes when no operator key is configured.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from talktime.adapters.rate_limit.base import AbstractRateLimiter
from talktime.adapters.rate_limit.in_memory import SlidingLogRateLimiter
from talktime.core.auth import hash_secret, verify_admin_key
from talktime.core.errors import ValidationAppError
from talktime.core.rate_limit import get_rate_limiter
from talktime.schemas.admin import SweepResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/rate-limit",
    tags=["Admin"],
    dependencies=[Depends(verify_admin_key)],
)


@router.post("/sweep", response_model=SweepResponse)
def sweep_identifiers(
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
) -> SweepResponse:
    """Drop callers with no live requests to reclaim memory."""

    if not isinstance(limiter, SlidingLogRateLimiter):
        raise ValidationAppError(
            code="sweep_not_supported",
            message="The configured rate limiter does not support sweeping",
        )

    removed = limiter.sweep()
    tracked = limiter.tracked_identifiers
    logger.info("rate_limit.sweep", extra={"removed": removed, "tracked_identifiers": tracked})
    return SweepResponse(removed=removed, tracked_identifiers=tracked)


@router.delete("/{identifier:path}", status_code=status.HTTP_204_NO_CONTENT)
def reset_identifier(
    identifier: str,
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
) -> Response:
    """Restore the full quota for one caller (e.g. ``ip:203.0.113.7``)."""

    limiter.reset(identifier)
    logger.info("rate_limit.reset", extra={"key_hash": hash_secret(identifier)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
