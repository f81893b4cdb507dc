"""API key authentication.

Keys are validated against a comma-separated list from the APP_API_KEYS
environment variable and supplied by clients in the X-API-Key header.
Authentication can be disabled with APP_API_KEY_REQUIRED=false (local dev).
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Annotated

from fastapi import Header, HTTPException, status

from talktime.core.config import settings
from talktime.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)


def hash_secret(value: str) -> str:
    """Short, stable fingerprint of a secret for logs."""
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> sorted(parse_api_keys("key1, key2 ,key1"))
        ['key1', 'key2']
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def _matches_any(provided_key: str, valid_keys: set[str]) -> bool:
    return any(secrets.compare_digest(provided_key, key) for key in valid_keys)


def validate_api_key(provided_key: str) -> None:
    """Validate that the provided API key matches a configured key.

    Args:
        provided_key: API key to validate.

    Raises:
        AuthenticationAppError: If the key is invalid, or authentication is
            required but no keys are configured.
    """
    if not settings.app.api_key_required:
        return

    valid_keys = parse_api_keys(settings.app.api_keys)

    if not valid_keys:
        logger.error(
            "api_key_validation_failed",
            extra={
                "reason": "api_keys_not_configured",
                "auth_required": settings.app.api_key_required,
            },
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if not provided_key or not _matches_any(provided_key, valid_keys):
        logger.warning(
            "api_key_validation_failed",
            extra={
                "reason": "invalid_api_key",
                "api_key_hash": hash_secret(provided_key or ""),
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing X-API-Key authentication.

    Usage:
        @router.post("/chat", dependencies=[Depends(verify_api_key)])

    Raises:
        HTTPException: 403 Forbidden if authentication fails.
    """
    if not settings.app.api_key_required:
        logger.debug("auth.skipped", extra={"reason": "auth_required_false"})
        return

    if not x_api_key:
        logger.warning("auth.missing_key", extra={"api_key_present": False})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Missing API key. Provide X-API-Key header.",
        )

    try:
        validate_api_key(x_api_key)
    except AuthenticationAppError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=exc.message,
        ) from exc

    logger.debug("auth.success", extra={"api_key_hash": hash_secret(x_api_key)})


def admin_keys_configured() -> bool:
    """Whether any operator key is configured for the admin routes."""
    return bool(parse_api_keys(settings.app.admin_api_keys))


async def verify_admin_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency restricting a route to operator keys.

    Operator keys come from APP_ADMIN_API_KEYS and are checked even when
    APP_API_KEY_REQUIRED=false. Chat keys are never accepted, so callers
    cannot reset their own quota.

    Raises:
        HTTPException: 403 Forbidden unless X-API-Key is an operator key.
    """
    admin_keys = parse_api_keys(settings.app.admin_api_keys)

    if not x_api_key or not admin_keys or not _matches_any(x_api_key, admin_keys):
        logger.warning(
            "auth.admin_rejected",
            extra={
                "api_key_present": bool(x_api_key),
                "admin_keys_configured": bool(admin_keys),
                "api_key_hash": hash_secret(x_api_key or ""),
            },
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin API key required.",
        )

    logger.info("auth.admin_success", extra={"api_key_hash": hash_secret(x_api_key)})
