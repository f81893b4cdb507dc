"""Factory for creating the conversation model client."""

import logging

from talktime.adapters.llm.base import AbstractLLMClient
from talktime.adapters.llm.openai_client import OpenAIClient
from talktime.core.config import LLMSettings, settings
from talktime.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

# Placeholder shipped in sample .env files; treated as "no key".
_PLACEHOLDER_KEYS = {"your_openai_api_key_here"}


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient | None:
    """Instantiate the LLM client for the configured provider.

    Args:
        llm_settings: Optional settings; defaults to the global LLM settings.

    Returns:
        AbstractLLMClient, or None when no API key is configured (the chat
        endpoint then reports the AI service as unavailable).

    Raises:
        ValidationAppError: If the provider is unknown.
    """
    cfg = llm_settings or settings.llm
    provider = cfg.provider.lower()

    if provider != "openai":
        raise ValidationAppError(
            code="llm_unknown_provider",
            message=f"Unknown LLM provider: '{provider}'. Supported providers: openai",
        )

    if not cfg.api_key or cfg.api_key in _PLACEHOLDER_KEYS:
        logger.warning(
            "llm.not_configured",
            extra={"provider": provider, "hint": "Set LLM_API_KEY to enable chat"},
        )
        return None

    return OpenAIClient(
        api_key=cfg.api_key,
        model=cfg.model,
        base_url=cfg.base_url,
        timeout_seconds=cfg.timeout_seconds,
    )
