"""OpenAI chat completions adapter."""

from typing import Any

from openai import AsyncOpenAI, OpenAIError

from talktime.adapters.llm.base import AbstractLLMClient
from talktime.core.errors import LLMAppError


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI chat completions using the official async SDK."""

    # Sampling options forwarded to the API when supplied by the caller
    ALLOWED_PARAMS = {
        "temperature",
        "max_tokens",
        "top_p",
        "frequency_penalty",
        "presence_penalty",
        "seed",
    }

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            model: Model name (e.g., "gpt-4-turbo-preview", "gpt-4o-mini").
            base_url: Optional custom base URL for the OpenAI API.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_reply(
        self,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> str:
        """Generate the next assistant turn.

        Args:
            messages: Chat history, system prompt first.
            **kwargs: Sampling options; anything outside ALLOWED_PARAMS is ignored.

        Returns:
            str: Reply text, stripped; empty when the model returned nothing.

        Raises:
            LLMAppError: If the API call fails.
        """
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        for param in self.ALLOWED_PARAMS:
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
        except OpenAIError as exc:
            raise LLMAppError(
                code="llm_request_failed",
                message="AI service error",
                details={"model": self.model, "context": {"error_type": type(exc).__name__}},
            ) from exc

        if not response.choices:
            return ""

        content = response.choices[0].message.content
        return (content or "").strip()
