from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Interface for chat models that answer a running conversation."""

	@abstractmethod
	async def generate_reply(
		self,
		messages: list[dict[str, str]],
		**kwargs: Any,
	) -> str:
		"""Generate the assistant's next turn.

		Args:
			messages: Chat history as ``{"role": ..., "content": ...}`` dicts,
				system prompt first.
			**kwargs: Provider-specific sampling options (e.g., temperature, max_tokens).

		Returns:
			str: The model's reply text (may be empty).

		Raises:
			LLMAppError: If the provider call fails.
		"""
		...
