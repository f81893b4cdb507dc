"""LLM adapter layer for the conversation partner."""

from talktime.adapters.llm.base import AbstractLLMClient
from talktime.adapters.llm.factory import create_llm_client
from talktime.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
]
