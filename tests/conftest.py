"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that builds settings, and
TESTING=true keeps .env files out of the picture.
"""

import os

os.environ["TESTING"] = "true"

os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("APP_ADMIN_API_KEYS", "test-admin-key")

from typing import Any  # noqa: E402

import pytest  # noqa: E402

from talktime.adapters.llm.base import AbstractLLMClient  # noqa: E402


class StubLLMClient(AbstractLLMClient):
    """LLM client returning a canned reply and recording each call."""

    def __init__(self, reply: str = "That sounds fun! What do you like most about it?") -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []

    async def generate_reply(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        self.calls.append({"messages": messages, **kwargs})
        return self.reply


@pytest.fixture
def stub_llm() -> StubLLMClient:
    return StubLLMClient()


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}


@pytest.fixture
def admin_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-admin-key"}
