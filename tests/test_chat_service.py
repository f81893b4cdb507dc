"""Unit tests for ChatService and prompt helpers."""

from unittest.mock import AsyncMock, patch

import pytest

from talktime.core.errors import LLMAppError, ValidationAppError
from talktime.schemas.chat import ChatMessage, ChatRequest
from talktime.services.chat_service import (
    FALLBACK_REPLY,
    GENERATION_OPTIONS,
    ChatService,
    build_system_prompt,
    trim_context,
)


class TestBuildSystemPrompt:
    """System prompt selection by learner profile."""

    def test_conversation_prompt_uses_partner_persona(self) -> None:
        prompt = build_system_prompt("adult")

        assert "conversation partner named TalkTime" in prompt
        assert "Age Group: Adult" in prompt

    @pytest.mark.parametrize(
        ("age_group", "marker"),
        [
            ("elementary", "Age Group: Elementary (9-12 years)"),
            ("middle", "Age Group: Middle School (13-15 years)"),
            ("high", "Age Group: High School+ (16+ years)"),
        ],
    )
    def test_conversation_prompt_age_sections(self, age_group: str, marker: str) -> None:
        assert marker in build_system_prompt(age_group, "conversation")

    def test_unknown_age_group_falls_back_to_adult(self) -> None:
        assert build_system_prompt("toddler") == build_system_prompt("adult")

    def test_learning_mode_uses_tutor_prompt(self) -> None:
        prompt = build_system_prompt("elementary", "learning")

        assert "expert English language tutor" in prompt
        assert "Language Note" in prompt
        assert "Use very simple explanations" in prompt
        assert "conversation partner named TalkTime" not in prompt


class TestTrimContext:
    def test_keeps_most_recent_turns(self) -> None:
        context = [{"role": "user", "content": str(i)} for i in range(15)]

        trimmed = trim_context(context, 10)

        assert len(trimmed) == 10
        assert trimmed[0]["content"] == "5"
        assert trimmed[-1]["content"] == "14"

    def test_zero_drops_history(self) -> None:
        assert trim_context([{"role": "user", "content": "hi"}], 0) == []


class TestChatService:
    @pytest.mark.asyncio
    async def test_reply_builds_messages_and_returns_response(self, stub_llm) -> None:
        service = ChatService(llm=stub_llm)
        request = ChatRequest(
            message="I went hiking yesterday",
            context=[
                ChatMessage(role="assistant", content="Hi! What did you do this weekend?"),
            ],
            age_group="high",
        )

        response = await service.reply(request)

        assert response.reply == stub_llm.reply
        assert response.conversation_id
        call = stub_llm.calls[0]
        messages = call["messages"]
        assert messages[0]["role"] == "system"
        assert "High School+" in messages[0]["content"]
        assert messages[1] == {"role": "assistant", "content": "Hi! What did you do this weekend?"}
        assert messages[-1] == {"role": "user", "content": "I went hiking yesterday"}
        for option, value in GENERATION_OPTIONS.items():
            assert call[option] == value

    @pytest.mark.asyncio
    async def test_context_is_trimmed(self, stub_llm) -> None:
        service = ChatService(llm=stub_llm)
        context = [ChatMessage(role="user", content=f"turn {i}") for i in range(12)]

        await service.reply(ChatRequest(message="hello", context=context))

        messages = stub_llm.calls[0]["messages"]
        assert len(messages) == 12
        assert messages[1]["content"] == "turn 2"

    @pytest.mark.asyncio
    async def test_each_reply_gets_new_conversation_id(self, stub_llm) -> None:
        service = ChatService(llm=stub_llm)

        first = await service.reply(ChatRequest(message="hello"))
        second = await service.reply(ChatRequest(message="hello"))

        assert first.conversation_id != second.conversation_id

    @pytest.mark.asyncio
    async def test_empty_model_reply_uses_fallback(self, stub_llm) -> None:
        stub_llm.reply = ""
        service = ChatService(llm=stub_llm)

        response = await service.reply(ChatRequest(message="hello"))

        assert response.reply == FALLBACK_REPLY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   "])
    async def test_blank_message_rejected(self, stub_llm, message: str) -> None:
        service = ChatService(llm=stub_llm)

        with pytest.raises(ValidationAppError) as exc_info:
            await service.reply(ChatRequest(message=message))

        assert exc_info.value.code == "message_required"
        assert stub_llm.calls == []

    @pytest.mark.asyncio
    async def test_oversized_message_rejected(self, stub_llm) -> None:
        service = ChatService(llm=stub_llm)

        with pytest.raises(ValidationAppError) as exc_info:
            await service.reply(ChatRequest(message="a" * 1001))

        assert exc_info.value.code == "message_too_long"
        assert exc_info.value.details == {"max_value": 1000, "actual_value": 1001}

    @pytest.mark.asyncio
    async def test_message_limit_follows_settings(self, stub_llm) -> None:
        service = ChatService(llm=stub_llm)

        with patch("talktime.services.chat_service.settings") as mock_settings:
            mock_settings.app.max_message_chars = 5
            mock_settings.app.max_context_messages = 10
            with pytest.raises(ValidationAppError):
                await service.reply(ChatRequest(message="too long"))

    @pytest.mark.asyncio
    async def test_llm_errors_propagate(self) -> None:
        llm = AsyncMock()
        llm.generate_reply.side_effect = LLMAppError(code="llm_request_failed", message="AI service error")
        service = ChatService(llm=llm)

        with pytest.raises(LLMAppError):
            await service.reply(ChatRequest(message="hello"))
