"""Conversation service for the TalkTime speaking partner.

Turns a learner's message and recent history into a chat completion request:
- input validation (non-empty, bounded length)
- system prompt selection by age group and mode
- trimming history to the most recent turns
- fallback reply when the model returns nothing
"""

import logging
import uuid

from talktime.adapters.llm.base import AbstractLLMClient
from talktime.core.config import settings
from talktime.core.errors import ValidationAppError
from talktime.schemas.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I didn't quite catch that. Could you tell me more?"

# Sampling tuned for lively, non-repetitive small talk
GENERATION_OPTIONS = {
    "temperature": 0.8,
    "max_tokens": 400,
    "presence_penalty": 0.6,
    "frequency_penalty": 0.3,
}

CONVERSATION_PROMPT = """You are a friendly, patient English conversation partner named TalkTime. Your goal is to help students practice speaking English through natural, engaging conversations.

Core Guidelines:
- Be genuinely curious and interested in what the student shares
- Respond naturally - mix questions with statements, reactions, and your own thoughts
- Keep the conversation flowing naturally, don't interrogate
- Celebrate their effort to speak English, not perfection
- Never correct grammar or pronunciation unless asked
- Keep responses concise (2-3 sentences usually)
- Be encouraging and supportive

Conversation Style:
- React with genuine interest: "Oh wow!", "That's fascinating!", "I had no idea!"
- Share related thoughts: "That reminds me of...", "I've always wondered about..."
- Ask follow-up questions only when natural, not constantly
- Sometimes just acknowledge and build on what they said
- Use simple, clear language appropriate for English learners

Content Safety:
- If inappropriate topics come up, gently redirect: "That's interesting! Speaking of [related safe topic]..."
- Keep conversations positive and age-appropriate
- Focus on everyday topics: hobbies, school, family, dreams, favorite things"""

CONVERSATION_AGE_SECTIONS = {
    "elementary": """
Age Group: Elementary (9-12 years)
- Use simple vocabulary and short sentences
- Be extra enthusiastic and playful
- Topics: school, friends, pets, games, favorite foods, family activities
- Example: "Wow, you have a pet hamster? That's so cool! What's the funniest thing your hamster does?\"""",
    "middle": """
Age Group: Middle School (13-15 years)
- Use everyday vocabulary with some variety
- Be relatable and understanding
- Topics: friends, hobbies, music, sports, school subjects, weekend plans
- Example: "Oh, you like playing basketball! I bet that's exciting. Do you play with friends or on a team?\"""",
    "high": """
Age Group: High School+ (16+ years)
- Use natural, conversational vocabulary
- Be respectful and treat as an equal
- Topics: interests, goals, current events (safe ones), college plans, hobbies
- Example: "That's an interesting perspective on social media. How do you balance online time with other activities?\"""",
    "adult": """
Age Group: Adult
- Use full vocabulary range appropriately
- Professional but friendly tone
- Topics: work, travel, culture, hobbies, life experiences, goals
- Example: "Working remotely has really changed things, hasn't it? What's been the biggest adjustment for you?\"""",
}

LEARNING_PROMPT = """You are an expert English language tutor. Your role is to help students improve their English through conversation while providing gentle corrections and explanations.

For each user message:
1. First, acknowledge what they said naturally and continue the conversation
2. If there are any grammar, vocabulary, or pronunciation issues, gently correct them
3. Explain WHY the correction is needed (briefly)
4. Provide the corrected version
5. Continue the conversation naturally

Format your response like this:
[Natural conversational response to what they said]

📝 Language Note:
- Original: "[their incorrect phrase]"
- Correct: "[corrected phrase]"
- Why: [Brief explanation]

[Continue the conversation with a follow-up question or comment]

Important:
- Be encouraging and supportive
- Focus on major errors, not minor ones
- Keep corrections brief and clear
- Maintain a natural conversation flow
- Track common error patterns for the session summary"""

LEARNING_AGE_SECTIONS = {
    "elementary": """
- Use very simple explanations
- Focus only on basic errors
- Be extra encouraging""",
    "middle": """
- Use clear, straightforward explanations
- Focus on common grammar mistakes
- Balance correction with encouragement""",
    "high": """
- Provide more detailed explanations
- Include advanced grammar points
- Challenge them appropriately""",
    "adult": """
- Provide comprehensive explanations
- Include nuanced language points
- Treat as an equal learner""",
}


def build_system_prompt(age_group: str, mode: str = "conversation") -> str:
    """Build the system prompt for a learner profile.

    Unknown age groups fall back to the adult section.

    Args:
        age_group: One of elementary, middle, high, adult.
        mode: "learning" for the tutor persona, anything else for free conversation.

    Returns:
        The full system prompt.
    """
    if mode == "learning":
        return LEARNING_PROMPT + LEARNING_AGE_SECTIONS.get(age_group, LEARNING_AGE_SECTIONS["adult"])
    return CONVERSATION_PROMPT + CONVERSATION_AGE_SECTIONS.get(
        age_group, CONVERSATION_AGE_SECTIONS["adult"]
    )


def trim_context(context: list[dict[str, str]], max_messages: int) -> list[dict[str, str]]:
    """Keep only the ``max_messages`` most recent turns."""
    if max_messages <= 0:
        return []
    return context[-max_messages:]


class ChatService:
    """Produces conversation partner replies through an LLM client.

    Attributes:
        llm: Chat model adapter.
    """

    def __init__(self, llm: AbstractLLMClient) -> None:
        self.llm = llm

    def _validate_message(self, message: str) -> None:
        """Reject blank or oversized learner messages.

        Raises:
            ValidationAppError: If the message is empty or too long.
        """
        if not message or not message.strip():
            raise ValidationAppError(
                code="message_required",
                message="Message is required",
            )

        max_chars = settings.app.max_message_chars
        if len(message) > max_chars:
            raise ValidationAppError(
                code="message_too_long",
                message="Message is too long",
                details={"max_value": max_chars, "actual_value": len(message)},
            )

    def build_messages(self, request: ChatRequest) -> list[dict[str, str]]:
        """Assemble system prompt, trimmed history and the new user turn."""
        history = trim_context(
            [turn.model_dump() for turn in request.context],
            settings.app.max_context_messages,
        )
        return [
            {"role": "system", "content": build_system_prompt(request.age_group, request.mode)},
            *history,
            {"role": "user", "content": request.message},
        ]

    async def reply(self, request: ChatRequest) -> ChatResponse:
        """Generate the partner's next turn.

        Args:
            request: Learner message, history and profile.

        Returns:
            ChatResponse with reply text and a fresh conversation id.

        Raises:
            ValidationAppError: If the message is empty or too long.
            LLMAppError: If the model call fails.
        """
        self._validate_message(request.message)

        messages = self.build_messages(request)
        reply = await self.llm.generate_reply(messages, **GENERATION_OPTIONS)
        if not reply:
            reply = FALLBACK_REPLY

        # Metadata only; conversation text stays out of the logs
        logger.info(
            "chat.completed",
            extra={
                "age_group": request.age_group,
                "mode": request.mode,
                "message_length": len(request.message),
                "response_length": len(reply),
                "context_size": len(messages) - 2,
            },
        )

        return ChatResponse(reply=reply, conversation_id=str(uuid.uuid4()))
