"""Pydantic schemas for the conversation endpoint."""

from typing import Literal

from pydantic import BaseModel, Field

AgeGroup = Literal["elementary", "middle", "high", "adult"]
ChatMode = Literal["conversation", "learning"]


class ChatMessage(BaseModel):
    """A single prior turn in the conversation."""

    role: Literal["user", "assistant", "system"] = Field(
        ...,
        description="Who produced the turn.",
    )
    content: str = Field(
        ...,
        description="Turn text.",
    )


class ChatRequest(BaseModel):
    """A learner's message plus the conversation so far."""

    message: str = Field(
        ...,
        description="What the learner just said (transcribed speech or typed text).",
    )
    context: list[ChatMessage] = Field(
        default_factory=list,
        description="Earlier turns, oldest first. Only the most recent turns are forwarded.",
    )
    age_group: AgeGroup = Field(
        default="adult",
        description="Learner age group; tunes vocabulary, topics and tone.",
    )
    mode: ChatMode = Field(
        default="conversation",
        description="'conversation' for free talk, 'learning' for gentle grammar corrections.",
    )


class ChatResponse(BaseModel):
    """The conversation partner's reply."""

    reply: str = Field(
        ...,
        description="Assistant reply text.",
    )
    conversation_id: str = Field(
        ...,
        description="Identifier for this exchange, for client-side session tracking.",
    )
