from typing import Annotated

from fastapi import APIRouter, Depends, Request

from talktime.core.auth import verify_api_key
from talktime.core.errors import ServiceUnavailableAppError
from talktime.core.rate_limit import enforce_rate_limit
from talktime.schemas.chat import ChatRequest, ChatResponse
from talktime.services.chat_service import ChatService

router = APIRouter(tags=["Chat"])


def get_chat_service(request: Request) -> ChatService:
    """Return the application's chat service.

    Raises:
        ServiceUnavailableAppError: If no LLM API key is configured.
    """
    service: ChatService | None = request.app.state.chat_service
    if service is None:
        raise ServiceUnavailableAppError(
            code="ai_service_not_configured",
            message="AI service not configured. Please add your OpenAI API key (LLM_API_KEY).",
        )
    return service


@router.post(
    "/chat",
    response_model=ChatResponse,
    dependencies=[Depends(verify_api_key), Depends(enforce_rate_limit)],
)
async def chat(
    payload: ChatRequest,
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatResponse:
    """Send the learner's message to the conversation partner.

    Returns:
        ChatResponse: The partner's reply and a conversation id.

    Raises:
        ValidationAppError: 400 for empty or oversized messages.
        LLMAppError: 502 when the model call fails.
        ServiceUnavailableAppError: 503 when no model is configured.
    """
    return await service.reply(payload)
