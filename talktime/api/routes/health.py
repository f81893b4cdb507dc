from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check used by load balancers and monitoring.

    Returns:
        dict: ``status`` plus whether the conversation model is configured.
    """

    return {
        "status": "ok",
        "chat_configured": request.app.state.chat_service is not None,
    }
