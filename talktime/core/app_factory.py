"""Application factory for the TalkTime API.

Builds the app and its per-application dependencies. The rate limiter and
chat service live on ``app.state`` so each app instance (and each test) owns
its own quota pool instead of sharing a module-level singleton.
"""

from __future__ import annotations

from fastapi import FastAPI

from talktime.adapters.llm.base import AbstractLLMClient
from talktime.adapters.llm.factory import create_llm_client
from talktime.adapters.rate_limit.base import AbstractRateLimiter
from talktime.api.routes import admin_router, chat_router, health_router
from talktime.core.auth import admin_keys_configured
from talktime.core.config import settings
from talktime.core.exception_handlers import setup_exception_handlers
from talktime.core.logging import configure_logging
from talktime.core.middleware import request_id_middleware
from talktime.core.openapi import apply_openapi_customizations
from talktime.core.rate_limit import build_rate_limiter
from talktime.services.chat_service import ChatService

_UNSET = object()


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    llm_client: AbstractLLMClient | None | object = _UNSET,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to use; built from settings when omitted.
        llm_client: Chat model client; built from settings when omitted.
            Pass None explicitly to run without a model (chat answers 503).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    configure_logging(settings.log)

    app = FastAPI(
        title="TalkTime API",
        description=(
            "Spoken English practice with an AI conversation partner. "
            "Requires X-API-Key; chat requests are rate limited per caller "
            "with an exact sliding window."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    if llm_client is _UNSET:
        llm_client = create_llm_client(settings.llm)

    if rate_limiter is None:
        rate_limiter = build_rate_limiter(settings.app)

    app.state.rate_limiter = rate_limiter
    app.state.chat_service = ChatService(llm=llm_client) if llm_client is not None else None

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(chat_router, prefix="/v1")
    # Admin routes exist only when an operator key can reach them
    if admin_keys_configured():
        app.include_router(admin_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
