from __future__ import annotations

from talktime.api.routes.admin import router as admin_router
from talktime.api.routes.chat import router as chat_router
from talktime.api.routes.health import router as health_router

__all__ = ["admin_router", "chat_router", "health_router"]
