"""Tests for global exception handlers."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from talktime.core.errors import (
    AppError,
    AuthenticationAppError,
    LLMAppError,
    ServiceUnavailableAppError,
    ValidationAppError,
)
from talktime.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
    status_code_for,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


@pytest.mark.parametrize(
    ("error_type", "expected"),
    [
        (ValidationAppError, 400),
        (AuthenticationAppError, 403),
        (LLMAppError, 502),
        (ServiceUnavailableAppError, 503),
        (AppError, 400),
    ],
)
def test_status_code_mapping(error_type: type[AppError], expected: int) -> None:
    assert status_code_for(error_type(code="x", message="y")) == expected


def test_app_error_response_format(client: TestClient, app_with_handlers: FastAPI) -> None:
    @app_with_handlers.get("/boom")
    async def boom():
        raise ValidationAppError(
            code="message_too_long",
            message="Message is too long",
            details={"max_value": 1000, "actual_value": 1200},
        )

    response = client.get("/boom")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "message_too_long"
    assert error["message"] == "Message is too long"
    assert error["details"] == {"max_value": 1000, "actual_value": 1200}
    assert "request_id" in error


def test_details_omitted_when_absent(client: TestClient, app_with_handlers: FastAPI) -> None:
    @app_with_handlers.get("/unavailable")
    async def unavailable():
        raise ServiceUnavailableAppError(code="ai_service_not_configured", message="AI service not configured")

    response = client.get("/unavailable")

    assert response.status_code == 503
    assert "details" not in response.json()["error"]


def test_general_handler_never_leaks_exception_text() -> None:
    request = AsyncMock()
    request.url.path = "/v1/chat"
    request.method = "POST"

    response = asyncio.run(general_exception_handler(request, ValueError("db password=hunter2")))

    data = json.loads(bytes(response.body).decode())
    assert response.status_code == 500
    assert data["error"]["code"] == "internal_server_error"
    assert "hunter2" not in response.body.decode()
    assert "ValueError" not in response.body.decode()


def test_setup_registers_handlers(app_with_handlers: FastAPI) -> None:
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers


def test_app_error_str_is_message() -> None:
    error = LLMAppError(code="llm_request_failed", message="AI service error")

    assert str(error) == "AI service error"
