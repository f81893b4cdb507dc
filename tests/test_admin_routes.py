"""Tests for rate limiter administration endpoints."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from talktime.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from talktime.adapters.rate_limit.in_memory import SlidingLogRateLimiter
from talktime.core.app_factory import create_app
from talktime.core.config import settings


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=0)


@pytest.fixture
def limiter(clock: Mock) -> SlidingLogRateLimiter:
    return SlidingLogRateLimiter(window_ms=1000, max_requests=1, clock=clock)


@pytest.fixture
def client(stub_llm, limiter: SlidingLogRateLimiter) -> TestClient:
    return TestClient(create_app(rate_limiter=limiter, llm_client=stub_llm))


def test_reset_unblocks_caller(client: TestClient, api_key_headers, admin_key_headers) -> None:
    client.post("/v1/chat", json={"message": "Hello"}, headers=api_key_headers)
    assert client.post("/v1/chat", json={"message": "Hello"}, headers=api_key_headers).status_code == 429

    response = client.delete(
        "/v1/admin/rate-limit/api_key:test-api-key-123",
        headers=admin_key_headers,
    )

    assert response.status_code == 204
    assert client.post("/v1/chat", json={"message": "Hello"}, headers=api_key_headers).status_code == 200


def test_reset_unknown_identifier_is_noop(client: TestClient, admin_key_headers) -> None:
    response = client.delete("/v1/admin/rate-limit/ip:203.0.113.7", headers=admin_key_headers)

    assert response.status_code == 204


def test_reset_requires_api_key(client: TestClient) -> None:
    response = client.delete("/v1/admin/rate-limit/ip:203.0.113.7")

    assert response.status_code == 403


def test_chat_key_cannot_reset_its_own_quota(client: TestClient, api_key_headers) -> None:
    client.post("/v1/chat", json={"message": "Hello"}, headers=api_key_headers)

    response = client.delete(
        "/v1/admin/rate-limit/api_key:test-api-key-123",
        headers=api_key_headers,
    )

    assert response.status_code == 403
    assert client.post("/v1/chat", json={"message": "Hello"}, headers=api_key_headers).status_code == 429


@pytest.mark.parametrize("chat_key", ["test-api-key-123", "test-api-key-456"])
def test_chat_keys_are_rejected_on_admin_routes(client: TestClient, chat_key: str) -> None:
    headers = {"X-API-Key": chat_key}

    assert client.delete("/v1/admin/rate-limit/ip:203.0.113.7", headers=headers).status_code == 403
    assert client.post("/v1/admin/rate-limit/sweep", headers=headers).status_code == 403


def test_admin_routes_not_mounted_without_admin_keys(
    stub_llm,
    limiter: SlidingLogRateLimiter,
    admin_key_headers,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(settings.app, "admin_api_keys", None)
    client = TestClient(create_app(rate_limiter=limiter, llm_client=stub_llm))

    assert client.delete("/v1/admin/rate-limit/ip:203.0.113.7", headers=admin_key_headers).status_code == 404
    assert client.post("/v1/admin/rate-limit/sweep", headers=admin_key_headers).status_code == 404
    assert "/v1/admin/rate-limit/sweep" not in client.get("/openapi.json").json()["paths"]


def test_sweep_reports_removed_identifiers(
    client: TestClient,
    limiter: SlidingLogRateLimiter,
    clock: Mock,
    admin_key_headers,
) -> None:
    limiter.check_limit("ip:198.51.100.1")
    limiter.check_limit("ip:198.51.100.2")
    clock.return_value = 5000

    response = client.post("/v1/admin/rate-limit/sweep", headers=admin_key_headers)

    assert response.status_code == 200
    assert response.json() == {"removed": 2, "tracked_identifiers": 0}


def test_sweep_unsupported_for_other_limiters(stub_llm, admin_key_headers) -> None:
    class PassThroughLimiter(AbstractRateLimiter):
        def check_limit(self, identifier: str) -> RateLimitResult:
            return RateLimitResult(allowed=True, remaining=1, limit=1)

        def reset(self, identifier: str) -> None:
            return None

    client = TestClient(create_app(rate_limiter=PassThroughLimiter(), llm_client=stub_llm))

    response = client.post("/v1/admin/rate-limit/sweep", headers=admin_key_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "sweep_not_supported"
