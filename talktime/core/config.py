"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
- TESTING=true skips .env loading entirely so tests only see os.environ
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Production might inject via env vars only
_env_file = str(_env_path) if _env_path.is_file() else None
_testing = os.getenv("TESTING", "").lower() == "true"


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file and not _testing:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment.

    Static type checkers treat BaseSettings fields as constructor arguments,
    which is not how BaseSettings is intended to be used.
    """

    return LLMSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class LLMSettings(BaseSettings):
    """Conversation model configuration.

    A missing api_key does not fail startup: the chat endpoint answers 503
    until a key is configured.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (only 'openai' is supported)",
    )
    model: str = Field(
        "gpt-4-turbo-preview",
        description="Chat model used for the conversation partner",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (e.g., an OpenAI-compatible proxy)",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )
    admin_api_keys: str | None = Field(
        None,
        description="Comma-separated operator keys for /v1/admin routes (admin routes are not mounted when unset)",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-caller rate limiting on chat endpoints",
    )
    rate_limit_requests: int = Field(
        10,
        description="Maximum number of admitted requests per window (per caller)",
        ge=1,
    )
    rate_limit_window_ms: int = Field(
        60000,
        description="Sliding window length in milliseconds",
        ge=1,
    )
    rate_limit_max_identifiers: int = Field(
        10000,
        description="Upper bound on tracked callers; least recently seen are evicted (0 for unbounded)",
        ge=0,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_fail_open: bool = Field(
        True,
        description="Admit requests when the limiter backend is unavailable (false denies with 503)",
    )

    max_message_chars: int = Field(
        1000,
        description="Maximum length of a single user chat message",
        ge=1,
    )
    max_context_messages: int = Field(
        10,
        description="Number of trailing context messages forwarded to the model",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Composed from domain-specific settings; raises validation errors on
    startup if any value is malformed.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
