"""
PRD Coach Backend — Central Configuration

All environment variables and LLM settings live here.
Import `load_settings`, `LLM_CONFIG`, `log`, and `generate_error_code` from this module.
Do not read `os.environ` anywhere else.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """Required configuration is missing or invalid. The app must not start."""

    pass


class Settings(BaseSettings):
    """All environment variables. Loaded from .env or the host's env vars."""

    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_api_key: str = Field(..., min_length=1)
    ai_gateway_base_url: str = "https://ai.gateway.lovable.dev/v1"
    feedback_model: str = "google/gemini-2.5-flash"
    outline_model: str = "google/gemini-2.5-flash"
    llm_timeout_seconds: Optional[float] = None  # None = client default

    # Static bearer token expected from the frontend. Empty disables the check.
    client_token: str = ""

    # Rate limiting (slowapi syntax)
    rate_limit: str = "30/minute"
    rate_limit_enabled: bool = True

    # App
    environment: str = "development"  # "development" | "production" | "test"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def load_settings(**overrides) -> Settings:
    """Build Settings once at startup, failing fast on missing credentials.

    Raises:
        ConfigurationError: If AI_GATEWAY_API_KEY is absent/empty or any
            setting fails validation.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(f"Invalid configuration: {fields}") from e


# ──────────────────────────────────────────────────────
# Logging Utilities (structured print)
# ──────────────────────────────────────────────────────

def generate_error_code() -> str:
    """Generate a short, user-friendly error reference code.

    Format: 'PC-' followed by 6 uppercase hex characters.
    Example: 'PC-3F8A2C'

    The same code is logged on the backend for every failed upstream call,
    so a failure reported by a user can be found by grepping the logs.
    """
    return f"PC-{uuid.uuid4().hex[:6].upper()}"


def log(level: str, message: str, **context) -> None:
    """Structured print-based logger.

    Every log line follows the format:
        [ISO_TIMESTAMP] [LEVEL] message | key1=value1 key2=value2

    Args:
        level: One of "INFO", "WARN", "ERROR".
        message: Human-readable description of what happened.
        **context: Arbitrary key-value pairs. Include request_id when available.

    Usage:
        log("INFO", "feedback requested", section="Problem Statement")
        log("ERROR", "llm call failed", model="google/gemini-2.5-flash",
            error_code="PC-3F8A2C", error=str(e))
    """
    ts = datetime.now(timezone.utc).isoformat()
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    print(f"[{ts}] [{level}] {message} | {ctx}", flush=True)


# ──────────────────────────────────────────────────────
# LLM Configuration
# ──────────────────────────────────────────────────────

LLM_CONFIG = {
    "feedback": {
        "temperature": 0.7,  # moderately creative; no token cap
    },
    "outline": {
        "max_completion_tokens": 2000,
    },
}
