"""
PRD Coach Backend — Shared Test Fixtures

Provides mocked versions of the AI gateway (litellm) for deterministic,
fast unit tests, plus an ASGI test client.
"""

import json
import os
import sys
from dataclasses import dataclass
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient, ASGITransport

# Ensure prdcoach module is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


# -----------------------------------------------------------------------------
# Environment Setup (before importing app modules)
# -----------------------------------------------------------------------------

os.environ.setdefault("AI_GATEWAY_API_KEY", "test-gateway-key")
os.environ.setdefault("AI_GATEWAY_BASE_URL", "https://gateway.test/v1")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CLIENT_TOKEN", "")


# -----------------------------------------------------------------------------
# Mock Response Classes
# -----------------------------------------------------------------------------


@dataclass
class MockLLMMessage:
    """Mock message from LLM response."""
    content: Optional[str]


@dataclass
class MockLLMChoice:
    """Mock choice from LLM response."""
    message: MockLLMMessage


@dataclass
class MockLLMUsage:
    """Mock usage stats from LLM response."""
    total_tokens: int = 100
    prompt_tokens: int = 50
    completion_tokens: int = 50


@dataclass
class MockLLMResponse:
    """Mock LLM completion response."""
    choices: list[MockLLMChoice]
    usage: MockLLMUsage = None

    def __post_init__(self):
        if self.usage is None:
            self.usage = MockLLMUsage()


def create_mock_llm_response(content: Optional[str]) -> MockLLMResponse:
    """Create a mock LLM response with given content."""
    return MockLLMResponse(
        choices=[MockLLMChoice(message=MockLLMMessage(content=content))]
    )


class FakeStatusError(Exception):
    """Stands in for a litellm/OpenAI API error carrying an HTTP status."""

    def __init__(self, status_code: int, message: str = "upstream error"):
        self.status_code = status_code
        super().__init__(message)


# -----------------------------------------------------------------------------
# Mock Data Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def idea_context() -> dict:
    """Full idea context as the frontend sends it."""
    return {
        "productIdea": "Multi-channel inventory sync for small retailers",
        "persona": "Small business owner",
        "company": "Shopify",
        "jobDescription": "Senior Product Manager",
        "customOutline": "",
        "purpose": "recruiting",
    }


@pytest.fixture
def parsed_sections() -> dict:
    """Sample outline-parsing reply payload."""
    return {
        "sections": [
            {
                "id": "executive-summary",
                "title": "Executive Summary",
                "description": "Summarize the product in a paragraph.",
                "placeholder": "In one paragraph, describe...",
                "example": "",
                "links": [],
            },
            {
                "id": "risks",
                "title": "Risks",
                "description": "List what could go wrong.",
                "placeholder": "Key risks include...",
                "example": "",
                "links": [],
            },
        ]
    }


# -----------------------------------------------------------------------------
# LLM Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_llm(monkeypatch):
    """
    Mock litellm.acompletion to return predictable responses.

    Returns the mock so tests can customize responses and inspect calls.
    """
    mock = AsyncMock(return_value=create_mock_llm_response("Looks good overall."))
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


@pytest.fixture
def mock_llm_with_content(monkeypatch):
    """
    Factory fixture to mock LLM with a specific reply text.

    Usage:
        def test_example(mock_llm_with_content):
            mock = mock_llm_with_content('{"sections": []}')
    """
    def _create_mock(content):
        if isinstance(content, dict):
            content = json.dumps(content)
        mock = AsyncMock(return_value=create_mock_llm_response(content))
        monkeypatch.setattr("litellm.acompletion", mock)
        return mock

    return _create_mock


@pytest.fixture
def mock_llm_status_error(monkeypatch):
    """Factory fixture: make litellm.acompletion raise an error with an HTTP status."""
    def _create_mock(status_code: int, message: str = "upstream error"):
        mock = AsyncMock(side_effect=FakeStatusError(status_code, message))
        monkeypatch.setattr("litellm.acompletion", mock)
        return mock

    return _create_mock


@pytest.fixture
def mock_llm_transport_failure(monkeypatch):
    """Mock LLM to fail before any HTTP status is received."""
    mock = AsyncMock(side_effect=ConnectionError("connection reset by peer"))
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


# -----------------------------------------------------------------------------
# Settings & Handler Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings built from the test environment."""
    from prdcoach.config import load_settings
    return load_settings(_env_file=None)


@pytest.fixture
def gateway(settings):
    from prdcoach.llm import CompletionGateway
    return CompletionGateway(settings)


# -----------------------------------------------------------------------------
# HTTP Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
async def client():
    """Async HTTP client for testing FastAPI endpoints."""
    from prdcoach.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def create_test_client(app=None):
    """Create a test client for use in tests that need manual client creation."""
    if app is None:
        from prdcoach.main import app
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")
