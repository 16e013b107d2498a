"""
PRD Coach Backend — Configuration Tests

Fail-fast settings loading, error codes, structured log format, rate-limit setup.
"""

import re

import pytest

from prdcoach.config import ConfigurationError, generate_error_code, load_settings, log
from prdcoach.deps import configure_rate_limit, current_rate_limit, limiter


class TestLoadSettings:
    """Tests for load_settings."""

    def test_loads_from_environment(self):
        settings = load_settings(_env_file=None)
        assert settings.ai_gateway_api_key == "test-gateway-key"
        assert settings.feedback_model == "google/gemini-2.5-flash"
        assert settings.outline_model == "google/gemini-2.5-flash"

    def test_missing_api_key_is_fatal(self, monkeypatch):
        monkeypatch.delenv("AI_GATEWAY_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="ai_gateway_api_key"):
            load_settings(_env_file=None)

    def test_empty_api_key_is_fatal(self, monkeypatch):
        monkeypatch.setenv("AI_GATEWAY_API_KEY", "")
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None)

    def test_create_app_refuses_to_start_without_key(self, monkeypatch):
        from prdcoach.main import create_app

        monkeypatch.delenv("AI_GATEWAY_API_KEY", raising=False)
        monkeypatch.chdir("/")  # keep any local .env out of the way
        with pytest.raises(ConfigurationError):
            create_app()

    def test_overrides(self):
        settings = load_settings(_env_file=None, rate_limit="5/minute", client_token="abc")
        assert settings.rate_limit == "5/minute"
        assert settings.client_token == "abc"


class TestLogging:
    """Tests for generate_error_code and log."""

    def test_error_code_format(self):
        assert re.fullmatch(r"PC-[0-9A-F]{6}", generate_error_code())

    def test_error_codes_differ(self):
        assert len({generate_error_code() for _ in range(20)}) > 1

    def test_log_line_format(self, capsys):
        log("INFO", "feedback requested", section="Scope", request_id="abc")

        out = capsys.readouterr().out.strip()
        assert re.match(r"^\[.+\] \[INFO\] feedback requested \| section=Scope request_id=abc$", out)


class TestRateLimitConfig:
    """The slowapi limiter is shared by every app in the process."""

    @pytest.fixture(autouse=True)
    def restore_limiter(self):
        previous = (current_rate_limit(), limiter.enabled)
        yield
        configure_rate_limit(*previous)

    def test_last_configuration_wins(self):
        configure_rate_limit("5/minute", True)
        configure_rate_limit("10/minute", False)

        assert current_rate_limit() == "10/minute"
        assert limiter.enabled is False

    def test_changing_limit_is_logged(self, capsys):
        configure_rate_limit("5/minute", False)
        capsys.readouterr()

        configure_rate_limit("7/minute", False)

        out = capsys.readouterr().out
        assert "[WARN] rate limit reconfigured for every app in this process" in out
        assert "previous=5/minute" in out
        assert "limit=7/minute" in out

    def test_same_configuration_is_silent(self, capsys):
        configure_rate_limit("5/minute", False)
        capsys.readouterr()

        configure_rate_limit("5/minute", False)

        assert "reconfigured" not in capsys.readouterr().out
