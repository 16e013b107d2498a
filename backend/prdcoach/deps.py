"""
PRD Coach Backend — Shared Route Dependencies

Rate limiter and accessors for the handlers built in create_app().
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from prdcoach.config import log
from prdcoach.feedback import FeedbackRelay
from prdcoach.outline import OutlineParser

# Rate limiter, per-IP, applied per-endpoint via decorator.
# One limiter per process: slowapi calls the limit provider without the
# request, so every app created here shares the limit string and enabled flag.
limiter = Limiter(key_func=get_remote_address)
_rate_limit: str = "30/minute"
_configured = False


def configure_rate_limit(limit: str, enabled: bool) -> None:
    """
    Set the process-wide limit string and enabled flag from Settings.

    The last create_app() call wins. Changing an already configured value is
    logged, since it also changes the limit of any app created earlier.
    """
    global _rate_limit, _configured
    if _configured and (limit, enabled) != (_rate_limit, limiter.enabled):
        log(
            "WARN",
            "rate limit reconfigured for every app in this process",
            previous=_rate_limit,
            previous_enabled=limiter.enabled,
            limit=limit,
            enabled=enabled,
        )
    _rate_limit = limit
    limiter.enabled = enabled
    _configured = True


def current_rate_limit() -> str:
    """Limit string for @limiter.limit, read per request so create_app() can set it."""
    return _rate_limit


def get_feedback_relay(request: Request) -> FeedbackRelay:
    return request.app.state.feedback_relay


def get_outline_parser(request: Request) -> OutlineParser:
    return request.app.state.outline_parser
