"""
PRD Coach Backend — Auth Helpers

The only auth is a static bearer token shared with the frontend. When
CLIENT_TOKEN is unset the check is disabled.
"""

import secrets

from fastapi import HTTPException, Request

from prdcoach.config import log


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_client_token(request: Request) -> None:
    """
    FastAPI dependency: reject requests whose bearer token doesn't match CLIENT_TOKEN.

    Raises:
        HTTPException(401): Token missing or wrong.
    """
    expected = request.app.state.settings.client_token
    if not expected:
        return
    token = _bearer_token(request)
    if token is None or not secrets.compare_digest(token, expected):
        log("WARN", "rejected request with bad client token", path=request.url.path)
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token")
