"""
PRD Coach Backend — FastAPI Application Factory

App creation, middleware (CORS, rate limiting, request ID logging), router registration.
Run with: uvicorn prdcoach.main:app --reload
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from prdcoach.api import feedback, outline, sections
from prdcoach.config import Settings, generate_error_code, load_settings, log
from prdcoach.deps import configure_rate_limit, limiter
from prdcoach.feedback import FeedbackRelay
from prdcoach.llm import CompletionGateway
from prdcoach.outline import OutlineParser

VERSION = "0.1.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


# Routes whose error bodies always carry an empty sections list.
SECTIONS_ERROR_PATHS = {"/api/parse-outline"}


def describe_validation_error(exc: RequestValidationError) -> str:
    """One-line summary of a request validation failure, e.g. 'customOutline: Input should be a valid string'."""
    parts = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            parts.append("body is not valid JSON")
            continue
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        msg = err.get("msg", "invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "Invalid request body: " + ("; ".join(parts) or "unreadable")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render unreadable or invalid bodies in the {error} shape the frontend reads.

    The outline route keeps its documented 500 {error, sections: []} error path;
    every other route answers 422 {error}.
    """
    message = describe_validation_error(exc)
    log(
        "WARN",
        "invalid request body",
        path=request.url.path,
        request_id=request.headers.get("X-Request-Id"),
        error=message[:300],
        error_code=generate_error_code(),
    )
    if request.url.path in SECTIONS_ERROR_PATHS:
        return JSONResponse(status_code=500, content={"error": message, "sections": []})
    return JSONResponse(status_code=422, content={"error": message})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Log the X-Request-Id header from every incoming request.

    The frontend may include X-Request-Id on each fetch call so REST errors
    can be correlated with backend logs.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id", "none")
        log(
            "INFO",
            "request received",
            method=request.method,
            path=request.url.path,
            request_id=request_id,
        )
        response = await call_next(request)
        return response


class PermissiveCorsMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS with an empty 200 and stamp CORS headers on all responses.

    Browsers call the API from any origin with the bearer token in a header,
    so preflights are answered before routing, whatever their payload.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Steps:
        1. Load settings (fails fast with ConfigurationError on a missing API key)
        2. Build the gateway client and the two handlers, store them on app.state
        3. Add request ID logging and CORS middleware
        4. Configure rate limiting (slowapi) and the {error} body for invalid requests
        5. Register routers (feedback, outline, sections)
        6. Return the app
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="PRD Coach API",
        version=VERSION,
        description="Guided PRD authoring: AI section feedback and custom outline parsing.",
    )

    gateway = CompletionGateway(settings)
    app.state.settings = settings
    app.state.feedback_relay = FeedbackRelay(gateway, settings)
    app.state.outline_parser = OutlineParser(gateway, settings)

    # Request ID logging
    app.add_middleware(RequestIdMiddleware)
    # CORS (outermost, so every response gets the headers)
    app.add_middleware(PermissiveCorsMiddleware)

    # Rate limiting (applied per-endpoint via decorator, not globally)
    configure_rate_limit(settings.rate_limit, settings.rate_limit_enabled)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Routers
    app.include_router(feedback.router)
    app.include_router(outline.router)
    app.include_router(sections.router)

    @app.get("/api/health")
    async def health_check():
        """
        GET /api/health

        Returns: { "status": "ok", "version": "0.1.0" }
        """
        return {"status": "ok", "version": VERSION}

    log("INFO", "app created", environment=settings.environment, gateway=settings.ai_gateway_base_url)
    return app


app = create_app()
