"""
PRD Coach Backend — Outline API (POST /api/parse-outline)

Turns a custom outline into section descriptors. Parser failures come back as
an empty list; the error path still carries "sections" for the frontend.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from prdcoach.auth import require_client_token
from prdcoach.config import generate_error_code, log
from prdcoach.deps import current_rate_limit, get_outline_parser, limiter
from prdcoach.models import OutlineRequest, OutlineResponse
from prdcoach.outline import OutlineParser

router = APIRouter(prefix="/api", tags=["outline"], dependencies=[Depends(require_client_token)])


@router.post("/parse-outline", response_model=OutlineResponse)
@limiter.limit(current_rate_limit)
async def parse_outline(
    body: OutlineRequest,
    request: Request,
    parser: OutlineParser = Depends(get_outline_parser),
):
    """
    POST /api/parse-outline

    Body: { customOutline }
    Returns: { sections } (possibly empty) | 500 { error, sections: [] }
    """
    request_id = request.headers.get("X-Request-Id")
    try:
        sections = await parser.parse_outline(body.custom_outline, request_id=request_id)
    except Exception as e:
        code = generate_error_code()
        log("ERROR", "parse-outline crashed", request_id=request_id, error=str(e), error_code=code)
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error", "sections": []})

    return OutlineResponse(sections=sections)
