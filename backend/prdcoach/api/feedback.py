"""
PRD Coach Backend — Feedback API (POST /api/prd-feedback)

Relays a PRD section to the AI gateway and returns its feedback. Upstream
429/402 are passed through with friendly messages; everything else is a 500.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from prdcoach.auth import require_client_token
from prdcoach.config import generate_error_code, log
from prdcoach.deps import current_rate_limit, get_feedback_relay, limiter
from prdcoach.feedback import FeedbackRelay
from prdcoach.llm import UpstreamError, UpstreamQuotaExhausted, UpstreamRateLimited
from prdcoach.models import FeedbackRequest, FeedbackResponse

router = APIRouter(prefix="/api", tags=["feedback"], dependencies=[Depends(require_client_token)])

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again in a moment."
QUOTA_EXHAUSTED_MESSAGE = "AI credits depleted. Please add credits to continue."
GENERIC_FAILURE_MESSAGE = "Failed to get AI response"


@router.post("/prd-feedback", response_model=FeedbackResponse)
@limiter.limit(current_rate_limit)
async def prd_feedback(
    body: FeedbackRequest,
    request: Request,
    relay: FeedbackRelay = Depends(get_feedback_relay),
):
    """
    POST /api/prd-feedback

    Body: { section, content, ideaContext }
    Returns: { feedback } | 429/402/500 { error }
    """
    request_id = request.headers.get("X-Request-Id")
    try:
        feedback = await relay.generate_feedback(
            body.section,
            body.content,
            body.idea_context,
            request_id=request_id,
        )
    except UpstreamRateLimited:
        log("WARN", "feedback rate limited upstream", request_id=request_id, section=body.section)
        return JSONResponse(status_code=429, content={"error": RATE_LIMITED_MESSAGE})
    except UpstreamQuotaExhausted:
        log("WARN", "feedback quota exhausted upstream", request_id=request_id, section=body.section)
        return JSONResponse(status_code=402, content={"error": QUOTA_EXHAUSTED_MESSAGE})
    except UpstreamError as e:
        code = generate_error_code()
        log(
            "ERROR",
            "feedback generation failed",
            request_id=request_id,
            status=e.status_code,
            body=e.body[:300],
            error_code=code,
        )
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE})
    except Exception as e:
        code = generate_error_code()
        log("ERROR", "feedback generation crashed", request_id=request_id, error=str(e), error_code=code)
        return JSONResponse(status_code=500, content={"error": str(e) or GENERIC_FAILURE_MESSAGE})

    return FeedbackResponse(feedback=feedback)
