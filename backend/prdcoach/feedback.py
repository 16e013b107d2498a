"""
PRD Coach Backend — Section Feedback

FeedbackRelay builds the feedback prompt, makes one completion call and relays
the model's text untouched. Upstream errors propagate to the route.
Splitting the text into quoted points is left to the client.
"""

from prdcoach.config import LLM_CONFIG, Settings, log
from prdcoach.llm import CompletionGateway
from prdcoach.models import IdeaContext
from prdcoach.prompts import build_feedback_prompt

FALLBACK_FEEDBACK = "Unable to generate feedback"


class FeedbackRelay:
    def __init__(self, gateway: CompletionGateway, settings: Settings):
        self.gateway = gateway
        self.model = settings.feedback_model

    async def generate_feedback(
        self,
        section: str,
        content: str,
        idea_context: IdeaContext | str,
        request_id: str | None = None,
    ) -> str:
        """
        Return AI feedback text for one PRD section.

        Content is forwarded even when empty; callers are expected to check first.

        Raises:
            UpstreamRateLimited, UpstreamQuotaExhausted, UpstreamError
        """
        log("INFO", "feedback requested", request_id=request_id, section=section, content_length=len(content))
        messages = build_feedback_prompt(section, content, idea_context)
        feedback = await self.gateway.complete(
            messages,
            self.model,
            temperature=LLM_CONFIG["feedback"]["temperature"],
            request_id=request_id,
        )
        if not feedback:
            log("WARN", "feedback reply was empty", request_id=request_id, section=section)
            return FALLBACK_FEEDBACK

        log("INFO", "feedback generated", request_id=request_id, section=section, feedback_length=len(feedback))
        return feedback
