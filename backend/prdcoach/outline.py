"""
PRD Coach Backend — Custom Outline Parsing

OutlineParser turns a free-form outline into section descriptors. It is best
effort: every failure is logged and degrades to an empty list.
"""

from pydantic import ValidationError

from prdcoach.config import LLM_CONFIG, Settings, generate_error_code, log
from prdcoach.llm import (
    CompletionGateway,
    MalformedUpstreamContent,
    UpstreamError,
    extract_json_object,
    iter_json_objects,
)
from prdcoach.models import OutlineSections
from prdcoach.prompts import build_outline_prompt


def parse_sections_reply(raw: str) -> list[dict]:
    """
    Extract and validate the sections array from a model reply.

    Candidates are tried in extraction order; the first one that matches
    OutlineSections wins.

    Raises:
        MalformedUpstreamContent: No JSON object, or none matches OutlineSections.
    """
    extract_json_object(raw)

    first_error: ValidationError | None = None
    for candidate in iter_json_objects(raw):
        try:
            outline = OutlineSections.model_validate(candidate)
        except ValidationError as e:
            first_error = first_error or e
            continue
        return [section.model_dump() for section in outline.sections]

    raise MalformedUpstreamContent(raw, f"schema mismatch: {str(first_error)[:300]}") from first_error


class OutlineParser:
    def __init__(self, gateway: CompletionGateway, settings: Settings):
        self.gateway = gateway
        self.model = settings.outline_model

    async def parse_outline(self, custom_outline: str | None, request_id: str | None = None) -> list[dict]:
        """
        Return the sections described by custom_outline, or [] on any failure.

        Blank input short-circuits without an upstream call.
        """
        if not custom_outline or not custom_outline.strip():
            return []

        log("INFO", "parsing custom outline", request_id=request_id, outline_length=len(custom_outline))
        messages = build_outline_prompt(custom_outline)

        try:
            raw = await self.gateway.complete(
                messages,
                self.model,
                max_completion_tokens=LLM_CONFIG["outline"]["max_completion_tokens"],
                request_id=request_id,
            )
        except UpstreamError as e:
            log(
                "ERROR",
                "outline parsing upstream failure",
                request_id=request_id,
                status=e.status_code,
                body=e.body[:300],
                error_code=generate_error_code(),
            )
            return []

        try:
            sections = parse_sections_reply(raw)
        except MalformedUpstreamContent as e:
            log(
                "ERROR",
                "outline reply could not be parsed",
                request_id=request_id,
                reason=e.reason,
                raw_output=raw[:500] + "..." if len(raw) > 500 else raw,
                error_code=generate_error_code(),
            )
            return []

        log("INFO", "outline parsed", request_id=request_id, section_count=len(sections))
        return sections
