"""
PRD Coach Backend — Sections API (GET /api/sections, POST /api/prd/export)

Serves the built-in outline and renders drafts into a Markdown PRD.
"""

from fastapi import APIRouter

from prdcoach.config import log
from prdcoach.models import ExportRequest, ExportResponse, SectionsResponse
from prdcoach.sections import ProgressState, default_sections, render_markdown

router = APIRouter(prefix="/api", tags=["sections"])


@router.get("/sections", response_model=SectionsResponse)
async def list_sections() -> SectionsResponse:
    """
    GET /api/sections

    Returns: { sections }, the default PRD outline with examples and links.
    """
    return SectionsResponse(sections=default_sections())


@router.post("/prd/export", response_model=ExportResponse)
async def export_prd(body: ExportRequest) -> ExportResponse:
    """
    POST /api/prd/export

    Body: { drafts: {sectionId: text}, sections?, ideaContext? }
    Returns: { markdown, progress: {completed, total, percent} }
    """
    sections = body.sections if body.sections else default_sections()
    progress = ProgressState.from_drafts(sections, body.drafts)
    markdown = render_markdown(sections, body.drafts, body.idea_context)
    log("INFO", "prd exported", completed=progress.completed, total=progress.total)
    return ExportResponse(markdown=markdown, progress=progress.summary())
