"""
PRD Coach Backend — LLM Prompt Templates

All prompts are defined here. Builders return complete message lists
(system + user); nothing is injected downstream.
"""

import json

from prdcoach.models import IdeaContext


# -----------------------------------------------------------------------------
# 1. build_feedback_prompt
# -----------------------------------------------------------------------------

FEEDBACK_SYSTEM_PROMPT = """You are an experienced product manager providing constructive feedback on PRD sections.

CRITICAL: For each piece of feedback, you MUST quote the exact text from the user's content that you're referring to.
Use quotation marks around the specific text you're commenting on.

Format each feedback point as a separate paragraph with:
1. A direct quote from their text (in "quotes")
2. Your specific suggestion for improvement
3. A brief example of how to improve it

Your feedback should be:
- Specific and actionable with quoted references
- Encouraging but honest
- Focused on PM best practices
- Limited to 3-4 key points
- Each point should reference specific text they wrote

Keep each feedback point concise (2-3 sentences per point). Separate each point with a blank line."""

FEEDBACK_INSTRUCTIONS = """Provide 3-4 specific feedback points. For EACH point, quote the exact text you're referring to in "quotation marks", then explain what needs improvement and how to fix it.

Example format:
"[exact quote from their text]" - This could be stronger because... Try rephrasing as: "[improved version]"

Separate each feedback point with a blank line."""

PURPOSE_LABELS = {
    "recruiting": "Portfolio piece for a job application",
    "deliverable": "Real deliverable for a team",
}


def format_idea_context(idea_context: IdeaContext | str) -> str:
    """
    Render the idea context as labeled lines.

    Optional fields appear only when they have non-blank text; a plain-string
    context is embedded verbatim.
    """
    if isinstance(idea_context, str):
        return idea_context

    lines = [f"Product Idea: {idea_context.product_idea}"]
    optional = [
        ("Target Persona", idea_context.persona),
        ("Company", idea_context.company),
        ("Role", idea_context.job_description),
        ("Custom PRD Structure", idea_context.custom_outline),
        ("PRD Purpose", PURPOSE_LABELS.get(idea_context.purpose or "")),
    ]
    for label, value in optional:
        if value and value.strip():
            lines.append(f"{label}: {value}")
    return "\n".join(lines)


def build_feedback_prompt(section: str, content: str, idea_context: IdeaContext | str) -> list[dict]:
    """
    Build the system + user messages for section feedback.

    The content is embedded verbatim so the model can quote it exactly.

    Returns:
        [{"role": "system", ...}, {"role": "user", ...}]
    """
    user_prompt = (
        f"{format_idea_context(idea_context)}\n\n"
        f"PRD Section: {section}\n\n"
        f"User's Response:\n{content}\n\n"
        f"{FEEDBACK_INSTRUCTIONS}"
    )
    return [
        {"role": "system", "content": FEEDBACK_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


# -----------------------------------------------------------------------------
# 2. build_outline_prompt
# -----------------------------------------------------------------------------

# Documented reply format. Kept as data so tests can run it back through extraction.
OUTLINE_EXAMPLE_OUTPUT = {
    "sections": [
        {
            "id": "overview",
            "title": "Product Overview",
            "description": "Describe the product and its purpose",
            "placeholder": "Provide a high-level overview of the product...",
            "example": "",
            "links": [],
        }
    ]
}

OUTLINE_SYSTEM_PROMPT = f"""You are a PRD structure parser. Given a custom PRD outline or template, extract the sections and convert them into a structured format.

For each section, you need to provide:
- id: a short, lowercase, hyphenated identifier derived from the title (e.g., "problem-statement")
- title: the section heading
- description: a brief description of what this section should contain (1 sentence)
- placeholder: example text for the input field
- example: leave as empty string (will use defaults)
- links: leave as empty array

Return ONLY a valid JSON object with a "sections" array. No markdown, no explanation, just JSON.

Example output format:
{json.dumps(OUTLINE_EXAMPLE_OUTPUT, indent=2)}"""


def build_outline_prompt(custom_outline: str) -> list[dict]:
    """
    Build the system + user messages that turn a free-form outline into sections.

    Expected output schema: OutlineSections
    """
    return [
        {"role": "system", "content": OUTLINE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": f"Parse this custom PRD outline into structured sections:\n\n{custom_outline}",
        },
    ]
