"""
PRD Coach Backend — Built-in Sections, Progress & Export

The default PRD outline, draft progress over a section list, and rendering of
a filled-in PRD as Markdown. Pure functions; drafts are never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from prdcoach.models import IdeaContext, ProgressSummary, SectionDescriptor
from prdcoach.prompts import format_idea_context

_COURSE = "https://www.joinleland.com/content/course"
_ITEM = "https://www.joinleland.com/content/item"

_USERS_AND_PROBLEMS = {
    "title": "Understanding Users & Problem Spaces",
    "url": f"{_COURSE}/urn:course:68cdb3b85d53ec4ea9359d04",
}
_REQUIREMENTS_GATHERING = {
    "title": "Requirements Gathering for UX Designers",
    "url": f"{_ITEM}/urn:contentEntry:689b5d87dac66cae1ed96aae?fromName=Product+Management",
}
_DISCOVERY = {
    "title": "Product Discovery and Ideation",
    "url": f"{_COURSE}/urn:course:68cdb6cbb1c8a7104e455eda/urn:contentEntry:68c8e577810fce6e6ae76f33",
}
_STRATEGY = {
    "title": "Product Thinking & Strategy",
    "url": f"{_COURSE}/urn:course:68cdaef05d53ec4ea9353196/urn:contentEntry:68c963cfb399bfc15f000206",
}

_DEFAULT_SECTION_DATA = [
    {
        "id": "problem",
        "title": "Problem Statement",
        "description": "What problem are you solving? Who experiences it?",
        "placeholder": "Describe the core problem your product addresses...",
        "example": (
            "Small business owners struggle to manage their inventory across multiple sales channels, "
            "leading to overselling, stockouts, and lost revenue. Current solutions are either too complex "
            "and expensive for SMBs or lack multi-channel integration.\n\n"
            "Key pain points:\n"
            "• Manual inventory updates across 3+ platforms take 2-3 hours daily\n"
            "• 15% of orders result in overselling issues\n"
            "• No real-time visibility into stock levels\n\n"
            "Target users: Small retail businesses (5-50 employees) selling on e-commerce platforms, "
            "marketplaces, and physical stores."
        ),
        "links": [_USERS_AND_PROBLEMS, _REQUIREMENTS_GATHERING, _DISCOVERY],
    },
    {
        "id": "goals",
        "title": "Goals & Success Metrics",
        "description": "What does success look like?",
        "placeholder": "Define clear, measurable goals and KPIs...",
        "example": (
            "Business Goals:\n"
            "• Reduce inventory management time by 70%\n"
            "• Eliminate overselling incidents within 3 months\n"
            "• Increase customer retention by 25%\n\n"
            "Success Metrics:\n"
            "• Daily Active Users (DAU): 1,000 within 6 months\n"
            "• Inventory sync accuracy: 99.5%\n"
            "• Time to sync across channels: <30 seconds\n"
            "• Customer satisfaction (CSAT): >4.5/5\n"
            "• Churn rate: <5% monthly"
        ),
        "links": [
            {
                "title": "Metrics, Analytics, and Decision Making",
                "url": f"{_COURSE}/urn:course:68cdbe15b1c8a7104e461624/urn:contentEntry:68c8e67d8945a7a314b53ad7",
            },
            _STRATEGY,
        ],
    },
    {
        "id": "user-stories",
        "title": "User Stories",
        "description": "How will users interact with this feature?",
        "placeholder": "As a [user], I want to [action] so that [benefit]...",
        "example": (
            "As a store owner, I want to:\n"
            "• Connect all my sales channels (Shopify, Amazon, eBay) in one dashboard so that I can view "
            "inventory in real-time\n"
            "• Receive alerts when stock levels fall below threshold so that I can reorder before stockouts\n"
            "• Automatically sync inventory changes across all platforms so that I don't have to manually "
            "update each channel\n\n"
            "As a warehouse manager, I want to:\n"
            "• Scan barcodes to update inventory so that changes reflect immediately across all channels\n"
            "• View which products are selling fastest so that I can prioritize restocking"
        ),
        "links": [_USERS_AND_PROBLEMS, _REQUIREMENTS_GATHERING, _DISCOVERY],
    },
    {
        "id": "requirements",
        "title": "Requirements",
        "description": "What needs to be built?",
        "placeholder": "List functional and non-functional requirements...",
        "example": (
            "Functional Requirements:\n"
            "• Multi-channel integration (Shopify, WooCommerce, Amazon, eBay)\n"
            "• Real-time inventory synchronization (<30 sec delay)\n"
            "• Low stock alerts (customizable thresholds)\n"
            "• Barcode scanning via mobile app\n"
            "• Inventory history and audit logs\n"
            "• Bulk import/export via CSV\n\n"
            "Non-Functional Requirements:\n"
            "• 99.9% uptime\n"
            "• Support 10,000+ SKUs per account\n"
            "• Mobile-responsive dashboard\n"
            "• GDPR compliant data handling\n"
            "• API rate limiting: 100 requests/min"
        ),
        "links": [
            {"title": "Product Management 101", "url": f"{_COURSE}/urn:course:68c9492fdf84b203d53079e7"},
            _REQUIREMENTS_GATHERING,
        ],
    },
    {
        "id": "scope",
        "title": "Scope & Timeline",
        "description": "What's in and out? When will it ship?",
        "placeholder": "Define what's included in V1 and future iterations...",
        "example": (
            "V1 Scope (Q2 2024):\n"
            "In Scope:\n"
            "• Integration with Shopify and WooCommerce\n"
            "• Real-time inventory sync\n"
            "• Low stock email alerts\n"
            "• Web dashboard with basic reporting\n"
            "• CSV import/export\n\n"
            "Out of Scope:\n"
            "• Amazon/eBay integration (V2)\n"
            "• Mobile app (V2)\n"
            "• Advanced analytics and forecasting (V3)\n"
            "• Multi-warehouse support (V3)\n\n"
            "Timeline:\n"
            "• Design & Planning: 2 weeks\n"
            "• Development: 8 weeks\n"
            "• Testing & QA: 2 weeks\n"
            "• Beta Launch: Week 12"
        ),
        "links": [
            {"title": "Overview of Product Management", "url": f"{_COURSE}/urn:course:68cdaef05d53ec4ea9353196"},
            _STRATEGY,
            _DISCOVERY,
        ],
    },
]

DEFAULT_SECTIONS: list[SectionDescriptor] = [
    SectionDescriptor.model_validate(data) for data in _DEFAULT_SECTION_DATA
]


def default_sections() -> list[SectionDescriptor]:
    """Return a fresh copy of the built-in outline."""
    return [section.model_copy(deep=True) for section in DEFAULT_SECTIONS]


# -----------------------------------------------------------------------------
# Progress
# -----------------------------------------------------------------------------


@dataclass
class ProgressState:
    """Drafts keyed by section id, evaluated against a fixed section order."""

    section_ids: list[str]
    drafts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_drafts(cls, sections: list[SectionDescriptor], drafts: dict[str, str]) -> "ProgressState":
        return cls(section_ids=[s.id for s in sections], drafts=dict(drafts))

    def is_complete(self, section_id: str) -> bool:
        return bool(self.drafts.get(section_id, "").strip())

    @property
    def completed(self) -> int:
        return sum(1 for sid in self.section_ids if self.is_complete(sid))

    @property
    def total(self) -> int:
        return len(self.section_ids)

    @property
    def percent(self) -> float:
        if not self.section_ids:
            return 0.0
        return round(self.completed / self.total * 100, 2)

    def next_section(self, section_id: str) -> str | None:
        """Id after section_id in order, or None at the end / for unknown ids."""
        if section_id not in self.section_ids:
            return None
        idx = self.section_ids.index(section_id)
        return self.section_ids[idx + 1] if idx + 1 < len(self.section_ids) else None

    def previous_section(self, section_id: str) -> str | None:
        if section_id not in self.section_ids:
            return None
        idx = self.section_ids.index(section_id)
        return self.section_ids[idx - 1] if idx > 0 else None

    def summary(self) -> ProgressSummary:
        return ProgressSummary(completed=self.completed, total=self.total, percent=self.percent)


# -----------------------------------------------------------------------------
# Export
# -----------------------------------------------------------------------------


def render_markdown(
    sections: list[SectionDescriptor],
    drafts: dict[str, str],
    idea_context: IdeaContext | None = None,
) -> str:
    """
    Render the PRD as Markdown in section order.

    Sections without a draft are kept with a "_Not started._" marker so the
    exported document shows what is still missing.
    """
    title = idea_context.product_idea.strip() if idea_context else "Untitled Product"
    parts = [f"# PRD: {title}"]
    if idea_context:
        context_lines = format_idea_context(idea_context).splitlines()[1:]
        if context_lines:
            parts.append("\n".join(f"- {line}" for line in context_lines))

    for section in sections:
        draft = drafts.get(section.id, "").strip()
        parts.append(f"## {section.title}\n\n{draft or '_Not started._'}")

    return "\n\n".join(parts) + "\n"
