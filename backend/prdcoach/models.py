"""
Single source of truth for all Pydantic models (requests, responses, internal types).
Wire names are camelCase to match the frontend; snake_case is accepted as well.
"""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def slugify(title: str) -> str:
    """Derive a section id from its title: lowercase, hyphen-separated."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "section"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Section Models
# -----------------------------------------------------------------------------


class SectionLink(BaseModel):
    title: str
    url: str


class SectionDescriptor(BaseModel):
    id: str = ""
    title: str
    description: str = ""
    placeholder: str = ""
    example: str = ""
    links: list[SectionLink] = []

    @model_validator(mode="before")
    @classmethod
    def normalize_fields(cls, data: object) -> object:
        """
        Accept the legacy 'lelandLinks' key, treat null optional fields as empty,
        and derive a missing id from the title.
        """
        if isinstance(data, dict):
            data = dict(data)
            if "lelandLinks" in data and "links" not in data:
                data["links"] = data.pop("lelandLinks")
            for key in ("description", "placeholder", "example"):
                if key in data and data[key] is None:
                    data[key] = ""
            if data.get("links") is None:
                data["links"] = []
            if not data.get("id") and isinstance(data.get("title"), str):
                data["id"] = slugify(data["title"])
        return data


class OutlineSections(BaseModel):
    """Expected shape of the outline-parsing reply."""

    sections: list[SectionDescriptor]

    @model_validator(mode="after")
    def dedupe_ids(self) -> "OutlineSections":
        seen: dict[str, int] = {}
        for section in self.sections:
            count = seen.get(section.id, 0) + 1
            seen[section.id] = count
            if count > 1:
                section.id = f"{section.id}-{count}"
        return self


# -----------------------------------------------------------------------------
# Idea Context
# -----------------------------------------------------------------------------


class IdeaContext(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product_idea: str = Field(..., min_length=1)
    persona: Optional[str] = None
    company: Optional[str] = None
    job_description: Optional[str] = None
    custom_outline: Optional[str] = None
    purpose: Optional[Literal["recruiting", "deliverable"]] = None

    @model_validator(mode="before")
    @classmethod
    def blank_purpose_to_none(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("purpose") == "":
            data = {**data, "purpose": None}
        return data


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------


class FeedbackRequest(CamelModel):
    section: str
    content: str
    idea_context: Union[IdeaContext, str]


class OutlineRequest(CamelModel):
    custom_outline: Optional[str] = ""


class ExportRequest(CamelModel):
    drafts: dict[str, str] = {}
    sections: Optional[list[SectionDescriptor]] = None  # None = built-in sections
    idea_context: Optional[IdeaContext] = None


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class FeedbackResponse(BaseModel):
    feedback: str


class OutlineResponse(BaseModel):
    sections: list[dict]


class SectionsResponse(BaseModel):
    sections: list[SectionDescriptor]


class ProgressSummary(BaseModel):
    completed: int
    total: int
    percent: float


class ExportResponse(BaseModel):
    markdown: str
    progress: ProgressSummary
