"""
Data models for the Training Plan Generator.

Request types are plain dataclasses (they are built per submission and
discarded); the Gemini wire envelope is described with Pydantic models so
malformed replies are caught at the parsing boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ─── Enumerations ────────────────────────────────────────────────────────────

class PlanFormat(str, Enum):
    """Markup the provider is asked to answer in."""
    MARKDOWN = "markdown"
    HTML     = "html"


# ─── Subject catalogue ──────────────────────────────────────────────────────

SUBJECTS: list[dict] = [
    {"value": "mathematics",        "label": "Mathematics"},
    {"value": "science",            "label": "Science"},
    {"value": "language-arts",      "label": "Language Arts"},
    {"value": "social-studies",     "label": "Social Studies"},
    {"value": "physical-education", "label": "Physical Education"},
    {"value": "art",                "label": "Art"},
    {"value": "music",              "label": "Music"},
    {"value": "technology",         "label": "Technology"},
    {"value": "foreign-languages",  "label": "Foreign Languages"},
    {"value": "special-education",  "label": "Special Education"},
]

SUBJECT_VALUES = [s["value"] for s in SUBJECTS]


def subject_label(value: str) -> str:
    """Return the display label for *value*, or the value itself if unknown."""
    return next((s["label"] for s in SUBJECTS if s["value"] == value), value)


# ─── Plan requests ───────────────────────────────────────────────────────────

DEFAULT_DURATION_MINUTES = 60
MIN_DURATION_MINUTES     = 15
MAX_DURATION_MINUTES     = 240


@dataclass(frozen=True)
class FreeformPlanRequest:
    """A free-text description of the training need."""
    prompt: str


@dataclass(frozen=True)
class StructuredPlanRequest:
    """
    Form-based request.  ``title`` and ``objectives`` are mandatory; the
    guardrails reject the request before any network call if either is blank.
    """
    title:            str
    objectives:       str
    subject:          str = ""
    teaching_level:   str = ""
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    additional_notes: str = ""
    output_format:    PlanFormat = PlanFormat.MARKDOWN


PlanRequest = Union[FreeformPlanRequest, StructuredPlanRequest]


# ─── Quick templates (pre-filled structured requests) ───────────────────────

QUICK_TEMPLATES: dict[str, dict] = {
    "new-tech": {
        "label":       "Integrating New Technology",
        "description": "Help teachers incorporate modern tech tools in their lessons",
        "request": StructuredPlanRequest(
            title="Integrating New Technology in the Classroom",
            subject="technology",
            teaching_level="All Levels",
            duration_minutes=90,
            objectives=(
                "Introduce teachers to new educational technology tools and "
                "demonstrate effective integration into lessons."
            ),
            additional_notes="Ensure the session includes hands-on practice with the tools.",
        ),
    },
    "student-engagement": {
        "label":       "Student Engagement Strategies",
        "description": "Boost participation and involvement in the classroom",
        "request": StructuredPlanRequest(
            title="Increasing Student Engagement Strategies",
            subject="all",
            teaching_level="All Levels",
            duration_minutes=60,
            objectives=(
                "Equip teachers with practical strategies to boost student "
                "engagement and participation."
            ),
            additional_notes="Focus on inclusive approaches that work for diverse learning styles.",
        ),
    },
    "assessment": {
        "label":       "Modern Assessment Techniques",
        "description": "Train on effective evaluation methods for student learning",
        "request": StructuredPlanRequest(
            title="Modern Assessment Techniques",
            subject="all",
            teaching_level="All Levels",
            duration_minutes=75,
            objectives="Train teachers on effective formative and summative assessment methods.",
            additional_notes="Include digital assessment tools that provide immediate feedback.",
        ),
    },
}


def get_quick_template(template_id: str) -> StructuredPlanRequest:
    """Return the pre-filled request for *template_id* (KeyError if unknown)."""
    return QUICK_TEMPLATES[template_id]["request"]


# ─── Gemini request envelope ────────────────────────────────────────────────

SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Part(_CamelModel):
    text: Optional[str] = None


class Content(_CamelModel):
    parts: list[Part] = Field(default_factory=list)
    role:  Optional[str] = None


class GenerationConfig(_CamelModel):
    temperature:       float = 0.7
    top_k:             int   = Field(40,   alias="topK")
    top_p:             float = Field(0.95, alias="topP")
    max_output_tokens: int   = Field(4096, alias="maxOutputTokens")


class SafetySetting(_CamelModel):
    category:  str
    threshold: str = SAFETY_THRESHOLD


class GenerateContentRequest(_CamelModel):
    contents:          list[Content]
    generation_config: GenerationConfig    = Field(default_factory=GenerationConfig,
                                                   alias="generationConfig")
    safety_settings:   list[SafetySetting] = Field(
        default_factory=lambda: [SafetySetting(category=c) for c in SAFETY_CATEGORIES],
        alias="safetySettings",
    )

    @classmethod
    def for_prompt(cls, prompt: str) -> "GenerateContentRequest":
        return cls(contents=[Content(parts=[Part(text=prompt)])])

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ─── Gemini response envelope ───────────────────────────────────────────────

class Candidate(_CamelModel):
    content:       Optional[Content] = None
    finish_reason: Optional[str]     = Field(None, alias="finishReason")


class GenerateContentResponse(_CamelModel):
    candidates: list[Candidate] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        """``candidates[0].content.parts[0].text`` or None when any hop is missing."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text
