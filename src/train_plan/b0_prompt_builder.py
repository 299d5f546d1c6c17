"""
Block 0: Prompt Builder
=======================
Turns a PlanRequest into the single instruction string sent to the AI client.

  build_prompt(request) → str
    FreeformPlanRequest   → text embedded verbatim in the session-plan template
    StructuredPlanRequest → all six form fields interpolated; the formatting
                            block asks for HTML when output_format == HTML

The builder never validates and never fails; the guardrails run before it.
"""

from __future__ import annotations

import textwrap

from train_plan.models import (
    FreeformPlanRequest,
    PlanFormat,
    PlanRequest,
    StructuredPlanRequest,
    subject_label,
)


# Sections every plan must contain, in the order the model should write them.
_REQUIRED_SECTIONS = textwrap.dedent("""
    The plan should include:
    1. A clear title and duration
    2. Target audience specification
    3. Detailed learning objectives
    4. A session outline with timing for each section
    5. Required materials and resources
    6. Follow-up activities or assessment
    7. Do not include tables to present the information
""").strip()

_MARKDOWN_RULES = textwrap.dedent("""
    ### Important Formatting Guidelines:
    - Do not use any code blocks.
    - Use a clear and concise writing style.
    - Use bullet points for lists.
    - Use proper markdown headers (# for main titles, ## for subtitles).
    - **Bold important terms** for emphasis.
    - Do **not** wrap your entire response in markdown code blocks (```).
    - Ensure proper spacing between sections.
    - Format time allocations consistently.
    - Use a friendly and engaging tone.
""").strip()

_HTML_RULES = textwrap.dedent("""
    ### Important Formatting Guidelines:
    - Format the response in HTML for proper display, with appropriate
      headers (<h1>, <h2>), lists (<ul>, <li>), and spacing (<p>).
    - Use <strong> for important terms.
    - Do not include <html>, <head> or <body> tags, and no tables.
    - Do not wrap the response in code blocks.
""").strip()

_CLOSING = textwrap.dedent("""
    Make it practical and engaging for teachers.
    Keep the tone professional but approachable.
""").strip()


def _formatting_rules(fmt: PlanFormat) -> str:
    return _HTML_RULES if fmt == PlanFormat.HTML else _MARKDOWN_RULES


def _build_freeform(request: FreeformPlanRequest) -> str:
    return "\n\n".join([
        "Create a detailed teacher training session plan based on the "
        f"following input: {request.prompt}",
        _REQUIRED_SECTIONS,
        _formatting_rules(PlanFormat.MARKDOWN),
        _CLOSING,
    ])


def _build_structured(request: StructuredPlanRequest) -> str:
    spec_block = "\n".join([
        f"Title: {request.title}",
        f"Subject Area: {subject_label(request.subject) or 'Not specified'}",
        f"Teaching Level: {request.teaching_level or 'Not specified'}",
        f"Duration: {request.duration_minutes} minutes",
        f"Main Objectives: {request.objectives}",
        f"Additional Requirements: {request.additional_notes or 'None'}",
    ])
    return "\n\n".join([
        "Create a detailed teacher training plan with the following specifications:",
        spec_block,
        _REQUIRED_SECTIONS,
        _formatting_rules(request.output_format),
        _CLOSING,
    ])


def build_prompt(request: PlanRequest) -> str:
    """Return the instruction string for *request*."""
    if isinstance(request, StructuredPlanRequest):
        return _build_structured(request)
    return _build_freeform(request)
