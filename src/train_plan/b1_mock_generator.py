"""
b1_mock_generator.py – Rule-based training plan generator (no Gemini key needed).

Mirrors the shape of a real Gemini reply (markdown headers, bold key terms,
bullet lists, an answer key) so the Streamlit UI and the PDF exporter are
fully testable before credentials are wired in.

Logic covers:
  • Title / duration / level lifted from a structured prompt when present
  • Time allocations scaled to the requested duration
  • A short check-for-understanding quiz followed by an answer key
"""

from __future__ import annotations

import re

from train_plan.models import DEFAULT_DURATION_MINUTES

_TITLE_RE    = re.compile(r"^\s*Title:\s*(.+)$", re.MULTILINE)
_DURATION_RE = re.compile(r"^\s*Duration:\s*(\d+)\s*minutes", re.MULTILINE)
_LEVEL_RE    = re.compile(r"^\s*Teaching Level:\s*(.+)$", re.MULTILINE)
_INPUT_RE    = re.compile(r"following input:\s*(.+)")

# (section name, share of session time)
_OUTLINE: list[tuple[str, float]] = [
    ("Welcome and warm-up",            0.10),
    ("Core concepts",                  0.25),
    ("Modelled demonstration",         0.20),
    ("Hands-on practice in pairs",     0.30),
    ("Reflection and action planning", 0.15),
]


def _allocate_minutes(total: int) -> list[int]:
    """Split *total* minutes over the outline, largest remainder first."""
    raw = [total * share for _, share in _OUTLINE]
    minutes = [int(r) for r in raw]
    leftover = total - sum(minutes)
    order = sorted(range(len(raw)), key=lambda i: raw[i] - minutes[i], reverse=True)
    for i in order[:leftover]:
        minutes[i] += 1
    return minutes


def _lift(pattern: re.Pattern, text: str, default: str) -> str:
    m = pattern.search(text)
    return m.group(1).strip() if m else default


def build_mock_plan(prompt: str) -> str:
    """Return a deterministic markdown plan for *prompt*."""
    title    = _lift(_TITLE_RE, prompt, "")
    if not title:
        need  = _lift(_INPUT_RE, prompt, "Teacher Professional Development")
        title = need.split(".")[0][:80].strip() or "Teacher Professional Development"
    level    = _lift(_LEVEL_RE, prompt, "All Levels")
    duration = int(_lift(_DURATION_RE, prompt, str(DEFAULT_DURATION_MINUTES)))

    lines = [
        f"# {title}",
        "",
        f"**Duration:** {duration} minutes",
        "",
        "## Target Audience",
        f"- Teachers working with **{level}** learners",
        "- Instructional coaches supporting classroom practice",
        "",
        "## Learning Objectives",
        "- Explain the **core principles** behind the session topic",
        "- Apply at least one **practical strategy** in an upcoming lesson",
        "- Plan how to gather **evidence of impact** with students",
        "",
        "## Session Outline",
    ]
    start = 0
    for (name, _), mins in zip(_OUTLINE, _allocate_minutes(duration)):
        lines.append(f"- **{start}-{start + mins} min:** {name}")
        start += mins

    lines += [
        "",
        "## Materials and Resources",
        "- Slide deck and printed handouts",
        "- Chart paper, sticky notes and markers",
        "- Devices with internet access for the practice activity",
        "",
        "## Follow-up and Assessment",
        "- Exit ticket: one strategy each participant will try this week",
        "- **Peer observation** within two weeks, using a shared checklist",
        "",
        "## Check for Understanding",
        "1. Name one principle introduced in the core concepts segment.",
        "2. Which activity gave participants guided practice?",
        "",
        "## Answer Key for Teachers",
        "1. Any principle from the core concepts segment, stated in the participant's own words.",
        "2. The hands-on practice in pairs.",
    ]
    return "\n".join(lines)


class MockPlanGenerator:
    """Drop-in replacement for GeminiClient used in mock mode and tests."""

    async def generate(self, prompt: str) -> str:
        return build_mock_plan(prompt)
