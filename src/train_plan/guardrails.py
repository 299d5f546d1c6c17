"""
guardrails.py – Request validation and output advisories
========================================================
Runs before the prompt is built (input guards) and after the reply has been
canonicalised to markdown (output guards).

Guardrail levels
----------------
BLOCK   – Hard-stop: the request is rejected before any network call.
WARN    – Soft-stop: the request proceeds with a visible warning.
INFO    – Advisory: shown next to the plan, never blocks.

Guards implemented
------------------
Input guards (before the Prompt Builder):
  G-01  Required fields: title + objectives (structured) or prompt (free text)
  G-02  Duration positive (BLOCK); within the 15–240 minute UI range (WARN)
  G-03  Subject is in the subject catalogue
  G-04  No profanity in free-text fields                          [heuristic]
  G-05  PII patterns (e-mail, phone) in free-text fields

Output guards (after the AI Client):
  G-06  Plan contains tables or code fences the prompt asked to avoid
  G-07  Plan mentions each expected section (objectives, materials, …)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from train_plan.models import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    SUBJECT_VALUES,
    PlanRequest,
    StructuredPlanRequest,
)


# ─── Enums & data models ─────────────────────────────────────────────────────

class GuardrailLevel(str, Enum):
    BLOCK = "BLOCK"
    WARN  = "WARN"
    INFO  = "INFO"


@dataclass
class GuardrailViolation:
    code:    str
    level:   GuardrailLevel
    message: str
    field:   str = ""   # which field triggered the violation


@dataclass
class GuardrailResult:
    passed:     bool
    violations: list[GuardrailViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(v.level == GuardrailLevel.BLOCK for v in self.violations)

    @property
    def warnings(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.WARN]

    @property
    def infos(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.INFO]

    def summary(self) -> str:
        if not self.violations:
            return "✅ All guardrails passed."
        icon = {GuardrailLevel.BLOCK: "🚫", GuardrailLevel.WARN: "⚠️", GuardrailLevel.INFO: "ℹ️"}
        return "\n".join(f"{icon[v.level]} [{v.code}] {v.message}" for v in self.violations)


def _result(violations: list[GuardrailViolation]) -> GuardrailResult:
    return GuardrailResult(
        passed=not any(v.level == GuardrailLevel.BLOCK for v in violations),
        violations=violations,
    )


# ─── Constant sets ────────────────────────────────────────────────────────────

# "all" is what the quick templates use for cross-subject sessions.
RECOGNISED_SUBJECTS = set(SUBJECT_VALUES) | {"all"}

_HARMFUL_PATTERN = re.compile(
    r"\b(fuck|shit|bitch|cunt|asshole|motherfucker)\b",
    re.IGNORECASE,
)

_PII_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("e-mail address", re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")),
    ("phone number",   re.compile(r"(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b")),
]

_FIELD_LABELS = {
    "prompt":           "Training Needs",
    "title":            "Training Title",
    "objectives":       "Learning Objectives",
    "additional_notes": "Additional Notes",
    "teaching_level":   "Teaching Level",
}

_TABLE_ROW_RE = re.compile(r"^\s*\|.*\|\s*$", re.MULTILINE)
_FENCE_RE     = re.compile(r"^\s*```", re.MULTILINE)

# Section → keywords any of which counts as the section being present.
EXPECTED_SECTIONS: dict[str, tuple[str, ...]] = {
    "objectives": ("objective",),
    "outline":    ("outline", "agenda", "schedule"),
    "materials":  ("material", "resource"),
    "follow-up":  ("follow-up", "follow up", "assessment"),
}


# ─── Guardrail checks ─────────────────────────────────────────────────────────

class InputGuardrails:
    """G-01 – G-05: Validates a PlanRequest before the prompt is built."""

    def check(self, request: PlanRequest) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        if isinstance(request, StructuredPlanRequest):
            free_text = [
                ("title",            request.title),
                ("objectives",       request.objectives),
                ("teaching_level",   request.teaching_level),
                ("additional_notes", request.additional_notes),
            ]
            # G-01 Required fields
            for name in ("title", "objectives"):
                if not getattr(request, name).strip():
                    violations.append(GuardrailViolation(
                        code="G-01", level=GuardrailLevel.BLOCK, field=name,
                        message=f"{_FIELD_LABELS[name]} must not be empty.",
                    ))

            # G-02 Duration
            if request.duration_minutes <= 0:
                violations.append(GuardrailViolation(
                    code="G-02", level=GuardrailLevel.BLOCK, field="duration_minutes",
                    message="Duration must be a positive number of minutes.",
                ))
            elif not MIN_DURATION_MINUTES <= request.duration_minutes <= MAX_DURATION_MINUTES:
                violations.append(GuardrailViolation(
                    code="G-02", level=GuardrailLevel.WARN, field="duration_minutes",
                    message=(
                        f"Duration ({request.duration_minutes} min) is outside the usual "
                        f"{MIN_DURATION_MINUTES}–{MAX_DURATION_MINUTES} minute range."
                    ),
                ))

            # G-03 Subject catalogue
            if request.subject and request.subject not in RECOGNISED_SUBJECTS:
                violations.append(GuardrailViolation(
                    code="G-03", level=GuardrailLevel.INFO, field="subject",
                    message=f"Subject '{request.subject}' is not in the catalogue; it is sent as typed.",
                ))
        else:
            free_text = [("prompt", request.prompt)]
            if not request.prompt.strip():
                violations.append(GuardrailViolation(
                    code="G-01", level=GuardrailLevel.BLOCK, field="prompt",
                    message="Please describe your training needs.",
                ))

        # G-04 / G-05 on every non-empty free-text field
        for name, value in free_text:
            if value:
                violations.extend(self._check_text(value, name))

        return _result(violations)

    @staticmethod
    def _check_text(text: str, field_name: str) -> list[GuardrailViolation]:
        label = _FIELD_LABELS.get(field_name, field_name)
        found: list[GuardrailViolation] = []
        if _HARMFUL_PATTERN.search(text):
            found.append(GuardrailViolation(
                code="G-04", level=GuardrailLevel.BLOCK, field=field_name,
                message=f"Potentially harmful content detected in \"{label}\" — request halted.",
            ))
        for pii_label, pattern in _PII_PATTERNS:
            if pattern.search(text):
                found.append(GuardrailViolation(
                    code="G-05", level=GuardrailLevel.WARN, field=field_name,
                    message=(
                        f"PII detected in \"{label}\" — {pii_label}. "
                        "It will be sent to the AI provider; consider removing it."
                    ),
                ))
        return found


class OutputGuardrails:
    """G-06 – G-07: Advisories on the canonical markdown plan."""

    def check(self, plan: str) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # G-06 Formatting the prompt asked the model to avoid
        if _TABLE_ROW_RE.search(plan):
            violations.append(GuardrailViolation(
                code="G-06", level=GuardrailLevel.WARN, field="plan",
                message="The plan contains a table; it will export as plain text rows.",
            ))
        if _FENCE_RE.search(plan):
            violations.append(GuardrailViolation(
                code="G-06", level=GuardrailLevel.WARN, field="plan",
                message="The plan contains code blocks; fences are dropped on export.",
            ))

        # G-07 Expected sections
        lowered = plan.lower()
        for section, keywords in EXPECTED_SECTIONS.items():
            if not any(k in lowered for k in keywords):
                violations.append(GuardrailViolation(
                    code="G-07", level=GuardrailLevel.INFO, field="plan",
                    message=f"No '{section}' section found in the generated plan.",
                ))

        return _result(violations)


# ─── Convenience façade ───────────────────────────────────────────────────────

class GuardrailsPipeline:
    """
    Single entry-point for both guardrail stages.

    Usage::

        gp = GuardrailsPipeline()
        result = gp.check_request(request)     # before the network call
        result = gp.check_plan(plan_markdown)  # after canonicalisation
    """

    def __init__(self):
        self.input_guard  = InputGuardrails()
        self.output_guard = OutputGuardrails()

    def check_request(self, request: PlanRequest) -> GuardrailResult:
        return self.input_guard.check(request)

    def check_plan(self, plan: str) -> GuardrailResult:
        return self.output_guard.check(plan)
