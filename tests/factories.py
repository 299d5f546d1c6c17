"""
Factory helpers for building test objects.
Imported by conftest.py fixtures AND directly by test modules.
"""
import asyncio
import sys
import os

# Ensure both src/ and tests/ are importable in all test files
_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode (safe to call multiple times)
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("GEMINI_API_KEY", "<placeholder>")

from train_plan.b2_normalizer import StyledLine, TextRun
from train_plan.config import GeminiConfig
from train_plan.models import FreeformPlanRequest, PlanFormat, StructuredPlanRequest


SAMPLE_PLAN = """# Formative Assessment Basics

**Duration:** 60 minutes

## Learning Objectives
- Use **exit tickets** to check understanding
- Give **timely feedback**

## Session Outline
- **0-10 min:** Warm-up
- **10-60 min:** Practice

## Materials and Resources
- Sticky notes

## Follow-up and Assessment
- Peer observation

## Answer Key for Teachers
1. Exit tickets."""


def make_structured(
    title: str = "Formative Assessment Basics",
    objectives: str = "Help teachers use quick checks for understanding.",
    subject: str = "mathematics",
    teaching_level: str = "Middle School",
    duration_minutes: int = 60,
    additional_notes: str = "",
    output_format: PlanFormat = PlanFormat.MARKDOWN,
) -> StructuredPlanRequest:
    return StructuredPlanRequest(
        title            = title,
        objectives       = objectives,
        subject          = subject,
        teaching_level   = teaching_level,
        duration_minutes = duration_minutes,
        additional_notes = additional_notes,
        output_format    = output_format,
    )


def make_freeform(prompt: str = "Project-based learning for high school science teachers") -> FreeformPlanRequest:
    return FreeformPlanRequest(prompt=prompt)


def make_gemini_config(base_url: str = "https://gemini.test/v1beta") -> GeminiConfig:
    return GeminiConfig(
        api_key         = "test-key",
        model           = "gemini-2.0-flash",
        base_url        = base_url,
        timeout_seconds = 5.0,
    )


def make_lines(*texts: str) -> list[StyledLine]:
    """One plain StyledLine per text ('' gives a blank line)."""
    return [StyledLine((TextRun(t),)) if t else StyledLine() for t in texts]


def char_measure(text: str, bold: bool) -> float:
    """1 mm per character, bold or not."""
    return float(len(text))


# ─── Fake generators ─────────────────────────────────────────────────────────

class RecordingGenerator:
    """Returns a fixed reply and remembers every prompt it was given."""

    def __init__(self, reply: str = SAMPLE_PLAN):
        self.reply = reply
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingGenerator:
    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    async def generate(self, prompt: str) -> str:
        self.calls += 1
        raise self.exc


class BlockingGenerator:
    """Waits until ``release`` is set, then returns its reply."""

    def __init__(self, reply: str = SAMPLE_PLAN):
        self.reply = reply
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, prompt: str) -> str:
        self.started.set()
        await self.release.wait()
        return self.reply
