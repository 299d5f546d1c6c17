"""
Tests for Block 0: build_prompt.
"""
from factories import make_freeform, make_structured

from train_plan.b0_prompt_builder import build_prompt
from train_plan.models import PlanFormat, StructuredPlanRequest


class TestFreeformPrompt:
    def test_embeds_input_verbatim(self):
        text = "Differentiation for mixed-ability  classrooms (grades 3–5)"
        prompt = build_prompt(make_freeform(text))
        assert f"following input: {text}" in prompt

    def test_lists_required_sections(self):
        prompt = build_prompt(make_freeform())
        for section in ("Target audience", "learning objectives", "session outline",
                        "materials and resources", "Follow-up activities"):
            assert section in prompt

    def test_forbids_tables_and_code_blocks(self):
        prompt = build_prompt(make_freeform())
        assert "Do not include tables" in prompt
        assert "Do not use any code blocks" in prompt

    def test_empty_input_still_builds(self):
        assert "following input: " in build_prompt(make_freeform(""))


class TestStructuredPrompt:
    def test_all_fields_interpolated(self):
        prompt = build_prompt(make_structured(
            title="Growth Mindset",
            subject="science",
            teaching_level="Elementary",
            duration_minutes=45,
            objectives="Model productive struggle.",
            additional_notes="Include a video clip.",
        ))
        assert "Title: Growth Mindset" in prompt
        assert "Subject Area: Science" in prompt
        assert "Teaching Level: Elementary" in prompt
        assert "Duration: 45 minutes" in prompt
        assert "Main Objectives: Model productive struggle." in prompt
        assert "Additional Requirements: Include a video clip." in prompt

    def test_optional_fields_fall_back(self):
        prompt = build_prompt(StructuredPlanRequest(title="T", objectives="O"))
        assert "Subject Area: Not specified" in prompt
        assert "Teaching Level: Not specified" in prompt
        assert "Duration: 60 minutes" in prompt
        assert "Additional Requirements: None" in prompt

    def test_markdown_rules_by_default(self):
        prompt = build_prompt(make_structured())
        assert "proper markdown headers" in prompt
        assert "<strong>" not in prompt

    def test_html_rules_when_requested(self):
        prompt = build_prompt(make_structured(output_format=PlanFormat.HTML))
        assert "<strong>" in prompt
        assert "proper markdown headers" not in prompt

    def test_deterministic(self):
        r = make_structured()
        assert build_prompt(r) == build_prompt(r)
