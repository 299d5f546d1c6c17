"""
Tests for the rule-based mock generator (b1_mock_generator.py).
"""
import re

import pytest
from factories import make_freeform, make_structured

from train_plan.b0_prompt_builder import build_prompt
from train_plan.b1_mock_generator import MockPlanGenerator, _allocate_minutes, build_mock_plan


class TestAllocateMinutes:
    @pytest.mark.parametrize("total", [15, 45, 60, 75, 90, 240])
    def test_sums_to_total(self, total):
        assert sum(_allocate_minutes(total)) == total

    def test_five_segments(self):
        assert len(_allocate_minutes(60)) == 5


class TestBuildMockPlan:
    def test_title_and_duration_from_structured_prompt(self):
        plan = build_mock_plan(build_prompt(make_structured(title="Rubrics 101", duration_minutes=90)))
        assert plan.startswith("# Rubrics 101")
        assert "**Duration:** 90 minutes" in plan

    def test_outline_ends_at_duration(self):
        plan = build_mock_plan(build_prompt(make_structured(duration_minutes=75)))
        ends = [int(m) for m in re.findall(r"-(\d+) min:", plan)]
        assert ends[-1] == 75

    def test_freeform_title_from_input(self):
        plan = build_mock_plan(build_prompt(make_freeform("Inquiry-based science labs. Two days.")))
        assert plan.startswith("# Inquiry-based science labs")

    def test_has_answer_key(self):
        assert "## Answer Key for Teachers" in build_mock_plan("anything")

    def test_deterministic(self):
        prompt = build_prompt(make_structured())
        assert build_mock_plan(prompt) == build_mock_plan(prompt)


class TestMockPlanGenerator:
    @pytest.mark.asyncio
    async def test_generate(self):
        plan = await MockPlanGenerator().generate(build_prompt(make_structured(title="Exit Tickets")))
        assert plan.startswith("# Exit Tickets")
