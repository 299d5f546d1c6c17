"""
Tests for Block 3: pagination rules, rendering and atomic file export.
"""
import pytest
from factories import SAMPLE_PLAN, char_measure, make_lines

from train_plan.b2_normalizer import StyledLine, TextRun, normalize_plan
from train_plan.b3_pdf_exporter import (
    ANSWER_KEY_TOP_MM,
    FIRST_LINE_Y_MM,
    LEFT_MARGIN_MM,
    LINE_HEIGHT_MM,
    OVERFLOW_TOP_MM,
    PageBreak,
    build_plan_pdf,
    export_plan_pdf,
    is_answer_key_heading,
    paginate,
    render_pdf,
)
from train_plan.errors import ExportError


# Lines placed on the first page: y = 30, 38, … 270
FIRST_PAGE_CAPACITY = 31


class TestOverflow:
    def test_short_plan_single_page(self):
        artifact = paginate(make_lines("one", "two"), measure=char_measure)
        assert len(artifact.pages) == 1
        assert [l.y_mm for l in artifact.pages[0].lines] == [FIRST_LINE_Y_MM, FIRST_LINE_Y_MM + LINE_HEIGHT_MM]

    def test_overflow_starts_new_page(self):
        lines = make_lines(*[f"line {i}" for i in range(FIRST_PAGE_CAPACITY + 1)])
        artifact = paginate(lines, measure=char_measure)
        assert len(artifact.pages) == 2
        assert len(artifact.pages[0].lines) == FIRST_PAGE_CAPACITY
        second = artifact.pages[1]
        assert second.started_by == PageBreak.OVERFLOW
        assert second.lines[0].y_mm == OVERFLOW_TOP_MM

    def test_no_line_below_bottom(self):
        lines = make_lines(*[f"line {i}" for i in range(200)])
        artifact = paginate(lines, measure=char_measure)
        assert all(l.y_mm <= 270 for p in artifact.pages for l in p.lines)

    def test_every_line_placed_once(self):
        lines = make_lines(*[f"line {i}" for i in range(100)])
        artifact = paginate(lines, measure=char_measure)
        indexes = [l.index for p in artifact.pages for l in p.lines]
        assert indexes == list(range(100))


class TestAnswerKeyBreak:
    def test_heading_detected(self):
        assert is_answer_key_heading("Answer Key for Teachers")
        assert not is_answer_key_heading("Assessment ideas")

    def test_forced_break_after_body(self):
        lines = make_lines("Intro", "Outline", "Answer Key for Teachers", "1. B")
        artifact = paginate(lines, measure=char_measure)
        assert len(artifact.pages) == 2
        assert artifact.page_of(2) == 2
        assert artifact.pages[1].started_by == PageBreak.ANSWER_KEY
        assert artifact.pages[1].lines[0].y_mm == ANSWER_KEY_TOP_MM
        assert artifact.pages[1].lines[0].text == "Answer Key for Teachers"

    def test_no_break_when_first_line(self):
        lines = make_lines("Answer Key for Teachers", "1. B")
        artifact = paginate(lines, measure=char_measure)
        assert len(artifact.pages) == 1
        assert artifact.pages[0].lines[0].y_mm == FIRST_LINE_Y_MM

    def test_forced_break_wins_over_overflow(self):
        body = [f"line {i}" for i in range(FIRST_PAGE_CAPACITY)]
        lines = make_lines(*body, "Answer Key")
        artifact = paginate(lines, measure=char_measure)
        assert artifact.pages[1].started_by == PageBreak.ANSWER_KEY
        assert artifact.pages[1].lines[0].y_mm == ANSWER_KEY_TOP_MM

    def test_marker_inside_answer_key_does_not_break_again(self):
        lines = make_lines("Intro", "Answer Key for Teachers", "1. See the Answer Key above", "2. B")
        artifact = paginate(lines, measure=char_measure)
        assert len(artifact.pages) == 2
        assert [l.text for l in artifact.pages[1].lines] == [
            "Answer Key for Teachers", "1. See the Answer Key above", "2. B",
        ]

    def test_marker_after_leading_heading_does_not_break(self):
        lines = make_lines("Answer Key", "1. Answer Key entries follow")
        assert len(paginate(lines, measure=char_measure).pages) == 1

    def test_mock_style_plan(self):
        plan = normalize_plan(SAMPLE_PLAN)
        artifact = paginate(plan.lines)
        key_index = next(i for i, l in enumerate(plan.lines) if "Answer Key" in l.text)
        assert artifact.page_of(key_index) == 2
        assert artifact.page_of(key_index - 1) == 1


class TestRunPlacement:
    def test_bold_run_offset(self):
        line = StyledLine((TextRun("The "), TextRun("goal", bold=True), TextRun(" is clarity")))
        runs = paginate([line], measure=char_measure).pages[0].lines[0].runs
        assert [r.x_mm for r in runs] == [LEFT_MARGIN_MM, LEFT_MARGIN_MM + 4, LEFT_MARGIN_MM + 8]
        assert [r.bold for r in runs] == [False, True, False]

    def test_deterministic(self):
        lines = normalize_plan(SAMPLE_PLAN).lines
        assert paginate(lines) == paginate(lines)


class TestRender:
    def test_pdf_header_signature(self):
        data = build_plan_pdf(SAMPLE_PLAN)
        assert data[:4] == b"%PDF"

    def test_identical_input_identical_bytes(self):
        assert build_plan_pdf(SAMPLE_PLAN) == build_plan_pdf(SAMPLE_PLAN)

    def test_page_count_matches_layout(self):
        artifact = paginate(normalize_plan(SAMPLE_PLAN).lines)
        data = render_pdf(artifact)
        assert len(artifact.pages) == 2
        assert b"/Count 2" in data

    def test_empty_plan_renders(self):
        assert build_plan_pdf("")[:4] == b"%PDF"


class TestExportFile:
    def test_writes_pdf(self, tmp_path):
        target = tmp_path / "Training_Plan.pdf"
        saved = export_plan_pdf(SAMPLE_PLAN, target)
        assert saved == target
        assert target.read_bytes()[:4] == b"%PDF"

    def test_no_temp_files_left(self, tmp_path):
        export_plan_pdf(SAMPLE_PLAN, tmp_path / "plan.pdf")
        assert [p.name for p in tmp_path.iterdir()] == ["plan.pdf"]

    def test_overwrites_existing(self, tmp_path):
        target = tmp_path / "plan.pdf"
        target.write_bytes(b"old")
        export_plan_pdf(SAMPLE_PLAN, target)
        assert target.read_bytes()[:4] == b"%PDF"

    def test_unwritable_target_raises_export_error(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file")
        with pytest.raises(ExportError):
            export_plan_pdf(SAMPLE_PLAN, blocker / "plan.pdf")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["not_a_dir"]
