"""
Block 3: Document Exporter
==========================
Lays a normalized plan out on A4 pages and renders it with reportlab.

  paginate(lines) → PlanArtifact
    Pure layout: which line lands on which page, at which y, with which
    x offset per bold / normal run.  Deterministic for identical input.

  render_pdf(artifact) → bytes
    Draws the artifact on a reportlab canvas (invariant mode, so identical
    artifacts give identical bytes).

  build_plan_pdf(plan_text) → bytes
  export_plan_pdf(plan_text, path) → Path
    End-to-end helpers.  The file export is atomic: the PDF is written to a
    temporary file next to the target and renamed into place.  Any failure
    raises ExportError and leaves no partial file behind.

Pagination rules
----------------
Coordinates are millimetres from the top edge.  Before a line is placed:
  1. the first line containing an answer-key heading starts a new page
     when the current page already holds body lines (top margin 15 mm);
     later mentions inside the answer key do not break again;
  2. otherwise, a cursor past 270 mm starts a new page (top margin 20 mm).
Rule 1 takes precedence over rule 2.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from train_plan.b2_normalizer import (
    BODY_FONT,
    BODY_FONT_SIZE,
    BOLD_FONT,
    CONTENT_WIDTH_MM,
    Measure,
    StyledLine,
    helvetica_measure,
    normalize_plan,
)
from train_plan.errors import ExportError

logger = logging.getLogger(__name__)


# ─── Page geometry (mm) ──────────────────────────────────────────────────────

TITLE                = "Training Plan"
TITLE_FONT_SIZE      = 18
TITLE_Y_MM           = 20.0
LEFT_MARGIN_MM       = 15.0
FIRST_LINE_Y_MM      = 30.0
LINE_HEIGHT_MM       = 8.0
PAGE_BOTTOM_MM       = 270.0
OVERFLOW_TOP_MM      = 20.0
ANSWER_KEY_TOP_MM    = 15.0

ANSWER_KEY_MARKERS = ("Answer Key for Teachers", "Answer Key", "Answers for Teachers")

DEFAULT_FILENAME = "Training_Plan.pdf"


def is_answer_key_heading(text: str) -> bool:
    return any(marker in text for marker in ANSWER_KEY_MARKERS)


# ─── Layout model ────────────────────────────────────────────────────────────

class PageBreak(str, Enum):
    """Why a page was started."""
    FIRST      = "first"
    OVERFLOW   = "overflow"
    ANSWER_KEY = "answer_key"


@dataclass(frozen=True)
class PlacedRun:
    text: str
    bold: bool
    x_mm: float


@dataclass(frozen=True)
class PlacedLine:
    index: int                  # position in the normalized line sequence
    y_mm:  float
    runs:  tuple[PlacedRun, ...]

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)


@dataclass(frozen=True)
class PageLayout:
    number: int
    started_by: PageBreak
    lines: tuple[PlacedLine, ...]


@dataclass(frozen=True)
class PlanArtifact:
    title: str
    pages: tuple[PageLayout, ...]

    def page_of(self, line_index: int) -> Optional[int]:
        """Page number holding normalized line *line_index*."""
        for page in self.pages:
            if any(l.index == line_index for l in page.lines):
                return page.number
        return None


# ─── Pagination ──────────────────────────────────────────────────────────────

def paginate(
    lines: Sequence[StyledLine],
    measure: Optional[Measure] = None,
    title: str = TITLE,
) -> PlanArtifact:
    """Assign every line a page, a y position and per-run x offsets."""
    measure = measure or helvetica_measure()
    pages: list[PageLayout] = []
    current: list[PlacedLine] = []
    started_by = PageBreak.FIRST
    y = FIRST_LINE_Y_MM
    in_answer_key = False   # only the section's first line forces a break

    for index, line in enumerate(lines):
        heading = not in_answer_key and is_answer_key_heading(line.text)
        if heading:
            in_answer_key = True
        if heading and current:
            pages.append(PageLayout(len(pages) + 1, started_by, tuple(current)))
            current, started_by, y = [], PageBreak.ANSWER_KEY, ANSWER_KEY_TOP_MM
        elif y > PAGE_BOTTOM_MM:
            pages.append(PageLayout(len(pages) + 1, started_by, tuple(current)))
            current, started_by, y = [], PageBreak.OVERFLOW, OVERFLOW_TOP_MM

        x = LEFT_MARGIN_MM
        placed: list[PlacedRun] = []
        for run in line.runs:
            placed.append(PlacedRun(run.text, run.bold, round(x, 4)))
            x += measure(run.text, run.bold)
        current.append(PlacedLine(index, y, tuple(placed)))
        y += LINE_HEIGHT_MM

    pages.append(PageLayout(len(pages) + 1, started_by, tuple(current)))
    return PlanArtifact(title=title, pages=tuple(pages))


# ─── Rendering ───────────────────────────────────────────────────────────────

def render_pdf(artifact: PlanArtifact) -> bytes:
    """Draw *artifact* and return raw PDF bytes."""
    page_h = A4[1]
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    c.setTitle(artifact.title)

    for page in artifact.pages:
        if page.number == 1:
            c.setFont(BOLD_FONT, TITLE_FONT_SIZE)
            c.drawString(LEFT_MARGIN_MM * mm, page_h - TITLE_Y_MM * mm, artifact.title)
        for line in page.lines:
            for run in line.runs:
                c.setFont(BOLD_FONT if run.bold else BODY_FONT, BODY_FONT_SIZE)
                c.drawString(run.x_mm * mm, page_h - line.y_mm * mm, run.text)
        c.showPage()

    c.save()
    return buf.getvalue()


def build_plan_pdf(plan_text: str) -> bytes:
    """Normalize, paginate and render *plan_text*; raises ExportError on failure."""
    try:
        plan = normalize_plan(plan_text, CONTENT_WIDTH_MM)
        artifact = paginate(plan.lines)
        data = render_pdf(artifact)
    except Exception as exc:
        logger.warning("PDF layout failed: %s", exc)
        raise ExportError(f"PDF layout failed: {exc}") from exc
    logger.debug("Rendered plan PDF: %d page(s), %d bytes", len(artifact.pages), len(data))
    return data


def export_plan_pdf(plan_text: str, path: Optional[os.PathLike | str] = None) -> Path:
    """
    Write the plan PDF to *path* (default ``Training_Plan.pdf`` in the cwd).

    The target only appears once the complete file has been written.
    """
    target = Path(path) if path is not None else Path(DEFAULT_FILENAME)
    data = build_plan_pdf(plan_text)

    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=target.parent, prefix=".", suffix=".pdf.part", delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        logger.warning("Could not save %s: %s", target, exc)
        raise ExportError(f"Could not save {target}: {exc}") from exc

    logger.info("Exported training plan to %s", target)
    return target
