"""
Block 2: Markdown / HTML Normalizer
===================================
Prepares a GeneratedPlan for display and PDF export.

  canonicalize_plan(text, fmt) → str
    Markdown is the canonical plan representation.  HTML replies (requested
    via PlanFormat.HTML, or returned unprompted) are converted to markdown
    with BeautifulSoup before the plan reaches the store.

  extract_bold_spans(text) → list[str]
    Distinct ``**…**`` texts in first-seen order.

  strip_markdown(text) → str
    Display text: header markers, emphasis markers, fences, blockquotes and
    stray ``#`` / ``*`` removed; bullets become "•"; at most one blank line
    between paragraphs.

  normalize_plan(text, width_mm, measure) → NormalizedPlan
    Display text + bold spans + word-wrapped StyledLines.  Bold runs are
    captured by position while each source line is tokenised, so a short
    bold span that is a substring of a longer one can never be mis-styled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from train_plan.models import PlanFormat


# ─── Typography shared with the PDF exporter ─────────────────────────────────

BODY_FONT        = "Helvetica"
BOLD_FONT        = "Helvetica-Bold"
BODY_FONT_SIZE   = 12
CONTENT_WIDTH_MM = 180.0

BULLET = "•"

Measure = Callable[[str, bool], float]


def helvetica_measure(font_size: float = BODY_FONT_SIZE) -> Measure:
    """Return a measure(text, bold) → width in millimetres for Helvetica."""
    def measure(text: str, bold: bool) -> float:
        return stringWidth(text, BOLD_FONT if bold else BODY_FONT, font_size) / mm
    return measure


# ─── Output models ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextRun:
    text: str
    bold: bool = False


@dataclass(frozen=True)
class StyledLine:
    """One output line: left-to-right runs of normal / bold text."""
    runs: tuple[TextRun, ...] = ()

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class NormalizedPlan:
    display_text: str
    bold_spans:   tuple[str, ...]
    lines:        tuple[StyledLine, ...]


# ─── Markdown syntax ─────────────────────────────────────────────────────────

_FENCE_RE  = re.compile(r"^\s*(```|~~~)")
_HRULE_RE  = re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$")
_QUOTE_RE  = re.compile(r"^\s*>\s?")
_HEADER_RE = re.compile(r"^\s{0,3}#{1,6}\s*")
_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+")
_BOLD_RE   = re.compile(r"\*\*(.+?)\*\*")
_STRAY_RE  = re.compile(r"[#*`]")
_PIECE_RE  = re.compile(r"\S+|\s+")


def extract_bold_spans(text: str) -> list[str]:
    """Return the distinct ``**bold**`` texts of *text* in first-seen order."""
    spans: list[str] = []
    for m in _BOLD_RE.finditer(text):
        span = _STRAY_RE.sub("", m.group(1)).strip()
        if span and span not in spans:
            spans.append(span)
    return spans


def _prepare_line(line: str) -> Optional[str]:
    """Strip block-level syntax from one source line; None drops the line."""
    if _FENCE_RE.match(line):
        return None
    if _HRULE_RE.match(line):
        return ""
    line = _QUOTE_RE.sub("", line)
    line = _HEADER_RE.sub("", line)
    line = _BULLET_RE.sub(lambda m: f"{m.group(1)}{BULLET} ", line)
    return line.rstrip()


def _tokenise(line: str) -> list[TextRun]:
    """Split a prepared line into runs, bold where ``**…**`` delimited it."""
    runs: list[TextRun] = []
    pos = 0
    for m in _BOLD_RE.finditer(line):
        before = _STRAY_RE.sub("", line[pos:m.start()])
        if before:
            runs.append(TextRun(before))
        inner = _STRAY_RE.sub("", m.group(1))
        if inner:
            runs.append(TextRun(inner, bold=True))
        pos = m.end()
    tail = _STRAY_RE.sub("", line[pos:]).rstrip()
    if tail:
        runs.append(TextRun(tail))
    return runs


def _paragraphs(text: str) -> list[list[TextRun]]:
    """Source lines → run lists, with blank runs collapsed to one empty entry."""
    paragraphs: list[list[TextRun]] = []
    for raw in text.replace("\r\n", "\n").split("\n"):
        line = _prepare_line(raw)
        if line is None:
            continue
        runs = _tokenise(line)
        if not "".join(r.text for r in runs).strip():
            if paragraphs and paragraphs[-1]:
                paragraphs.append([])
            continue
        paragraphs.append(runs)
    while paragraphs and not paragraphs[-1]:
        paragraphs.pop()
    return paragraphs


def strip_markdown(text: str) -> str:
    """Return plain display text for a markdown plan."""
    return "\n".join("".join(r.text for r in p) for p in _paragraphs(text))


# ─── Word wrapping ───────────────────────────────────────────────────────────

def _merge(pieces: list[tuple[str, bool]]) -> StyledLine:
    runs: list[TextRun] = []
    for text, bold in pieces:
        if runs and runs[-1].bold == bold:
            runs[-1] = TextRun(runs[-1].text + text, bold)
        else:
            runs.append(TextRun(text, bold))
    if runs:
        runs[-1] = TextRun(runs[-1].text.rstrip(), runs[-1].bold)
        if not runs[-1].text:
            runs.pop()
    return StyledLine(tuple(runs))


def wrap_runs(runs: Iterable[TextRun], width_mm: float, measure: Measure) -> list[StyledLine]:
    """Greedy word-wrap of one paragraph to *width_mm*."""
    lines: list[StyledLine] = []
    current: list[tuple[str, bool]] = []
    used = 0.0
    at_start = True

    for run in runs:
        for piece in _PIECE_RE.findall(run.text):
            w = measure(piece, run.bold)
            if piece.isspace():
                # keep indentation of the first line only
                if current or at_start:
                    current.append((piece, run.bold))
                    used += w
                continue
            at_start = False
            if current and used + w > width_mm:
                lines.append(_merge(current))
                current, used = [], 0.0
            if w > width_mm:
                chunk = ""
                for ch in piece:
                    if chunk and measure(chunk + ch, run.bold) > width_mm:
                        lines.append(StyledLine((TextRun(chunk, run.bold),)))
                        chunk = ""
                    chunk += ch
                piece, w = chunk, measure(chunk, run.bold)
            current.append((piece, run.bold))
            used += w

    if current:
        lines.append(_merge(current))
    return lines or [StyledLine()]


def normalize_plan(
    text: str,
    width_mm: float = CONTENT_WIDTH_MM,
    measure: Optional[Measure] = None,
) -> NormalizedPlan:
    """Normalize a markdown plan for display and export."""
    measure = measure or helvetica_measure()
    paragraphs = _paragraphs(text)

    spans: list[str] = []
    lines: list[StyledLine] = []
    for runs in paragraphs:
        for r in runs:
            span = r.text.strip()
            if r.bold and span and span not in spans:
                spans.append(span)
        if runs:
            lines.extend(wrap_runs(runs, width_mm, measure))
        else:
            lines.append(StyledLine())

    return NormalizedPlan(
        display_text="\n".join("".join(r.text for r in p) for p in paragraphs),
        bold_spans=tuple(spans),
        lines=tuple(lines),
    )


# ─── HTML → markdown ─────────────────────────────────────────────────────────

_HTML_START_RE = re.compile(r"^\s*<(!doctype|html|body|div|section|article|h[1-6]|p|ul|ol)\b", re.I)
_HTML_FENCE_RE = re.compile(r"^\s*```(?:html)?\s*\n(.*?)\n\s*```\s*$", re.S | re.I)
_WS_RE         = re.compile(r"\s+")
_ANY_TAG_RE    = re.compile(r"</?(h[1-6]|p|ul|ol|li|strong|b|em|i|br|div|section|table)\b[^>]*>", re.I)

_CONTAINER_TAGS = {"html", "body", "div", "section", "article", "main", "header", "footer"}


def _inline(node) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return _WS_RE.sub(" ", str(node))
    if not isinstance(node, Tag):
        return ""
    if node.name == "br":
        return "\n"
    if node.name in ("ul", "ol"):
        return ""
    inner = "".join(_inline(c) for c in node.children)
    if node.name in ("strong", "b") and inner.strip():
        return f"**{inner.strip()}**"
    if node.name in ("em", "i") and inner.strip():
        return f"*{inner.strip()}*"
    return inner


def _list_items(node: Tag, out: list[str], depth: int) -> None:
    ordered = node.name == "ol"
    for n, li in enumerate(node.find_all("li", recursive=False), start=1):
        marker = f"{n}." if ordered else "-"
        text = "".join(_inline(c) for c in li.children).strip()
        out.append(f"{'  ' * depth}{marker} {text}")
        for sub in li.find_all(["ul", "ol"], recursive=False):
            _list_items(sub, out, depth + 1)


def _blocks(node: Tag, out: list[str]) -> None:
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = _WS_RE.sub(" ", str(child)).strip()
            if text:
                out.append(text)
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name
        if name in ("head", "style", "script", "title"):
            continue
        if re.fullmatch(r"h[1-6]", name):
            out.append("#" * int(name[1]) + " " + _inline(child).strip())
        elif name in ("ul", "ol"):
            items: list[str] = []
            _list_items(child, items, 0)
            out.append("\n".join(items))
        elif name in _CONTAINER_TAGS:
            _blocks(child, out)
        elif name == "tr":
            cells = [_inline(td).strip() for td in child.find_all(["td", "th"])]
            out.append(" - ".join(c for c in cells if c))
        elif name in ("table", "thead", "tbody"):
            _blocks(child, out)
        elif name == "hr":
            out.append("---")
        else:
            text = _inline(child).strip()
            if text:
                out.append("\n".join(l.strip() for l in text.split("\n")))


def html_to_markdown(html: str) -> str:
    """Convert an HTML plan into canonical markdown."""
    fenced = _HTML_FENCE_RE.match(html)
    if fenced:
        html = fenced.group(1)
    soup = BeautifulSoup(html, "html.parser")
    out: list[str] = []
    _blocks(soup, out)
    return "\n\n".join(b for b in out if b.strip())


def looks_like_html(text: str) -> bool:
    fenced = _HTML_FENCE_RE.match(text)
    return bool(_HTML_START_RE.match(fenced.group(1) if fenced else text))


def canonicalize_plan(text: str, requested: PlanFormat = PlanFormat.MARKDOWN) -> str:
    """
    Return the markdown form of a provider reply.

    A reply is converted only when it actually carries HTML: any known tag
    when HTML was requested, a leading block tag otherwise.  Markdown replies
    pass through whatever format was asked for.
    """
    if looks_like_html(text) or (requested == PlanFormat.HTML and _ANY_TAG_RE.search(text)):
        return html_to_markdown(text)
    return text.strip()
