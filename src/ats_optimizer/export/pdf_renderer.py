"""Paginated PDF export using fpdf2 (pure Python, no system deps).

Layout is computed up front by :func:`layout_sections`: a running vertical
cursor decides every page break before a line is placed, so a wrapped line
never straddles two pages. :func:`render_pdf` then only draws the plan.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from fpdf import FPDF

from ats_optimizer.export.normalizer import normalize
from ats_optimizer.models.resume import ResumeSection

logger = logging.getLogger(__name__)

# A4 portrait geometry, millimetres
MARGIN = 15.0
BOTTOM_MARGIN = 15.0
TITLE_BLOCK_HEIGHT = 20.0  # title + rule + at least one body line
TITLE_RULE_GAP = 2.0
RULE_BODY_GAP = 6.0
TITLE_LINE_HEIGHT = 6.0
LINE_HEIGHT = 5.5
LINE_CLEARANCE = 7.0
SECTION_SPACING = 6.0

TITLE_FONT_SIZE = 12
BODY_FONT_SIZE = 10
TITLE_COLOR = (30, 41, 59)
RULE_COLOR = (226, 232, 240)
BODY_COLOR = (51, 65, 85)

CORE_FONT = "Helvetica"
UNICODE_FONT = "ResumeSans"

# (regular, bold) candidates on macOS, Linux, Windows
_UNICODE_FONT_PATHS = [
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
     "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/TTF/DejaVuSans.ttf", "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/dejavu/DejaVuSans.ttf", "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
    ("/Library/Fonts/Arial Unicode.ttf", None),
    ("C:/Windows/Fonts/arial.ttf", "C:/Windows/Fonts/arialbd.ttf"),
]

# Typographic characters outside Latin-1 that core fonts cannot encode
_LATIN1_FALLBACKS = str.maketrans({
    "•": "·",
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "…": "...",
})


@dataclass(frozen=True)
class PlacedLine:
    """One drawable item. ``y`` is the baseline (text) or rule position."""

    page: int
    y: float
    text: str
    kind: str  # "title" | "rule" | "body"


def _find_unicode_font() -> tuple[str, str | None] | None:
    for regular, bold in _UNICODE_FONT_PATHS:
        if Path(regular).exists():
            return regular, (bold if bold and Path(bold).exists() else None)
    return None


class PdfTypesetter:
    """Owns the FPDF document, its fonts and the line-wrapping metric."""

    def __init__(self) -> None:
        self.pdf = FPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(auto=False)
        self.pdf.add_page()  # line measuring needs an open page
        self.family = CORE_FONT
        found = _find_unicode_font()
        if found:
            regular, bold = found
            try:
                self.pdf.add_font(UNICODE_FONT, "", regular)
                self.pdf.add_font(UNICODE_FONT, "B", bold or regular)
                self.family = UNICODE_FONT
            except Exception:
                logger.debug("Failed to load font %s, using %s", regular, CORE_FONT)
        self.use_body_font()

    @property
    def unicode(self) -> bool:
        return self.family == UNICODE_FONT

    @property
    def content_width(self) -> float:
        return self.pdf.w - 2 * MARGIN

    @property
    def bottom_limit(self) -> float:
        return self.pdf.h - BOTTOM_MARGIN

    def use_title_font(self) -> None:
        self.pdf.set_font(self.family, style="B", size=TITLE_FONT_SIZE)

    def use_body_font(self) -> None:
        self.pdf.set_font(self.family, style="", size=BODY_FONT_SIZE)

    def safe_text(self, text: str) -> str:
        """Ensure text is encodable by the current font."""
        if self.unicode:
            return text
        text = text.translate(_LATIN1_FALLBACKS)
        return text.encode("latin-1", errors="replace").decode("latin-1")

    def wrap(self, text: str, width: float) -> list[str]:
        """Break ``text`` into lines no wider than ``width`` in the current font.

        Uses fpdf2's own line breaker; words wider than ``width`` are split.
        """
        lines = self.pdf.multi_cell(width, LINE_HEIGHT, text, dry_run=True, output="LINES")
        return [line.strip() for line in lines if line.strip()]


def layout_sections(
    sections: Iterable[ResumeSection],
    typesetter: PdfTypesetter | None = None,
) -> list[PlacedLine]:
    """Place every title, rule and wrapped body line on a page."""
    ts = typesetter or PdfTypesetter()
    limit = ts.bottom_limit
    page, y = 1, MARGIN
    placed: list[PlacedLine] = []

    for section in sections:
        ts.use_title_font()
        title_lines = ts.wrap(ts.safe_text(section.title.upper()), ts.content_width) or [""]
        title_extra = (len(title_lines) - 1) * TITLE_LINE_HEIGHT
        if y + title_extra + TITLE_BLOCK_HEIGHT > limit:
            page, y = page + 1, MARGIN

        for n, title_line in enumerate(title_lines):
            if n:
                y += TITLE_LINE_HEIGHT
            placed.append(PlacedLine(page, y, title_line, "title"))
        y += TITLE_RULE_GAP
        placed.append(PlacedLine(page, y, "", "rule"))
        y += RULE_BODY_GAP

        ts.use_body_font()
        for line in normalize(section.content):
            for wrapped in ts.wrap(ts.safe_text(line), ts.content_width):
                if y + LINE_CLEARANCE > limit:
                    page, y = page + 1, MARGIN
                placed.append(PlacedLine(page, y, wrapped, "body"))
                y += LINE_HEIGHT

        y += SECTION_SPACING

    return placed


def render_pdf(sections: Iterable[ResumeSection]) -> bytes:
    """Render sections to A4 PDF bytes."""
    ts = PdfTypesetter()
    placed = layout_sections(sections, ts)
    pdf = ts.pdf

    for item in placed:
        while pdf.page < item.page:
            pdf.add_page()
        if item.kind == "rule":
            pdf.set_draw_color(*RULE_COLOR)
            pdf.line(MARGIN, item.y, pdf.w - MARGIN, item.y)
        elif item.kind == "title":
            ts.use_title_font()
            pdf.set_text_color(*TITLE_COLOR)
            pdf.text(MARGIN, item.y, item.text)
        else:
            ts.use_body_font()
            pdf.set_text_color(*BODY_COLOR)
            pdf.text(MARGIN, item.y, item.text)

    logger.debug("Rendered PDF: %d items on %d pages", len(placed), pdf.page)
    return bytes(pdf.output())
