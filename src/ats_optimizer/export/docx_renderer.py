"""DOCX export: one heading per section, one justified paragraph per line."""

from __future__ import annotations

from collections.abc import Iterable
from io import BytesIO
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from ats_optimizer.export.normalizer import normalize
from ats_optimizer.models.resume import ResumeSection

HEADING_LEVEL = 2
BODY_FONT_SIZE = Pt(11)


def build_docx(sections: Iterable[ResumeSection]) -> Document:
    """Build an in-memory python-docx document for ``sections``."""
    doc = Document()
    for section in sections:
        _render_section(doc, section.title, section.content)
    return doc


def _render_section(doc: Document, title: str, content: str) -> None:
    heading = doc.add_heading(title.upper(), level=HEADING_LEVEL)
    heading.paragraph_format.space_before = Pt(12)
    heading.paragraph_format.space_after = Pt(6)

    for line in normalize(content):
        if not line.strip():
            continue
        p = doc.add_paragraph()
        run = p.add_run(line)
        run.font.size = BODY_FONT_SIZE
        p.paragraph_format.space_after = Pt(4)
        p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY


def render_docx(sections: Iterable[ResumeSection]) -> bytes:
    buf = BytesIO()
    build_docx(sections).save(buf)
    return buf.getvalue()


def generate_docx(sections: Iterable[ResumeSection], output_path: str | Path) -> Path:
    """Write the DOCX to ``output_path`` and return it."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    build_docx(sections).save(str(output_path))
    return output_path
