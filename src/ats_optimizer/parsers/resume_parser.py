"""Extract plain text from uploaded resume files."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ats_optimizer.errors import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt", ".md")


def parse_resume(file_path: str | Path) -> str:
    """Parse a resume file (PDF, DOCX, TXT, MD) and return clean plain text.

    Raises:
        UnsupportedFormatError: the suffix is not one we can read.
        ExtractionError: the file could not be read or held no text.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(
            "Unsupported file format. Please upload a PDF or Word (.docx) file.",
            detail=suffix or path.name,
        )

    try:
        if suffix == ".pdf":
            raw = _parse_pdf(path)
        elif suffix == ".docx":
            raw = _parse_docx(path)
        else:
            raw = path.read_text(encoding="utf-8")
    except Exception as exc:
        logger.error("Text extraction failed for %s: %s", path.name, exc)
        raise ExtractionError(
            "Could not read text from the uploaded file.", detail=str(exc)
        ) from exc

    text = clean_text(raw)
    if not text:
        raise ExtractionError("The uploaded file does not contain any readable text.")
    logger.info("Extracted %d characters from %s", len(text), path.name)
    return text


def clean_text(text: str) -> str:
    """Remove extraction artifacts: BOM and zero-width characters, ragged
    spacing, trailing whitespace and runs of blank lines."""
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)

    lines = []
    for line in text.splitlines():
        lines.append(re.sub(r"[ \t]{2,}", " ", line).strip())
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(path: Path) -> str:
    import fitz  # pymupdf

    doc = fitz.open(str(path))
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _parse_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
