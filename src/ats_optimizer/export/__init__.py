"""Export section sequences as plain text, PDF or DOCX."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ats_optimizer.export.docx_renderer import generate_docx, render_docx
from ats_optimizer.export.normalizer import normalize
from ats_optimizer.export.pdf_renderer import render_pdf
from ats_optimizer.export.txt_exporter import render_txt
from ats_optimizer.models.resume import ResumeSection

DEFAULT_BASENAME = "ATS_Optimized_Resume"
EXPORT_FORMATS = ("txt", "pdf", "docx")

MIME_TYPES = {
    "txt": "text/plain",
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def export_filename(fmt: str, basename: str = DEFAULT_BASENAME) -> str:
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    return f"{basename}.{fmt}"


def render_bytes(sections: Iterable[ResumeSection], fmt: str) -> bytes:
    """Serialize ``sections`` in ``fmt`` and return the file contents."""
    if fmt == "txt":
        return render_txt(sections).encode("utf-8")
    if fmt == "pdf":
        return render_pdf(sections)
    if fmt == "docx":
        return render_docx(sections)
    raise ValueError(f"Unsupported export format: {fmt}")


def export_sections(
    sections: Iterable[ResumeSection],
    fmt: str,
    output_dir: str | Path = ".",
    basename: str = DEFAULT_BASENAME,
) -> Path:
    """Write ``<basename>.<fmt>`` into ``output_dir`` and return its path."""
    path = Path(output_dir) / export_filename(fmt, basename)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "docx":
        return generate_docx(sections, path)
    path.write_bytes(render_bytes(sections, fmt))
    return path


__all__ = [
    "DEFAULT_BASENAME",
    "EXPORT_FORMATS",
    "MIME_TYPES",
    "export_filename",
    "export_sections",
    "generate_docx",
    "normalize",
    "render_bytes",
    "render_docx",
    "render_pdf",
    "render_txt",
]
