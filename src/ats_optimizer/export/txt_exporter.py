"""Plain-text export (the reference serialization)."""

from __future__ import annotations

from collections.abc import Iterable

from ats_optimizer.export.normalizer import normalize
from ats_optimizer.models.resume import ResumeSection


def render_txt(sections: Iterable[ResumeSection]) -> str:
    """Uppercased title, ``=`` underline, body lines, blank separator."""
    parts: list[str] = []
    for section in sections:
        parts.append(f"{section.title.upper()}\n")
        parts.append(f"{'=' * len(section.title)}\n")
        parts.append("\n".join(normalize(section.content)) + "\n\n")
    return "".join(parts)
