"""Pydantic models for resume sections."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict


class ResumeSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str = ""  # rich-text markup (<b>, <ul>/<li>, <br>)
    original_content: str | None = None  # first pre-rewrite snapshot

    def with_rewrite(self, content: str) -> ResumeSection:
        """Return a copy holding rewritten content.

        The pre-rewrite content is captured as ``original_content`` only the
        first time; later rewrites keep the first snapshot.
        """
        original = self.original_content
        if original is None:
            original = self.content
        return self.model_copy(update={"content": content, "original_content": original})

    def with_content(self, content: str) -> ResumeSection:
        """Return a copy with manually edited content."""
        return self.model_copy(update={"content": content})

    @property
    def has_original(self) -> bool:
        return self.original_content is not None


class TailoredSection(BaseModel):
    """Section rewritten against a job description."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str = ""


def merge_sections(
    sections: Iterable[ResumeSection],
    updates: Mapping[str, ResumeSection],
) -> list[ResumeSection]:
    """Apply ``updates`` (keyed by section id) in one pass, keeping order."""
    return [updates.get(section.id, section) for section in sections]
