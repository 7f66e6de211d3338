"""Section Rewriter - per-section and whole-document rewrites."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ats_optimizer.clients.llm_client import DEFAULT_MODEL, LLMClient
from ats_optimizer.errors import RewriteError
from ats_optimizer.models.match import ImprovedContent
from ats_optimizer.models.resume import ResumeSection, merge_sections

logger = logging.getLogger(__name__)

REWRITE_MODES = ("professional", "ats_optimized")

SUMMARY_KEYWORDS = ("summary", "profile", "about")
EXPERIENCE_KEYWORDS = ("experience", "work", "history", "employment")

SYSTEM_PROMPT = """\
You are an elite ATS resume strategist. You rewrite one resume section at a time.

Respond with JSON only, in exactly this shape:
{
  "professional": "a standard, formal business rewrite",
  "ats_optimized": "the high-impact rewrite that strictly follows the section rules"
}

Use HTML tags (<b>, <ul>, <li>) for formatting. Never invent employers, dates or degrees."""

SECTION_RULES = {
    "summary": """\
Rules for a summary:
1. Open with: "[Certification/Adjective] [Current Job Title] with [X]+ years of experience in [Industry]."
2. Delete subjective filler ("Passionate about", "Looking for", "Hardworking"); use concrete hard skills instead.
3. One concise paragraph of 3-4 sentences. No bullet points.
4. Keep technical keywords (e.g. PMP, Python, SEC) intact.""",
    "experience": """\
Rules for experience:
1. Apply the XYZ formula: "Accomplished [X] as measured by [Y], by doing [Z]".
2. Start every bullet with a strong past-tense action verb (Engineered, Spearheaded, Optimized, Reduced).
3. Quantify impact where the context implies it.
4. Return an HTML list (<ul><li>...</li></ul>) and bold (<b>) key metrics inside each <li>.""",
    "general": """\
Rules for general sections:
1. Convert to a clean, professional format.
2. Fix grammar and clarity.
3. Use <ul><li> for lists where it fits.""",
}


def section_kind(title: str) -> str:
    """Classify a section title as ``summary``, ``experience`` or ``general``."""
    lowered = title.lower()
    if any(k in lowered for k in SUMMARY_KEYWORDS):
        return "summary"
    if any(k in lowered for k in EXPERIENCE_KEYWORDS):
        return "experience"
    return "general"


@dataclass(frozen=True)
class RewriteOutcome:
    """Result of one batch item: the rewritten section or the failure."""

    section: ResumeSection
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SectionRewriter:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature

    async def improve(self, title: str, content: str) -> ImprovedContent:
        """Ask for both rewrite variants of one section.

        Raises:
            RewriteError: the call failed or returned an unusable payload.
        """
        prompt = f"""Rewrite the "{title}" section.

Input content:
---
{content}
---

{SECTION_RULES[section_kind(title)]}

Respond with JSON only."""

        try:
            data = await self.llm.generate_json(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
            )
            if not isinstance(data, dict):
                raise ValueError(f"Expected dict from LLM, got {type(data).__name__}")
            return ImprovedContent.model_validate(data)
        except Exception as exc:
            logger.error("Rewrite failed for section %r: %s", title, exc)
            raise RewriteError(
                f"Could not rewrite the {title} section.", detail=str(exc)
            ) from exc

    async def rewrite_section(self, section: ResumeSection, mode: str) -> ResumeSection:
        """Rewrite one section; the first rewrite snapshots the original."""
        _check_mode(mode)
        improved = await self.improve(section.title, section.content)
        return section.with_rewrite(getattr(improved, mode))

    async def _attempt(self, section: ResumeSection, mode: str) -> RewriteOutcome:
        try:
            return RewriteOutcome(await self.rewrite_section(section, mode))
        except RewriteError as exc:
            logger.warning("Section %r failed to improve, keeping original", section.title)
            return RewriteOutcome(section, exc)

    async def rewrite_all(
        self, sections: Sequence[ResumeSection], mode: str
    ) -> list[ResumeSection]:
        """Rewrite every section concurrently.

        A failed section keeps its current content. Results are merged into
        the sequence in a single step once every call has finished.

        Raises:
            RewriteError: invalid mode, or the dispatch itself failed.
        """
        _check_mode(mode)
        try:
            outcomes = await asyncio.gather(*(self._attempt(s, mode) for s in sections))
        except Exception as exc:
            logger.error("Batch rewrite failed: %s", exc)
            raise RewriteError(
                "The AI rewrite engine failed. Please try again.", detail=str(exc)
            ) from exc

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info("Rewrote %d/%d sections (%s)", len(outcomes) - failed, len(outcomes), mode)
        return merge_sections(sections, {o.section.id: o.section for o in outcomes if o.ok})


def _check_mode(mode: str) -> None:
    if mode not in REWRITE_MODES:
        raise RewriteError(
            f"Unknown rewrite mode: {mode}. Choose one of {', '.join(REWRITE_MODES)}."
        )
