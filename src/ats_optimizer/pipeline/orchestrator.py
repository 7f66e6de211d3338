"""Session orchestrator - coordinates extraction, analysis, rewrites and export.

Every operation takes the current :class:`SessionState` and returns a new
one. On failure the caller keeps its old state object; nothing partial is
committed.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ats_optimizer.clients.llm_client import DEFAULT_MODEL, LLMClient
from ats_optimizer.errors import MatchError, RewriteError
from ats_optimizer.export import DEFAULT_BASENAME, export_sections
from ats_optimizer.models.match import JobMatchResult
from ats_optimizer.models.resume import ResumeSection, merge_sections
from ats_optimizer.models.session import AppStep, SessionState
from ats_optimizer.parsers.resume_parser import parse_resume
from ats_optimizer.pipeline.analyzer import ResumeAnalyzer
from ats_optimizer.pipeline.job_matcher import JobMatcher
from ats_optimizer.pipeline.section_rewriter import SectionRewriter

logger = logging.getLogger(__name__)


class ResumeWorkflow:
    """Runs the upload → dashboard → editor flow against one LLM client."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        model: str = DEFAULT_MODEL,
        analysis_temperature: float = 0.1,
        rewrite_temperature: float = 0.3,
        match_temperature: float = 0.2,
    ):
        self.analyzer = ResumeAnalyzer(llm, model=model, temperature=analysis_temperature)
        self.rewriter = SectionRewriter(llm, model=model, temperature=rewrite_temperature)
        self.matcher = JobMatcher(llm, model=model, temperature=match_temperature)

    async def analyze_file(self, state: SessionState, file_path: str | Path) -> SessionState:
        """Extract text from ``file_path`` and analyze it.

        Raises:
            ExtractionError: unsupported or unreadable file.
            AnalysisError: the analysis call failed.
        """
        text = await asyncio.to_thread(parse_resume, file_path)
        return await self.analyze_text(state, text)

    async def analyze_text(self, state: SessionState, resume_text: str) -> SessionState:
        analysis = await self.analyzer.analyze(resume_text)
        return state.model_copy(update={
            "step": AppStep.DASHBOARD,
            "resume_text": resume_text,
            "analysis": analysis,
            "sections": list(analysis.structured_sections),
        })

    async def rewrite_all(self, state: SessionState, mode: str) -> SessionState:
        """Rewrite every section; failed sections keep their content."""
        sections = await self.rewriter.rewrite_all(state.sections, mode)
        return state.model_copy(update={"step": AppStep.EDITOR, "sections": sections})

    async def rewrite_section(
        self, state: SessionState, section_id: str, mode: str
    ) -> SessionState:
        """Rewrite one section.

        Raises:
            RewriteError: unknown section id or a failed call.
        """
        section = _require_section(state, section_id)
        rewritten = await self.rewriter.rewrite_section(section, mode)
        return state.model_copy(update={
            "sections": merge_sections(state.sections, {section_id: rewritten}),
        })

    def edit_section(self, state: SessionState, section_id: str, content: str) -> SessionState:
        """Apply a manual edit to one section."""
        section = _require_section(state, section_id)
        return state.model_copy(update={
            "sections": merge_sections(state.sections, {section_id: section.with_content(content)}),
        })

    async def match_job(self, state: SessionState, job_description: str) -> JobMatchResult:
        """Match the current sections against a job description.

        Raises:
            MatchError: the state is left as it was.
        """
        return await self.matcher.match(state.resume_text, state.sections, job_description)

    @staticmethod
    async def read_job_description(file_path: str | Path) -> str:
        """Extract a job description from a text, PDF or DOCX file.

        Raises:
            ExtractionError: unsupported or unreadable file.
        """
        return await asyncio.to_thread(parse_resume, file_path)

    def apply_tailoring(self, state: SessionState, match: JobMatchResult) -> SessionState:
        """Replace the sections with the tailored ones and open the editor.

        Sections whose id already existed keep their first-seen original.
        """
        if not match.tailored_sections:
            logger.info("Job match returned no tailored sections; keeping current ones")
            return state.model_copy(update={"step": AppStep.EDITOR})

        current = {s.id: s for s in state.sections}
        sections: list[ResumeSection] = []
        for tailored in match.tailored_sections:
            existing = current.get(tailored.id)
            if existing is None:
                sections.append(
                    ResumeSection(id=tailored.id, title=tailored.title, content=tailored.content)
                )
            else:
                sections.append(
                    existing.with_rewrite(tailored.content).model_copy(
                        update={"title": tailored.title}
                    )
                )
        return state.model_copy(update={"step": AppStep.EDITOR, "sections": sections})

    def open_editor(self, state: SessionState) -> SessionState:
        return state.model_copy(update={"step": AppStep.EDITOR})

    def open_dashboard(self, state: SessionState) -> SessionState:
        return state.model_copy(update={"step": AppStep.DASHBOARD})

    @staticmethod
    def reset() -> SessionState:
        return SessionState()

    @staticmethod
    def export(
        state: SessionState,
        fmt: str,
        output_dir: str | Path = ".",
        basename: str = DEFAULT_BASENAME,
    ) -> Path:
        """Write the current sections in ``fmt``. Failures here are bugs."""
        try:
            path = export_sections(state.sections, fmt, output_dir, basename)
        except Exception:
            logger.exception("Export to %s failed", fmt)
            raise
        logger.info("Exported %d sections to %s", len(state.sections), path)
        return path

    @staticmethod
    def tailored_sections(match: JobMatchResult) -> list[ResumeSection]:
        """The tailored rewrite as exportable sections, without touching the session."""
        return [
            ResumeSection(id=t.id, title=t.title, content=t.content)
            for t in match.tailored_sections or ()
        ]

    @staticmethod
    def export_tailored(
        match: JobMatchResult,
        fmt: str,
        output_dir: str | Path = ".",
        basename: str = DEFAULT_BASENAME,
    ) -> Path:
        """Write the tailored sections in ``fmt`` without applying them."""
        sections = ResumeWorkflow.tailored_sections(match)
        if not sections:
            raise MatchError("The job match returned no tailored sections to export.")
        path = export_sections(sections, fmt, output_dir, basename)
        logger.info("Exported %d tailored sections to %s", len(sections), path)
        return path


def _require_section(state: SessionState, section_id: str) -> ResumeSection:
    section = state.section(section_id)
    if section is None:
        raise RewriteError(f"No section with id {section_id!r}.")
    return section
