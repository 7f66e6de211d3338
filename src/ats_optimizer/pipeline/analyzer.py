"""Resume Analyzer - structural and skill audit of an uploaded resume."""

from __future__ import annotations

import logging

from ats_optimizer.clients.llm_client import DEFAULT_MODEL, LLMClient
from ats_optimizer.errors import AnalysisError
from ats_optimizer.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a forensic ATS (applicant tracking system) auditor. Your job is purely diagnostic.

Rules:
1. Split the resume into its natural sections (Summary, Experience, Education, Skills, Projects, ...).
   Give every section a short unique id and keep its content as simple HTML
   (<b>, <ul>, <li>, <br>). Keep content concise but preserve meaning.
2. Separate hard skills (tools, technologies, standards) from soft skills.
   Treat synonyms as one skill (React and React.js are the same).
3. Infer the target role and list the critical hard skills the resume is missing.
4. Flag non-standard ATS formatting and critical errors (e.g. missing contact information).
5. Count bullet lines, how many carry a number or percentage, and how many start with a weak verb.

Respond with JSON only, in exactly this shape:
{
  "detected_role": "string",
  "hard_skills_found": ["string"],
  "missing_hard_skills": ["string"],
  "soft_skills_found": ["string"],
  "metrics": {
    "total_bullet_points": 0,
    "bullets_with_metrics": 0,
    "weak_verbs_count": 0,
    "section_count": 0
  },
  "formatting_issues": ["string"],
  "critical_errors": ["string"],
  "strengths": ["string"],
  "weaknesses": ["string"],
  "summary_feedback": "string",
  "structured_sections": [
    {"id": "string", "title": "string", "content": "string"}
  ]
}"""

ANALYSIS_FAILED = (
    "Analysis failed. The resume text might be too complex or the API limit was reached."
)


class ResumeAnalyzer:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature

    async def analyze(self, resume_text: str) -> AnalysisResult:
        """Analyze resume text and attach the locally computed score.

        Raises:
            AnalysisError: on any failure; nothing partial is returned.
        """
        if not resume_text.strip():
            raise AnalysisError("The resume text is empty.")

        prompt = f"""Analyze this resume:

---
{resume_text}
---

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
            result = AnalysisResult.model_validate(_without_snapshots(data))
        except Exception as exc:
            logger.error("Resume analysis failed: %s", exc)
            raise AnalysisError(ANALYSIS_FAILED, detail=str(exc)) from exc

        logger.info(
            "Analysis complete: role=%s sections=%d score=%d",
            result.detected_role,
            len(result.structured_sections),
            result.overall_score,
        )
        return result


def _without_snapshots(data: dict) -> dict:
    """Drop any ``original_content`` the model put on sections; snapshots
    are only taken by rewrites."""
    sections = data.get("structured_sections")
    if not isinstance(sections, list):
        return data
    cleaned = [
        {k: v for k, v in s.items() if k != "original_content"} if isinstance(s, dict) else s
        for s in sections
    ]
    return {**data, "structured_sections": cleaned}
