"""Job Matcher - compares the resume with a job description and tailors it."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from ats_optimizer.clients.llm_client import DEFAULT_MODEL, LLMClient
from ats_optimizer.errors import MatchError
from ats_optimizer.models.match import JobMatchResult
from ats_optimizer.models.resume import ResumeSection

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an ATS resume tailoring expert. Compare a resume against a job description (JD).

1. Identify the JD keywords the resume already covers and the ones it is missing.
2. Rewrite the resume sections so they align with the JD, using JD keywords naturally.
   Keep every section id and title; use simple HTML (<b>, <ul>, <li>) in content.
   Never invent experience.

Respond with JSON only, in exactly this shape:
{
  "matching_keywords": ["string"],
  "missing_keywords": ["string"],
  "match_feedback": "string",
  "tailored_sections": [
    {"id": "string", "title": "string", "content": "string"}
  ]
}"""


class JobMatcher:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.2,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature

    async def match(
        self,
        resume_text: str,
        sections: Sequence[ResumeSection],
        job_description: str,
    ) -> JobMatchResult:
        """Match the resume against ``job_description``.

        The match percentage is derived from the keyword lists, never taken
        from the model.

        Raises:
            MatchError: empty job description or a failed call.
        """
        if not job_description.strip():
            raise MatchError("Please paste a job description first.")

        resume_sections = json.dumps(
            [{"id": s.id, "title": s.title, "content": s.content} for s in sections],
            ensure_ascii=False,
        )
        prompt = f"""## Job description
{job_description}

## Resume sections
{resume_sections}

## Resume text
{resume_text}

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
            result = JobMatchResult.model_validate(data)
        except Exception as exc:
            logger.error("Job match failed: %s", exc)
            raise MatchError(
                "Tailoring failed. Your job description was kept; please try again.",
                detail=str(exc),
            ) from exc

        logger.info(
            "Job match: %d matching, %d missing (%d%%)",
            len(result.matching_keywords),
            len(result.missing_keywords),
            result.match_percentage,
        )
        return result
