"""Pydantic models for resume analysis output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from ats_optimizer import scoring
from ats_optimizer.models.resume import ResumeSection


class ResumeMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_bullet_points: int = Field(ge=0)
    bullets_with_metrics: int = Field(ge=0)
    weak_verbs_count: int = Field(ge=0)
    section_count: int = Field(default=0, ge=0)

    @property
    def metric_ratio(self) -> float:
        """Share of bullet lines carrying a quantified result (0.0-1.0+)."""
        if self.total_bullet_points == 0:
            return 0.0
        return self.bullets_with_metrics / self.total_bullet_points


class AnalysisData(BaseModel):
    """Structured analysis as returned by the model, before scoring."""

    model_config = ConfigDict(frozen=True)

    detected_role: str
    hard_skills_found: list[str]
    missing_hard_skills: list[str]
    soft_skills_found: list[str] = []
    metrics: ResumeMetrics
    formatting_issues: list[str]
    critical_errors: list[str] = []
    strengths: list[str] = []
    weaknesses: list[str] = []
    summary_feedback: str = ""
    structured_sections: list[ResumeSection]

    @model_validator(mode="after")
    def _check_unique_section_ids(self) -> AnalysisData:
        seen: set[str] = set()
        for section in self.structured_sections:
            if section.id in seen:
                raise ValueError(f"Duplicate section id: {section.id!r}")
            seen.add(section.id)
        return self


class AnalysisResult(AnalysisData):
    """Analysis plus the locally computed compliance score.

    ``overall_score`` is derived on every access; a value present in input
    data is ignored.
    """

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_score(self) -> int:
        return scoring.calculate_score(self)

    @property
    def score_breakdown(self) -> scoring.ScoreBreakdown:
        return scoring.score_breakdown(self)
