"""Pydantic models for job description matching and section rewrites."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from ats_optimizer.models.resume import TailoredSection
from ats_optimizer.scoring import round_half_up


class ImprovedContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    professional: str
    ats_optimized: str


class JobMatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matching_keywords: list[str]
    missing_keywords: list[str]
    match_feedback: str = ""
    tailored_sections: list[TailoredSection] | None = None

    @model_validator(mode="after")
    def _check_unique_tailored_ids(self) -> JobMatchResult:
        ids = [s.id for s in self.tailored_sections or ()]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate tailored section ids: {duplicates}")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def match_percentage(self) -> int:
        matched = len(self.matching_keywords)
        total = matched + len(self.missing_keywords)
        if total == 0:
            return 0
        return round_half_up(matched / total * 100)
