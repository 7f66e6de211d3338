"""Session snapshot persisted between steps."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ats_optimizer.models.analysis import AnalysisResult
from ats_optimizer.models.resume import ResumeSection


class AppStep(str, Enum):
    UPLOAD = "upload"
    DASHBOARD = "dashboard"
    EDITOR = "editor"


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: AppStep = AppStep.UPLOAD
    resume_text: str = ""
    analysis: AnalysisResult | None = None
    sections: list[ResumeSection] = []

    def section(self, section_id: str) -> ResumeSection | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None
