"""Data models for the ATS optimizer."""

from ats_optimizer.models.analysis import AnalysisData, AnalysisResult, ResumeMetrics
from ats_optimizer.models.match import ImprovedContent, JobMatchResult
from ats_optimizer.models.resume import ResumeSection, TailoredSection, merge_sections
from ats_optimizer.models.session import AppStep, SessionState

__all__ = [
    "AnalysisData",
    "AnalysisResult",
    "AppStep",
    "ImprovedContent",
    "JobMatchResult",
    "ResumeMetrics",
    "ResumeSection",
    "SessionState",
    "TailoredSection",
    "merge_sections",
]
