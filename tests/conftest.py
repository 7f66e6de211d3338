"""Shared test fixtures."""

from __future__ import annotations

import copy
from unittest.mock import AsyncMock

import pytest

from ats_optimizer.clients.llm_client import LLMClient, LLMResponse
from ats_optimizer.models.analysis import AnalysisResult
from ats_optimizer.models.resume import ResumeSection

ANALYSIS_PAYLOAD = {
    "detected_role": "Backend Engineer",
    "hard_skills_found": ["Python", "PostgreSQL", "Docker", "AWS"],
    "missing_hard_skills": ["Kubernetes", "Terraform"],
    "soft_skills_found": ["Mentoring"],
    "metrics": {
        "total_bullet_points": 10,
        "bullets_with_metrics": 3,
        "weak_verbs_count": 2,
        "section_count": 4,
    },
    "formatting_issues": ["Tables detected"],
    "critical_errors": [],
    "strengths": ["Clear progression"],
    "weaknesses": ["Few numbers"],
    "summary_feedback": "Solid base; quantify more results.",
    "structured_sections": [
        {"id": "s1", "title": "Summary", "content": "Backend engineer with 6 years of experience."},
        {
            "id": "s2",
            "title": "Work Experience",
            "content": "<ul><li>Built <b>billing</b> APIs</li><li>Cut latency by 40%</li></ul>",
        },
        {"id": "s3", "title": "Education", "content": "B.Sc. Computer Science"},
        {"id": "s4", "title": "Skills", "content": "Python, PostgreSQL, Docker, AWS"},
    ],
}


@pytest.fixture
def analysis_payload() -> dict:
    return copy.deepcopy(ANALYSIS_PAYLOAD)


@pytest.fixture
def sample_analysis(analysis_payload) -> AnalysisResult:
    return AnalysisResult.model_validate(analysis_payload)


@pytest.fixture
def sample_sections() -> list[ResumeSection]:
    return [
        ResumeSection(id="s1", title="Summary", content="Backend engineer with 6 years."),
        ResumeSection(
            id="s2",
            title="Experience",
            content="<ul><li>Built APIs</li><li>Cut latency by <b>40%</b></li></ul>",
        ),
        ResumeSection(id="s3", title="Skills", content="Python<br>Docker"),
    ]


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    return client
