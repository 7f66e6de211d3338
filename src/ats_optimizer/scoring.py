"""Deterministic ATS compliance scoring.

The score is a capped, additive rule set over the structured analysis
returned by the model:

    baseline
    + structure bonus   (canonical section categories found in titles)
    + skills bonus      (2 per hard skill, capped)
    + impact bonus      (quantified bullet ratio against a 30% target, capped)
    - penalties         (missing skills, formatting, weak verbs, critical
                         errors; each category capped on its own)

The total is rounded half-up and clamped to 0-100.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ats_optimizer.models.analysis import AnalysisData

BASELINE = 15

# (title keywords, points); categories are independent and additive
STRUCTURE_BONUSES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("experience", "work"), 10),
    (("education",), 5),
    (("skills", "technologies"), 5),
    (("summary", "profile"), 5),
)

POINTS_PER_SKILL = 2
SKILLS_CAP = 25

IMPACT_TARGET_RATIO = 0.30
IMPACT_POINTS_AT_TARGET = 15
IMPACT_CAP = 20

MISSING_SKILL_PENALTY, MISSING_SKILL_CAP = 3, 15
FORMATTING_PENALTY, FORMATTING_CAP = 4, 12
WEAK_VERB_PENALTY, WEAK_VERB_CAP = 1, 10
CRITICAL_ERROR_PENALTY, CRITICAL_ERROR_CAP = 15, 45

MIN_SCORE, MAX_SCORE = 0, 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 away from zero for positives."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-term contributions. Penalties are stored as positive numbers."""

    baseline: float
    structure: float
    skills: float
    impact: float
    missing_skills_penalty: float
    formatting_penalty: float
    weak_verbs_penalty: float
    critical_errors_penalty: float

    @property
    def raw_total(self) -> float:
        return (
            self.baseline
            + self.structure
            + self.skills
            + self.impact
            - self.missing_skills_penalty
            - self.formatting_penalty
            - self.weak_verbs_penalty
            - self.critical_errors_penalty
        )

    @property
    def total(self) -> int:
        return max(MIN_SCORE, min(MAX_SCORE, round_half_up(self.raw_total)))

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def structure_bonus(titles: list[str]) -> int:
    """Sum the bonus of every canonical category present in ``titles``."""
    lowered = [title.lower() for title in titles]
    points = 0
    for keywords, bonus in STRUCTURE_BONUSES:
        if any(keyword in title for title in lowered for keyword in keywords):
            points += bonus
    return points


def impact_bonus(total_bullets: int, quantified_bullets: int) -> float:
    if total_bullets <= 0:
        return 0.0
    ratio = quantified_bullets / total_bullets
    return min(ratio / IMPACT_TARGET_RATIO * IMPACT_POINTS_AT_TARGET, IMPACT_CAP)


def _capped(count: int, per_item: int, cap: int) -> int:
    return min(max(count, 0) * per_item, cap)


def score_breakdown(analysis: AnalysisData) -> ScoreBreakdown:
    metrics = analysis.metrics
    return ScoreBreakdown(
        baseline=BASELINE,
        structure=structure_bonus([s.title for s in analysis.structured_sections]),
        skills=_capped(len(analysis.hard_skills_found), POINTS_PER_SKILL, SKILLS_CAP),
        impact=impact_bonus(metrics.total_bullet_points, metrics.bullets_with_metrics),
        missing_skills_penalty=_capped(
            len(analysis.missing_hard_skills), MISSING_SKILL_PENALTY, MISSING_SKILL_CAP
        ),
        formatting_penalty=_capped(
            len(analysis.formatting_issues), FORMATTING_PENALTY, FORMATTING_CAP
        ),
        weak_verbs_penalty=_capped(
            metrics.weak_verbs_count, WEAK_VERB_PENALTY, WEAK_VERB_CAP
        ),
        critical_errors_penalty=_capped(
            len(analysis.critical_errors), CRITICAL_ERROR_PENALTY, CRITICAL_ERROR_CAP
        ),
    )


def calculate_score(analysis: AnalysisData) -> int:
    """Compute the 0-100 ATS compliance score for an analysis."""
    return score_breakdown(analysis).total
