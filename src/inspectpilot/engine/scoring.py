"""
InspectPilot Risk/Budget Scoring

Scores findings and aggregates them into an OverallScore.

Per finding:
    risk_score = clamp(severity, 1, 5) x clamp(likelihood, 1, 5)
    score      = risk_score x priority_weight x budget_weight

Aggregate:
- overall_level from the summed score (<10 LOW, <25 MODERATE, else ELEVATED)
- CapEx summed over findings with an explicit numeric budget pair;
  any finding without one marks the CapEx incomplete
- dominant_risk: top categories among the five highest-scoring findings
"""
from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from ..models import (
    BudgetBand,
    Finding,
    FindingMeta,
    FindingScore,
    OverallLevel,
    OverallScore,
    PriorityBucket,
    as_number,
    enum_text,
)


# =============================================================================
# Weights and Thresholds
# =============================================================================

PRIORITY_WEIGHTS: dict[str, float] = {
    PriorityBucket.IMMEDIATE.value: 3.0,
    PriorityBucket.URGENT.value: 2.5,
    PriorityBucket.RECOMMENDED_0_3_MONTHS.value: 1.5,
    PriorityBucket.RECOMMENDED.value: 1.5,
    PriorityBucket.PLAN_MONITOR.value: 1.0,
    PriorityBucket.PLAN.value: 1.0,
}
DEFAULT_PRIORITY_WEIGHT = PRIORITY_WEIGHTS[PriorityBucket.PLAN.value]

BUDGET_WEIGHTS: dict[str, float] = {
    BudgetBand.LOW.value: 1.0,
    BudgetBand.MED.value: 1.2,
    "MEDIUM": 1.2,
    BudgetBand.HIGH.value: 1.5,
}
DEFAULT_BUDGET_WEIGHT = BUDGET_WEIGHTS[BudgetBand.LOW.value]

DEFAULT_DIMENSION = 2
MIN_DIMENSION = 1
MAX_DIMENSION = 5

LOW_THRESHOLD = 10
MODERATE_THRESHOLD = 25

DOMINANT_TOP_N = 5
DOMINANT_MAX = 2


# =============================================================================
# Per-Finding Scoring
# =============================================================================

def clamp_dimension(value: Any) -> float:
    """Clamp severity/likelihood to 1-5; zero or non-numeric becomes 2."""
    number = as_number(value)
    if not number:
        return DEFAULT_DIMENSION
    return max(MIN_DIMENSION, min(MAX_DIMENSION, number))


def risk_score(severity: Any, likelihood: Any) -> float:
    return clamp_dimension(severity) * clamp_dimension(likelihood)


def priority_weight(bucket: Optional[str]) -> float:
    if not bucket:
        return DEFAULT_PRIORITY_WEIGHT
    return PRIORITY_WEIGHTS.get(enum_text(bucket).strip().upper(), DEFAULT_PRIORITY_WEIGHT)


def budget_weight(band: Optional[str]) -> float:
    if not band:
        return DEFAULT_BUDGET_WEIGHT
    return BUDGET_WEIGHTS.get(enum_text(band).strip().upper(), DEFAULT_BUDGET_WEIGHT)


def score_finding(finding: Finding) -> FindingScore:
    """
    Score one finding from its meta and resolved priority.

    A finding without meta scores with the fixed defaults.
    """
    meta = finding.meta or FindingMeta()
    risk = risk_score(meta.severity, meta.likelihood)
    p_weight = priority_weight(finding.effective_priority)
    b_weight = budget_weight(meta.budget_band)
    return FindingScore(
        finding_id=finding.id,
        risk_score=risk,
        priority_weight=p_weight,
        budget_weight=b_weight,
        score=risk * p_weight * b_weight,
        category=meta.category,
    )


def overall_level_for(aggregate_score: float) -> OverallLevel:
    if aggregate_score < LOW_THRESHOLD:
        return OverallLevel.LOW
    if aggregate_score < MODERATE_THRESHOLD:
        return OverallLevel.MODERATE
    return OverallLevel.ELEVATED


# =============================================================================
# Dominant Risk
# =============================================================================

def dominant_risk(scores: Sequence[FindingScore]) -> tuple[str, ...]:
    """
    Top 1-2 categories by summed score among the five highest scores.

    Falls back to the top two finding IDs when none of those findings
    carries a category.
    """
    ranked = sorted(scores, key=lambda s: s.score, reverse=True)[:DOMINANT_TOP_N]
    totals: dict[str, float] = {}
    for item in ranked:
        if item.category:
            totals[item.category] = totals.get(item.category, 0.0) + item.score
    if totals:
        by_total = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        return tuple(category for category, _ in by_total[:DOMINANT_MAX])
    return tuple(item.finding_id for item in ranked[:DOMINANT_MAX])


# =============================================================================
# Overall Scoring
# =============================================================================

def compute_overall(findings: Iterable[Finding]) -> OverallScore:
    """
    Aggregate findings into an OverallScore.

    Example:
        A single IMMEDIATE finding with severity 5, likelihood 5 and a HIGH
        budget band scores 25 x 3.0 x 1.5 = 112.5, which is ELEVATED.
    """
    findings = list(findings)
    scores = tuple(score_finding(f) for f in findings)
    aggregate = sum(s.score for s in scores)

    capex_low: float = 0
    capex_high: float = 0
    incomplete = False
    has_budget_data = False
    for finding in findings:
        if finding.has_budget:
            capex_low += finding.budget_low
            capex_high += finding.budget_high
            has_budget_data = True
        else:
            incomplete = True

    return OverallScore(
        overall_level=overall_level_for(aggregate),
        aggregate_score=aggregate,
        capex_low=capex_low,
        capex_high=capex_high,
        capex_incomplete=incomplete,
        dominant_risk=dominant_risk(scores),
        has_budget_data=has_budget_data,
        finding_scores=scores,
    )
