"""
InspectPilot Scoring Models

Read-only snapshots produced by risk/budget scoring.

Key components:
- FindingScore: per-finding score breakdown
- OverallScore: aggregate level, CapEx range and dominant risk
- PriorityCounts: findings bucketed by resolved priority
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import OverallLevel


CAPEX_SUFFIX = " (indicative, planning only)"

BADGES: dict[str, str] = {
    OverallLevel.LOW.value: "Low",
    OverallLevel.MODERATE.value: "Moderate",
    OverallLevel.ELEVATED.value: "Elevated",
}


def format_capex_range(low: Optional[float] = None, high: Optional[float] = None) -> str:
    """
    Format a CapEx range for display. Never returns an empty string.

    - Both known: "AUD $L – $H (indicative, planning only)"
    - One known: "AUD $X+ (indicative, planning only)"
    - Neither: "To be confirmed (indicative, planning only)"
    """
    if low is not None and high is not None:
        return f"AUD ${format_amount(low)} – ${format_amount(high)}{CAPEX_SUFFIX}"
    if low is not None:
        return f"AUD ${format_amount(low)}+{CAPEX_SUFFIX}"
    if high is not None:
        return f"AUD ${format_amount(high)}+{CAPEX_SUFFIX}"
    return f"To be confirmed{CAPEX_SUFFIX}"


def format_amount(value: float) -> str:
    """Thousands-separated amount; whole numbers print without decimals."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


# =============================================================================
# Finding Score
# =============================================================================

@dataclass(frozen=True)
class FindingScore:
    """Score breakdown for one finding."""
    finding_id: str
    risk_score: float
    priority_weight: float
    budget_weight: float
    score: float
    category: Optional[str] = None


# =============================================================================
# Overall Score
# =============================================================================

@dataclass(frozen=True)
class OverallScore:
    """
    Aggregate scoring snapshot for one report build.

    Attributes:
        overall_level: LOW / MODERATE / ELEVATED
        aggregate_score: Sum of all finding scores
        capex_low: Sum of explicit budget lower bounds (0 when none)
        capex_high: Sum of explicit budget upper bounds (0 when none)
        capex_incomplete: True iff a scored finding lacks a numeric budget range
        dominant_risk: Top 1-2 categories (or finding IDs) by weighted score
        has_budget_data: True if at least one finding carried a budget range
        finding_scores: Per-finding breakdown, in input order
    """
    overall_level: OverallLevel = OverallLevel.LOW
    aggregate_score: float = 0.0
    capex_low: float = 0
    capex_high: float = 0
    capex_incomplete: bool = False
    dominant_risk: tuple[str, ...] = ()
    has_budget_data: bool = False
    finding_scores: tuple[FindingScore, ...] = field(default=(), repr=False)

    @property
    def badge(self) -> str:
        return BADGES[self.overall_level.value]

    @property
    def capex_snapshot(self) -> str:
        if not self.has_budget_data:
            return format_capex_range()
        return format_capex_range(self.capex_low, self.capex_high)

    def score_for(self, finding_id: str) -> Optional[float]:
        """Score of a finding by ID, if it was scored."""
        for item in self.finding_scores:
            if item.finding_id == finding_id:
                return item.score
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_level": self.overall_level.value,
            "badge": self.badge,
            "aggregate_score": self.aggregate_score,
            "capex_low": self.capex_low,
            "capex_high": self.capex_high,
            "capex_incomplete": self.capex_incomplete,
            "capex_snapshot": self.capex_snapshot,
            "dominant_risk": list(self.dominant_risk),
        }


# =============================================================================
# Priority Counts
# =============================================================================

@dataclass(frozen=True)
class PriorityCounts:
    """Number of findings per resolved priority group."""
    immediate: int = 0
    urgent: int = 0
    recommended: int = 0
    plan: int = 0

    @property
    def total(self) -> int:
        return self.immediate + self.urgent + self.recommended + self.plan

    def to_dict(self) -> dict[str, int]:
        return {
            "immediate": self.immediate,
            "urgent": self.urgent,
            "recommended": self.recommended,
            "plan": self.plan,
        }
