"""
InspectPilot Enumerations

All enumeration types used across the InspectPilot findings engine.
Enums are str-based so they compare equal to the raw strings found in
answer documents and configuration packs.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Priority Buckets
# =============================================================================

class PriorityBucket(str, Enum):
    """
    Priority bucket assigned to a finding.

    RECOMMENDED and PLAN are legacy synonyms still found in older finding
    profiles. They score the same as their long-form counterparts.
    """
    IMMEDIATE = "IMMEDIATE"
    URGENT = "URGENT"
    RECOMMENDED_0_3_MONTHS = "RECOMMENDED_0_3_MONTHS"
    PLAN_MONITOR = "PLAN_MONITOR"

    # Legacy synonyms
    RECOMMENDED = "RECOMMENDED"
    PLAN = "PLAN"


# Lower rank is more urgent. Unknown buckets sort after all known ones.
PRIORITY_RANK: dict[str, int] = {
    PriorityBucket.IMMEDIATE.value: 0,
    PriorityBucket.URGENT.value: 1,
    PriorityBucket.RECOMMENDED_0_3_MONTHS.value: 2,
    PriorityBucket.RECOMMENDED.value: 2,
    PriorityBucket.PLAN_MONITOR.value: 3,
    PriorityBucket.PLAN.value: 3,
}

UNKNOWN_PRIORITY_RANK = 4

DEFAULT_PRIORITY = PriorityBucket.PLAN_MONITOR.value


def enum_text(value: object) -> str:
    """String form of a raw value; enum members give their value, not their name."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def priority_rank(bucket: object) -> int:
    """Rank a bucket value for ordering (0 = most urgent)."""
    if bucket is None:
        return UNKNOWN_PRIORITY_RANK
    return PRIORITY_RANK.get(enum_text(bucket).strip().upper(), UNKNOWN_PRIORITY_RANK)


# =============================================================================
# Finding Dimensions
# =============================================================================

class SafetyLevel(str, Enum):
    """Safety impact of a finding."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class UrgencyLevel(str, Enum):
    """How soon a finding needs attention."""
    LONG_TERM = "LONG_TERM"
    SHORT_TERM = "SHORT_TERM"
    IMMEDIATE = "IMMEDIATE"


class LiabilityLevel(str, Enum):
    """Liability / compliance exposure of a finding."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class EscalationLevel(str, Enum):
    """Likelihood that a finding escalates if deferred."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class BudgetBand(str, Enum):
    """Indicative cost band of remediation."""
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


# =============================================================================
# Rule Conditions
# =============================================================================

class ConditionOperator(str, Enum):
    """Operators available to finding rule conditions."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    EXISTS = "exists"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


NUMERIC_OPERATORS = frozenset({
    ConditionOperator.GREATER_THAN,
    ConditionOperator.LESS_THAN,
})


# =============================================================================
# Priority Resolution
# =============================================================================

class LiabilityShift(str, Enum):
    """Direction of a liability-based bucket adjustment."""
    UP = "UP"
    DOWN = "DOWN"
    NONE = "NONE"


class FindingSource(str, Enum):
    """Where a finding came from."""
    STANDARD = "standard"      # Derived from rule tables / procedural checks
    CUSTOM = "custom"          # Author-entered free-text finding
    EXISTING = "existing"      # Carried over from a previous derivation pass


class OverrideSource(str, Enum):
    """
    Source of an override value.

    Declared in precedence order, most authoritative first.
    """
    DEBUG = "debug_override"
    GLOBAL = "global_override"
    CUSTOM_DIMENSIONS = "custom_dimensions"


# =============================================================================
# Scoring and Signals
# =============================================================================

class OverallLevel(str, Enum):
    """Overall risk level of an inspection."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    ELEVATED = "ELEVATED"


class DominantRiskKind(str, Enum):
    """Narrative framing derived from the dominant risk category."""
    SAFETY = "safety"
    COMPLIANCE = "compliance"
    ESCALATION = "escalation"


class SignalCategory(str, Enum):
    """Semantic category of a decision-signal sentence."""
    CONSEQUENCE = "consequence"
    WHY_NOT_IMMEDIATE = "why_not_immediate"
    MANAGEABLE_RISK = "manageable_risk"
    CAPEX_PROVISIONING = "capex_provisioning"
    REPRESENTATIVE = "representative"


REQUIRED_SIGNAL_CATEGORIES = (
    SignalCategory.CONSEQUENCE,
    SignalCategory.WHY_NOT_IMMEDIATE,
    SignalCategory.MANAGEABLE_RISK,
    SignalCategory.CAPEX_PROVISIONING,
)
