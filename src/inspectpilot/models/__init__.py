"""
InspectPilot Models

All domain models for the InspectPilot findings engine.

    from inspectpilot.models import (
        # Enums
        PriorityBucket, ConditionOperator, OverallLevel,
        # Conditions
        RuleCondition, FindingRule,
        # Findings
        Finding, FindingMeta, FindingProfile, OverrideEntry,
        # Scoring / signals
        OverallScore, PriorityCounts, DecisionSignals,
        # Configuration
        EngineConfig, PriorityRules,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    DEFAULT_PRIORITY,
    NUMERIC_OPERATORS,
    PRIORITY_RANK,
    REQUIRED_SIGNAL_CATEGORIES,
    UNKNOWN_PRIORITY_RANK,
    BudgetBand,
    ConditionOperator,
    DominantRiskKind,
    EscalationLevel,
    FindingSource,
    LiabilityLevel,
    LiabilityShift,
    OverallLevel,
    OverrideSource,
    PriorityBucket,
    SafetyLevel,
    SignalCategory,
    UrgencyLevel,
    enum_text,
    priority_rank,
)

# =============================================================================
# Conditions
# =============================================================================
from .conditions import (
    ARRAY_MARKER,
    FindingRule,
    RuleCondition,
)

# =============================================================================
# Findings
# =============================================================================
from .finding import (
    ClassificationResult,
    Finding,
    FindingMeta,
    FindingProfile,
    OverrideEntry,
    PriorityMeta,
    as_number,
    clean_text,
    humanize_finding_id,
)

# =============================================================================
# Scoring and Signals
# =============================================================================
from .scoring import (
    CAPEX_SUFFIX,
    FindingScore,
    OverallScore,
    PriorityCounts,
    format_amount,
    format_capex_range,
)
from .signals import (
    BULLET,
    DecisionSignals,
    TopFinding,
)

# =============================================================================
# Configuration
# =============================================================================
from .config import (
    DEFAULT_CUSTOM_THRESHOLD,
    EngineConfig,
    Guardrail,
    LiabilityRule,
    MatrixEntry,
    PriorityRules,
)


__all__ = [
    # Enums
    "DEFAULT_PRIORITY",
    "NUMERIC_OPERATORS",
    "PRIORITY_RANK",
    "REQUIRED_SIGNAL_CATEGORIES",
    "UNKNOWN_PRIORITY_RANK",
    "BudgetBand",
    "ConditionOperator",
    "DominantRiskKind",
    "EscalationLevel",
    "FindingSource",
    "LiabilityLevel",
    "LiabilityShift",
    "OverallLevel",
    "OverrideSource",
    "PriorityBucket",
    "SafetyLevel",
    "SignalCategory",
    "UrgencyLevel",
    "enum_text",
    "priority_rank",
    # Conditions
    "ARRAY_MARKER",
    "FindingRule",
    "RuleCondition",
    # Findings
    "ClassificationResult",
    "Finding",
    "FindingMeta",
    "FindingProfile",
    "OverrideEntry",
    "PriorityMeta",
    "as_number",
    "clean_text",
    "humanize_finding_id",
    # Scoring and signals
    "CAPEX_SUFFIX",
    "FindingScore",
    "OverallScore",
    "PriorityCounts",
    "format_amount",
    "format_capex_range",
    "BULLET",
    "DecisionSignals",
    "TopFinding",
    # Configuration
    "DEFAULT_CUSTOM_THRESHOLD",
    "EngineConfig",
    "Guardrail",
    "LiabilityRule",
    "MatrixEntry",
    "PriorityRules",
]
