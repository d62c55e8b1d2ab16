"""
InspectPilot Engine

Pipeline stages of the inspection findings engine.

Stages:
- flatten_answers: Answer document to fact table
- FindingDeriver: Rule-table and procedural finding derivation
- classify_finding: System group, space group and tags
- PriorityResolver: Base buckets and override precedence
- compute_overall: Risk/budget scoring
- DecisionSignalSynthesizer: Validated decision-support sentences
- InspectionEngine: Runs all of the above

Usage:
    from inspectpilot.engine import InspectionEngine

    result = InspectionEngine(config).run(answers)
"""
from __future__ import annotations

from .facts import (
    MAX_ENVELOPE_DEPTH,
    FactTable,
    collect_limitations,
    flatten_answers,
    is_envelope,
    unwrap_envelope,
)
from .condition_evaluator import (
    ConditionEvaluator,
    coerce_number,
    compare_values,
    evaluate_condition,
    loose_equals,
    resolve_path_values,
    value_contains,
)
from .finding_deriver import (
    COMPOUND_CHECKS,
    PROCEDURAL_CHECKS,
    FindingDeriver,
    ProceduralCheck,
    derive_and_merge_findings,
    derive_findings,
)
from .classifier import (
    SPACE_GROUP_RULES,
    SYSTEM_GROUP_RULES,
    TAG_RULES,
    classify_finding,
    classify_findings,
    normalize_finding_id,
)
from .priority_resolver import (
    MergedOverride,
    PriorityResolver,
    audit_overrides,
    count_priorities,
    is_override_valid,
    less_urgent,
    merge_overrides,
    more_urgent,
    resolve_priority_final,
)
from .scoring import (
    BUDGET_WEIGHTS,
    PRIORITY_WEIGHTS,
    budget_weight,
    clamp_dimension,
    compute_overall,
    dominant_risk,
    overall_level_for,
    priority_weight,
    risk_score,
    score_finding,
)
from .decision_signals import (
    DEFAULT_CAPEX_PROVISIONING,
    DEFAULT_IF_NOT_ADDRESSED,
    DEFAULT_MANAGEABLE_RISK,
    DEFAULT_WHY_NOT_IMMEDIATE,
    DecisionSignalSynthesizer,
    SignalContext,
    matches_category,
    normalize_dominant_risk,
    sounds_like_inspection_summary,
    synthesize_signals,
    validate_and_fix,
    validate_signals_text,
)
from .report_engine import (
    EngineResult,
    InspectionEngine,
    parse_custom_findings,
    parse_debug_overrides,
    rank_findings,
    run_inspection,
)


__all__ = [
    # Facts
    "MAX_ENVELOPE_DEPTH",
    "FactTable",
    "collect_limitations",
    "flatten_answers",
    "is_envelope",
    "unwrap_envelope",
    # Conditions
    "ConditionEvaluator",
    "coerce_number",
    "compare_values",
    "evaluate_condition",
    "loose_equals",
    "resolve_path_values",
    "value_contains",
    # Derivation
    "COMPOUND_CHECKS",
    "PROCEDURAL_CHECKS",
    "FindingDeriver",
    "ProceduralCheck",
    "derive_and_merge_findings",
    "derive_findings",
    # Classification
    "SPACE_GROUP_RULES",
    "SYSTEM_GROUP_RULES",
    "TAG_RULES",
    "classify_finding",
    "classify_findings",
    "normalize_finding_id",
    # Priority
    "MergedOverride",
    "PriorityResolver",
    "audit_overrides",
    "count_priorities",
    "is_override_valid",
    "less_urgent",
    "merge_overrides",
    "more_urgent",
    "resolve_priority_final",
    # Scoring
    "BUDGET_WEIGHTS",
    "PRIORITY_WEIGHTS",
    "budget_weight",
    "clamp_dimension",
    "compute_overall",
    "dominant_risk",
    "overall_level_for",
    "priority_weight",
    "risk_score",
    "score_finding",
    # Signals
    "DEFAULT_CAPEX_PROVISIONING",
    "DEFAULT_IF_NOT_ADDRESSED",
    "DEFAULT_MANAGEABLE_RISK",
    "DEFAULT_WHY_NOT_IMMEDIATE",
    "DecisionSignalSynthesizer",
    "SignalContext",
    "matches_category",
    "normalize_dominant_risk",
    "sounds_like_inspection_summary",
    "synthesize_signals",
    "validate_and_fix",
    "validate_signals_text",
    # Engine
    "EngineResult",
    "InspectionEngine",
    "parse_custom_findings",
    "parse_debug_overrides",
    "rank_findings",
    "run_inspection",
]
