"""
InspectPilot - Residential Electrical Inspection Findings Engine

InspectPilot turns a completed inspection answer document into the
decision content of a report: prioritized findings, an overall risk
level with a CapEx estimate, and short decision-support signals.

Core Principle: "Deterministic rules in, auditable priorities out."

Key Features:
- Answer-envelope aware fact flattening
- Declarative finding rules plus procedural checks
- Keyword classification by system, space and tag
- Priority matrix with liability adjustment, guardrails and overrides
- Risk/budget scoring with CapEx aggregation
- Validated decision-signal sentences with deterministic fallback

Quick Start:
    from inspectpilot import InspectionEngine, load_default_config

    config = load_default_config()
    engine = InspectionEngine(config)
    result = engine.run(answers, inspection_id="INS-001")

    print(result.overall.overall_level, result.overall.capex_snapshot)
    for sentence in result.signals.sentences:
        print(sentence)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "InspectPilot Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    ConditionOperator,
    DominantRiskKind,
    FindingSource,
    OverallLevel,
    OverrideSource,
    PriorityBucket,
    SignalCategory,
    # Conditions
    FindingRule,
    RuleCondition,
    # Findings
    ClassificationResult,
    Finding,
    FindingMeta,
    FindingProfile,
    OverrideEntry,
    PriorityMeta,
    # Scoring and signals
    DecisionSignals,
    FindingScore,
    OverallScore,
    PriorityCounts,
    TopFinding,
    # Configuration
    EngineConfig,
    PriorityRules,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    ConditionEvaluator,
    DecisionSignalSynthesizer,
    EngineResult,
    FactTable,
    FindingDeriver,
    InspectionEngine,
    PriorityResolver,
    classify_finding,
    collect_limitations,
    compute_overall,
    count_priorities,
    flatten_answers,
    run_inspection,
    validate_signals_text,
)

# =============================================================================
# Configuration Packs
# =============================================================================
from .packs import (
    ConfigPackLoader,
    load_default_config,
    load_engine_config,
    load_engine_config_from_strings,
)

# =============================================================================
# Utilities
# =============================================================================
from .canon import (
    canonical_json,
    content_hash,
    content_hash_short,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    InspectPilotError,
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    ConfigVersionMismatch,
    RuleEvaluationError,
    InvalidConditionError,
)

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "__version__",
    # Enums
    "ConditionOperator",
    "DominantRiskKind",
    "FindingSource",
    "OverallLevel",
    "OverrideSource",
    "PriorityBucket",
    "SignalCategory",
    # Conditions
    "FindingRule",
    "RuleCondition",
    # Findings
    "ClassificationResult",
    "Finding",
    "FindingMeta",
    "FindingProfile",
    "OverrideEntry",
    "PriorityMeta",
    # Scoring and signals
    "DecisionSignals",
    "FindingScore",
    "OverallScore",
    "PriorityCounts",
    "TopFinding",
    # Configuration
    "EngineConfig",
    "PriorityRules",
    # Engine
    "ConditionEvaluator",
    "DecisionSignalSynthesizer",
    "EngineResult",
    "FactTable",
    "FindingDeriver",
    "InspectionEngine",
    "PriorityResolver",
    "classify_finding",
    "collect_limitations",
    "compute_overall",
    "count_priorities",
    "flatten_answers",
    "run_inspection",
    "validate_signals_text",
    # Packs
    "ConfigPackLoader",
    "load_default_config",
    "load_engine_config",
    "load_engine_config_from_strings",
    # Utilities
    "canonical_json",
    "content_hash",
    "content_hash_short",
    # Exceptions
    "InspectPilotError",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigVersionMismatch",
    "RuleEvaluationError",
    "InvalidConditionError",
]
