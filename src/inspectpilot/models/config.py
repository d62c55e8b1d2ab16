"""
InspectPilot Engine Configuration

Immutable configuration assembled once by the host process and injected
into the engine and each stage.

Key components:
- MatrixEntry / LiabilityRule / Guardrail: priority rule building blocks
- PriorityRules: everything the priority resolver needs
- EngineConfig: rules, profiles, global overrides and a fingerprint
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .conditions import FindingRule
from .enums import LiabilityShift, PriorityBucket
from .finding import FindingProfile, OverrideEntry, PriorityMeta


DEFAULT_CUSTOM_THRESHOLD = 12


# =============================================================================
# Priority Rules
# =============================================================================

@dataclass(frozen=True)
class MatrixEntry:
    """
    One row of the base priority matrix.

    Matches when safety is equal and urgency is either unset or equal.
    """
    safety: str
    bucket: str
    urgency: Optional[str] = None

    def matches(self, meta: PriorityMeta) -> bool:
        if self.safety != meta.safety:
            return False
        return self.urgency is None or self.urgency == meta.urgency


@dataclass(frozen=True)
class LiabilityRule:
    """Liability-based adjustment: UP to a ceiling or DOWN to a floor."""
    liability: str
    shift: LiabilityShift = LiabilityShift.NONE
    max_priority: Optional[str] = None
    min_priority: Optional[str] = None


@dataclass(frozen=True)
class Guardrail:
    """
    Disables an adjustment for findings whose meta matches `when`.

    A flag left as None means the guardrail says nothing about it.
    """
    when: Mapping[str, str]
    allow_downgrade: Optional[bool] = None
    allow_liability_adjustment: Optional[bool] = None

    def matches(self, meta: PriorityMeta) -> bool:
        if not self.when:
            return False
        return all(getattr(meta, key, None) == value for key, value in self.when.items())


@dataclass(frozen=True)
class PriorityRules:
    """Base matrix, liability adjustments, guardrails and per-finding meta."""
    hard_overrides: frozenset[str] = frozenset()
    hard_override_bucket: str = PriorityBucket.IMMEDIATE.value
    matrix: tuple[MatrixEntry, ...] = ()
    default_bucket: str = PriorityBucket.PLAN_MONITOR.value
    liability_rules: tuple[LiabilityRule, ...] = ()
    guardrails: tuple[Guardrail, ...] = ()
    findings: Mapping[str, PriorityMeta] = field(default_factory=dict)
    custom_threshold: float = DEFAULT_CUSTOM_THRESHOLD
    custom_upgrade_bucket: str = PriorityBucket.RECOMMENDED_0_3_MONTHS.value

    def meta_for(self, finding_id: str) -> Optional[PriorityMeta]:
        return self.findings.get(finding_id)


# =============================================================================
# Engine Configuration
# =============================================================================

@dataclass(frozen=True)
class EngineConfig:
    """
    Read-only configuration for one engine instance.

    Attributes:
        finding_rules: Ordered rule table
        priority_rules: Priority resolution rules
        profiles: Finding profiles keyed by finding ID
        global_overrides: Configuration-level overrides keyed by finding ID
        fingerprint: Short content hash of all loaded documents
    """
    finding_rules: tuple[FindingRule, ...] = ()
    priority_rules: PriorityRules = field(default_factory=PriorityRules)
    profiles: Mapping[str, FindingProfile] = field(default_factory=dict)
    global_overrides: Mapping[str, OverrideEntry] = field(default_factory=dict)
    fingerprint: str = ""

    def profile_for(self, finding_id: str) -> Optional[FindingProfile]:
        return self.profiles.get(finding_id)

    def global_override_for(self, finding_id: str) -> Optional[OverrideEntry]:
        return self.global_overrides.get(finding_id)
