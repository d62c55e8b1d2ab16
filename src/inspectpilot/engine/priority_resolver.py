"""
InspectPilot Priority Resolver

Resolves one authoritative priority bucket per finding.

Resolution runs in two layers:
1. Base bucket from safety/urgency/liability: hard overrides, then the
   ordered priority matrix, then guarded liability adjustment. Custom
   findings may additionally be upgraded out of PLAN_MONITOR.
2. priority_final from override sources, most authoritative first:
   debug override, global override, calculated bucket, selected/base
   priority, PLAN_MONITOR.

Title and budget overrides follow the same debug-over-global precedence
independently of the priority override.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional, Sequence

from ..models import (
    DEFAULT_PRIORITY,
    EngineConfig,
    Finding,
    FindingMeta,
    FindingSource,
    LiabilityShift,
    OverrideEntry,
    OverrideSource,
    PriorityBucket,
    PriorityCounts,
    PriorityMeta,
    PriorityRules,
    UrgencyLevel,
    as_number,
    clean_text,
    priority_rank,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Bucket Ordering
# =============================================================================

def more_urgent(first: str, second: str) -> str:
    """Return whichever bucket ranks more urgent (first on ties)."""
    return first if priority_rank(first) <= priority_rank(second) else second


def less_urgent(first: str, second: str) -> str:
    """Return whichever bucket ranks less urgent (first on ties)."""
    return first if priority_rank(first) >= priority_rank(second) else second


# =============================================================================
# Override Merging
# =============================================================================

@dataclass(frozen=True)
class MergedOverride:
    """Winning override values for one finding."""
    priority: Optional[str] = None
    priority_source: Optional[OverrideSource] = None
    title: Optional[str] = None
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None


def merge_overrides(
    sources: Sequence[tuple[OverrideSource, Optional[OverrideEntry]]],
) -> MergedOverride:
    """
    Merge override sources given highest precedence first.

    - priority: first debug/global source that sets it
    - title: first source that sets it
    - budget: debug/global per field; a custom-dimensions source only
      contributes a complete numeric pair
    """
    priority: Optional[str] = None
    priority_source: Optional[OverrideSource] = None
    title: Optional[str] = None
    low: Optional[float] = None
    high: Optional[float] = None

    for source, entry in sources:
        if entry is None:
            continue
        if title is None:
            title = entry.title
        if source == OverrideSource.CUSTOM_DIMENSIONS:
            if low is None and high is None and entry.has_budget:
                low, high = entry.budget_low, entry.budget_high
            continue
        if priority is None and entry.priority:
            priority, priority_source = entry.priority, source
        if low is None:
            low = entry.budget_low
        if high is None:
            high = entry.budget_high

    return MergedOverride(
        priority=priority,
        priority_source=priority_source,
        title=title,
        budget_low=low,
        budget_high=high,
    )


def resolve_priority_final(
    finding: Finding,
    debug: Optional[OverrideEntry] = None,
    global_override: Optional[OverrideEntry] = None,
) -> tuple[str, Optional[str]]:
    """
    Resolve priority_final for one finding.

    Precedence:
    1. Debug override priority
    2. Global override priority
    3. priority_calculated
    4. priority_selected, then priority
    5. PLAN_MONITOR

    Returns:
        Tuple of (priority_final, override_reason). The reason is the
        winning source label for debug/global, else the finding's own.
    """
    merged = merge_overrides([
        (OverrideSource.DEBUG, debug),
        (OverrideSource.GLOBAL, global_override),
    ])
    if merged.priority is not None:
        return (merged.priority, merged.priority_source.value)

    for candidate in (finding.priority_calculated, finding.priority_selected, finding.priority):
        value = clean_text(candidate)
        if value is not None:
            return (value, finding.override_reason)
    return (DEFAULT_PRIORITY, finding.override_reason)


def is_override_valid(finding: Finding) -> bool:
    """
    True unless an explicit selection departs from the calculated bucket
    without an audit reason.
    """
    calculated = clean_text(finding.priority_calculated)
    selected = clean_text(finding.priority_selected) or clean_text(finding.priority)
    if calculated is None or selected == calculated:
        return True
    return clean_text(finding.override_reason) is not None


def audit_overrides(findings: Iterable[Finding], inspection_id: Optional[str] = None) -> list[str]:
    """Log and return the IDs of findings with an unaudited override."""
    invalid = [f.id for f in findings if not is_override_valid(f)]
    for finding_id in invalid:
        logger.warning(
            f"Finding {finding_id} selected priority differs from calculated "
            f"without override_reason (inspection: {inspection_id})"
        )
    return invalid


def count_priorities(findings: Iterable[Finding]) -> PriorityCounts:
    """
    Count findings per resolved priority group.

    RECOMMENDED_0_3_MONTHS and RECOMMENDED count as recommended; PLAN_MONITOR,
    PLAN and anything unrecognised count as plan.
    """
    immediate = urgent = recommended = plan = 0
    for finding in findings:
        bucket = finding.effective_priority.upper()
        if bucket == PriorityBucket.IMMEDIATE.value:
            immediate += 1
        elif bucket == PriorityBucket.URGENT.value:
            urgent += 1
        elif bucket in (PriorityBucket.RECOMMENDED_0_3_MONTHS.value, PriorityBucket.RECOMMENDED.value):
            recommended += 1
        else:
            plan += 1
    return PriorityCounts(immediate=immediate, urgent=urgent, recommended=recommended, plan=plan)


# =============================================================================
# Priority Resolver
# =============================================================================

class PriorityResolver:
    """
    Computes base buckets and resolves priority_final for findings.

    Usage:
        resolver = PriorityResolver(config)
        bucket = resolver.base_bucket("EARTH_DEGRADED", meta)
        findings = resolver.resolve_all(findings, debug_overrides=debug)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    @property
    def rules(self) -> PriorityRules:
        return self.config.priority_rules

    # -------------------------------------------------------------------------
    # Base bucket
    # -------------------------------------------------------------------------

    def base_bucket(self, finding_id: str, meta: PriorityMeta) -> str:
        """
        Compute the base bucket from safety/urgency/liability.

        1. Hard-override IDs always resolve to the hard-override bucket
        2. First matching matrix row, else the default bucket
        3. Liability adjustment unless a matching guardrail forbids it or
           urgency is IMMEDIATE; DOWN is further blocked by no-downgrade
        """
        rules = self.rules
        if finding_id in rules.hard_overrides:
            return rules.hard_override_bucket

        bucket = rules.default_bucket
        for row in rules.matrix:
            if row.matches(meta):
                bucket = row.bucket
                break

        guards = [g for g in rules.guardrails if g.matches(meta)]
        no_downgrade = any(g.allow_downgrade is False for g in guards)
        no_liability_adjustment = any(g.allow_liability_adjustment is False for g in guards)

        if no_liability_adjustment or meta.urgency == UrgencyLevel.IMMEDIATE.value:
            return bucket

        adjustable_up = (PriorityBucket.PLAN_MONITOR.value, PriorityBucket.RECOMMENDED_0_3_MONTHS.value)
        for rule in rules.liability_rules:
            if rule.liability != meta.liability:
                continue
            if rule.shift == LiabilityShift.UP and bucket in adjustable_up and rule.max_priority:
                bucket = more_urgent(bucket, rule.max_priority)
            elif (
                rule.shift == LiabilityShift.DOWN
                and bucket == PriorityBucket.RECOMMENDED_0_3_MONTHS.value
                and not no_downgrade
            ):
                bucket = less_urgent(bucket, rule.min_priority or PriorityBucket.PLAN_MONITOR.value)
        return bucket

    def custom_bucket(self, finding_id: str, dimensions: Optional[OverrideEntry]) -> str:
        """
        Compute priority_calculated for a custom finding.

        Missing safety/urgency/liability default to MODERATE/SHORT_TERM/MEDIUM.
        Only a PLAN_MONITOR base is upgraded, when severity x likelihood
        reaches the threshold or escalation is HIGH.
        """
        dimensions = dimensions or OverrideEntry()
        defaults = FindingMeta()
        meta = PriorityMeta(
            safety=dimensions.safety or defaults.safety,
            urgency=dimensions.urgency or defaults.urgency,
            liability=dimensions.liability or defaults.liability,
        )
        bucket = self.base_bucket(finding_id, meta)
        if bucket != PriorityBucket.PLAN_MONITOR.value:
            return bucket

        severity = as_number(dimensions.severity) or 0
        likelihood = as_number(dimensions.likelihood) or 0
        escalation = (dimensions.escalation or "").strip().upper()
        if severity * likelihood >= self.rules.custom_threshold or escalation == "HIGH":
            return self.rules.custom_upgrade_bucket
        return bucket

    # -------------------------------------------------------------------------
    # Finding resolution
    # -------------------------------------------------------------------------

    def resolve(
        self,
        finding: Finding,
        debug: Optional[OverrideEntry] = None,
        custom: Optional[OverrideEntry] = None,
    ) -> Finding:
        """
        Resolve one finding's priority, title, budget and scoring meta.

        Args:
            finding: Derived, existing or custom finding
            debug: Per-inspection debug override for this finding
            custom: Custom dimensions (only used for custom findings)

        Returns:
            Copy of the finding with priority_final populated
        """
        config = self.config
        profile = config.profile_for(finding.id)
        priority_meta = self.rules.meta_for(finding.id)
        global_override = config.global_override_for(finding.id)
        if finding.source != FindingSource.CUSTOM:
            custom = None

        if profile is None and priority_meta is None:
            logger.debug(f"No profile or priority meta for {finding.id}, using default dimensions")
        meta = FindingMeta.from_profile(profile, priority_meta)
        if custom is not None:
            meta = meta.with_overrides(custom)

        priority = finding.priority
        priority_selected = finding.priority_selected
        priority_calculated = finding.priority_calculated
        if finding.source == FindingSource.CUSTOM:
            priority_calculated = self.custom_bucket(finding.id, custom)
            priority_selected = priority_selected or priority
        elif priority_meta is not None and (finding.source == FindingSource.STANDARD or not priority):
            priority = self.base_bucket(finding.id, priority_meta)
        elif not priority:
            priority = (profile.default_priority if profile else None) or DEFAULT_PRIORITY

        staged = replace(
            finding,
            priority=priority,
            priority_selected=priority_selected,
            priority_calculated=priority_calculated,
        )
        priority_final, override_reason = resolve_priority_final(staged, debug, global_override)

        merged = merge_overrides([
            (OverrideSource.DEBUG, debug),
            (OverrideSource.GLOBAL, global_override),
            (OverrideSource.CUSTOM_DIMENSIONS, custom),
        ])
        budget_low, budget_high = self._resolve_budget(finding, merged, meta)

        # Override dimensions feed scoring only, debug over global
        meta = meta.with_overrides(global_override).with_overrides(debug)

        return replace(
            staged,
            title=merged.title or finding.title or (profile.title if profile else None),
            priority_final=priority_final,
            override_reason=override_reason,
            budget_low=budget_low,
            budget_high=budget_high,
            meta=meta,
        )

    def resolve_all(
        self,
        findings: Iterable[Finding],
        debug_overrides: Optional[Mapping[str, OverrideEntry]] = None,
        custom_dimensions: Optional[Mapping[str, OverrideEntry]] = None,
    ) -> list[Finding]:
        """Resolve every finding, preserving order."""
        debug_overrides = debug_overrides or {}
        custom_dimensions = custom_dimensions or {}
        return [
            self.resolve(f, debug_overrides.get(f.id), custom_dimensions.get(f.id))
            for f in findings
        ]

    @staticmethod
    def _resolve_budget(
        finding: Finding,
        merged: MergedOverride,
        meta: FindingMeta,
    ) -> tuple[Optional[float], Optional[float]]:
        low, high = merged.budget_low, merged.budget_high
        if low is not None and high is not None:
            return (low, high)

        # Fill gaps from the first complete pair: the finding's own, then the profile's
        if finding.has_budget:
            fallback = (finding.budget_low, finding.budget_high)
        elif meta.has_budget:
            fallback = (meta.budget_low, meta.budget_high)
        else:
            fallback = (None, None)
        return (
            low if low is not None else fallback[0],
            high if high is not None else fallback[1],
        )
