"""
InspectPilot Finding Deriver

Derives finding records from a fact table.

Two derivation styles run in a fixed order:
1. Rule table: ordered FindingRule entries; the first rule that fires for
   a finding ID wins and later rules for that ID are skipped
2. Procedural checks: named predicates over specific fact paths, then
   compound checks that need two facts to hold together

Output is de-duplicated by finding ID in first-fire order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..models import (
    EngineConfig,
    Finding,
    FindingRule,
    FindingSource,
    PriorityBucket,
)
from .condition_evaluator import ConditionEvaluator, coerce_number

logger = logging.getLogger(__name__)


Predicate = Callable[[Mapping[str, Any]], bool]


# =============================================================================
# Answer Helpers
# =============================================================================

def _yes(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() in ("yes", "true")


def _no(value: Any) -> bool:
    if isinstance(value, bool):
        return not value
    return isinstance(value, str) and value.strip().lower() in ("no", "false")


def _is(value: Any, expected: str) -> bool:
    """Single-choice answer equals expected, or multi-choice answer includes it."""
    if isinstance(value, (list, tuple)):
        return expected in value
    return isinstance(value, str) and value.strip().lower() == expected


def _answered_yes(path: str) -> Predicate:
    return lambda facts: _yes(facts.get(path))


def _answered_no(path: str) -> Predicate:
    return lambda facts: _no(facts.get(path))


def _answered(path: str, expected: str) -> Predicate:
    return lambda facts: _is(facts.get(path), expected)


def _rcd_failures(facts: Mapping[str, Any]) -> bool:
    if not _yes(facts.get("rcd_tests.performed")):
        return False
    total_fail = coerce_number(facts.get("rcd_tests.summary.total_fail"))
    return total_fail is not None and total_fail > 0


def _no_residual_current_device(facts: Mapping[str, Any]) -> bool:
    present = facts.get("switchboard.protection_types_present")
    if not isinstance(present, (list, tuple)):
        return False
    kinds = {str(item).strip().lower() for item in present}
    return not kinds & {"rcd", "rcbo"}


# =============================================================================
# Procedural Checks
# =============================================================================

@dataclass(frozen=True)
class ProceduralCheck:
    """A named boolean predicate that raises a finding when true."""
    finding_id: str
    predicate: Predicate
    priority_hint: str = PriorityBucket.PLAN_MONITOR.value
    description: Optional[str] = None

    def fires(self, facts: Mapping[str, Any]) -> bool:
        return bool(self.predicate(facts))


_IMMEDIATE = PriorityBucket.IMMEDIATE.value
_RECOMMENDED = PriorityBucket.RECOMMENDED_0_3_MONTHS.value
_PLAN = PriorityBucket.PLAN_MONITOR.value


PROCEDURAL_CHECKS: tuple[ProceduralCheck, ...] = (
    # Switchboard
    ProceduralCheck("ASBESTOS_RISK", _answered_yes("switchboard.asbestos_suspected"), _IMMEDIATE),
    ProceduralCheck("THERMAL_STRESS_ACTIVE", _answered_yes("switchboard.signs_of_overheating"), _IMMEDIATE),
    ProceduralCheck("ARCING_EVIDENCE_PRESENT", _answered_yes("switchboard.burn_marks_or_carbon"), _IMMEDIATE),
    ProceduralCheck("MATERIAL_DEGRADATION", _answered_yes("switchboard.water_ingress"), _IMMEDIATE),
    # Earthing
    ProceduralCheck("MEN_NOT_VERIFIED", _answered_no("earthing.men_link_confirmed"), _IMMEDIATE),
    ProceduralCheck("EARTH_DEGRADED", _answered_no("earthing.main_earth_conductor_intact"), _RECOMMENDED),
    # Capacity and workmanship
    ProceduralCheck("BOARD_AT_CAPACITY", _answered_yes("switchboard.board_at_capacity"), _RECOMMENDED),
    ProceduralCheck("NO_EXPANSION_MARGIN", _answered_no("switchboard.spare_ways_available"), _RECOMMENDED),
    ProceduralCheck("LABELING_POOR", _answered("switchboard.labelling_quality", "poor"), _PLAN),
    ProceduralCheck("NON_STANDARD_WORK", _answered_yes("switchboard.non_standard_or_diy_observed"), _RECOMMENDED),
    # RCD and GPO tests
    ProceduralCheck(
        "NO_RCD_PROTECTION", _answered_no("rcd_tests.performed"), _IMMEDIATE,
        description="RCD tests explicitly not performed",
    ),
    ProceduralCheck(
        "GPO_EARTH_FAULT", _rcd_failures, _IMMEDIATE,
        description="RCD tests performed with at least one failure",
    ),
    ProceduralCheck("GPO_MECHANICAL_LOOSE", _answered_yes("gpo_tests.any_warm_loose_damaged"), _RECOMMENDED),
    # Lighting
    ProceduralCheck("FITTING_OVERHEAT", _answered("lighting.issues_observed", "heat_damage"), _RECOMMENDED),
    ProceduralCheck("SWITCH_ARCING", _answered("lighting.issues_observed", "flicker"), _RECOMMENDED),
    # Thermal imaging
    ProceduralCheck(
        "THERMAL_HOTSPOT_DETECTED_MAJOR", _answered("thermal_imaging.hotspots_detected", "major"), _IMMEDIATE,
    ),
    ProceduralCheck(
        "NO_RCD_PROTECTION", _no_residual_current_device, _IMMEDIATE,
        description="Protection list has neither RCD nor RCBO",
    ),
)


def _both(first: Predicate, second: Predicate) -> Predicate:
    return lambda facts: first(facts) and second(facts)


# Evaluated after the main pass; each needs two facts to hold
COMPOUND_CHECKS: tuple[ProceduralCheck, ...] = (
    ProceduralCheck(
        "EV_UNSEGREGATED_LOAD",
        _both(_answered_yes("assets.has_ev_charger"), _answered_no("assets.ev_charger_segregated")),
        _IMMEDIATE,
        description="EV charger present and not on a segregated circuit",
    ),
    ProceduralCheck(
        "TEST_DATA_INCOMPLETE",
        _both(_answered_no("rcd_tests.performed"), _answered_no("gpo_tests.performed")),
        _PLAN,
        description="Neither RCD nor GPO tests performed",
    ),
    ProceduralCheck(
        "BATTERY_THERMAL",
        _both(_answered_yes("assets.has_battery"), _answered_yes("assets.any_issues_observed")),
        _IMMEDIATE,
    ),
    ProceduralCheck(
        "PV_ISOLATION_UNVERIFIED",
        _both(_answered_yes("assets.has_solar_pv"), _answered_yes("assets.any_issues_observed")),
        _PLAN,
    ),
)


# =============================================================================
# Finding Deriver
# =============================================================================

class FindingDeriver:
    """
    Runs rule-table and procedural derivation over a fact table.

    Usage:
        deriver = FindingDeriver(config)
        findings = deriver.derive(facts)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        procedural_checks: Sequence[ProceduralCheck] = PROCEDURAL_CHECKS,
        compound_checks: Sequence[ProceduralCheck] = COMPOUND_CHECKS,
    ):
        self.config = config or EngineConfig()
        self.procedural_checks = tuple(procedural_checks)
        self.compound_checks = tuple(compound_checks)

    def derive(self, facts: Mapping[str, Any]) -> list[Finding]:
        """
        Derive findings from facts.

        Returns:
            One Finding per fired ID, in first-fire order
        """
        fired: dict[str, Finding] = {}

        evaluator = ConditionEvaluator(facts)
        for rule in self.config.finding_rules:
            if rule.finding_id in fired:
                continue
            if evaluator.fires(rule):
                fired[rule.finding_id] = self._make_finding(rule.finding_id, rule.priority_hint)

        for check in self.procedural_checks + self.compound_checks:
            if check.finding_id in fired:
                continue
            if check.fires(facts):
                logger.debug(f"Procedural check fired: {check.finding_id}")
                fired[check.finding_id] = self._make_finding(check.finding_id, check.priority_hint)

        return list(fired.values())

    def derive_and_merge(
        self,
        facts: Mapping[str, Any],
        existing: Iterable[Finding],
    ) -> list[Finding]:
        """Derived findings whose IDs are not already among existing."""
        existing_ids = {f.id for f in existing}
        return [f for f in self.derive(facts) if f.id not in existing_ids]

    def _make_finding(self, finding_id: str, priority_hint: str) -> Finding:
        profile = self.config.profile_for(finding_id)
        return Finding(
            id=finding_id,
            title=profile.title if profile else None,
            priority=priority_hint,
            source=FindingSource.STANDARD,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def derive_findings(
    facts: Mapping[str, Any],
    rules: Sequence[FindingRule] = (),
) -> list[Finding]:
    """Derive findings with an ad-hoc rule table and the built-in checks."""
    return FindingDeriver(EngineConfig(finding_rules=tuple(rules))).derive(facts)


def derive_and_merge_findings(
    facts: Mapping[str, Any],
    existing: Iterable[Finding],
    config: Optional[EngineConfig] = None,
) -> list[Finding]:
    """
    Derive findings, skipping IDs already present in existing.

    Convenience function that creates a temporary deriver.
    """
    return FindingDeriver(config).derive_and_merge(facts, existing)
