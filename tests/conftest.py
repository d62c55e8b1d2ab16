"""
Pytest configuration and fixtures for InspectPilot tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest

from inspectpilot.models import (
    EngineConfig,
    Finding,
    FindingProfile,
    FindingSource,
    Guardrail,
    LiabilityRule,
    LiabilityShift,
    MatrixEntry,
    OverrideEntry,
    PriorityMeta,
    PriorityRules,
)
from inspectpilot.packs import load_default_config


# =============================================================================
# Factory Helpers
# =============================================================================

def make_answer(value, status: str = "answered", **extra) -> dict:
    """Create an answer envelope as stored by the inspection form."""
    envelope = {"value": value, "status": status}
    envelope.update(extra)
    return envelope


def make_skipped(reason: str, note: str = None) -> dict:
    """Create a skipped answer envelope."""
    envelope = {"value": None, "status": "skipped", "skip_reason": reason}
    if note:
        envelope["skip_note"] = note
    return envelope


def make_finding(
    id: str = "TEST_FINDING",
    title: str = None,
    priority: str = None,
    priority_selected: str = None,
    priority_calculated: str = None,
    priority_final: str = None,
    override_reason: str = None,
    budget_low: float = None,
    budget_high: float = None,
    source: FindingSource = FindingSource.STANDARD,
    meta=None,
) -> Finding:
    """Create a Finding with required fields."""
    return Finding(
        id=id,
        title=title,
        priority=priority,
        priority_selected=priority_selected,
        priority_calculated=priority_calculated,
        priority_final=priority_final,
        override_reason=override_reason,
        budget_low=budget_low,
        budget_high=budget_high,
        source=source,
        meta=meta,
    )


def make_profile(
    finding_id: str = "TEST_FINDING",
    category: str = None,
    title: str = None,
    severity: float = None,
    likelihood: float = None,
    budget_band: str = None,
    budget_low: float = None,
    budget_high: float = None,
    default_priority: str = None,
    escalation: str = None,
) -> FindingProfile:
    """Create a FindingProfile."""
    return FindingProfile(
        finding_id=finding_id,
        category=category,
        title=title,
        severity=severity,
        likelihood=likelihood,
        budget_band=budget_band,
        budget_low=budget_low,
        budget_high=budget_high,
        default_priority=default_priority,
        escalation=escalation,
    )


def make_override(**values) -> OverrideEntry:
    """Create an OverrideEntry from keyword values."""
    return OverrideEntry.from_dict(values)


def make_priority_rules(
    hard_overrides=(),
    matrix=None,
    liability_rules=None,
    guardrails=None,
    findings: dict = None,
    custom_threshold: float = 12,
) -> PriorityRules:
    """
    Create PriorityRules shaped like the shipped priority document.

    The matrix, liability rules and guardrails default to the standard
    set; pass explicit tuples to build a fixture matrix.
    """
    if matrix is None:
        matrix = (
            MatrixEntry(safety="HIGH", bucket="IMMEDIATE"),
            MatrixEntry(safety="MODERATE", urgency="IMMEDIATE", bucket="IMMEDIATE"),
            MatrixEntry(safety="MODERATE", urgency="SHORT_TERM", bucket="RECOMMENDED_0_3_MONTHS"),
            MatrixEntry(safety="MODERATE", urgency="LONG_TERM", bucket="PLAN_MONITOR"),
            MatrixEntry(safety="LOW", bucket="PLAN_MONITOR"),
        )
    if liability_rules is None:
        liability_rules = (
            LiabilityRule(liability="HIGH", shift=LiabilityShift.UP, max_priority="RECOMMENDED_0_3_MONTHS"),
            LiabilityRule(liability="MEDIUM", shift=LiabilityShift.NONE),
            LiabilityRule(liability="LOW", shift=LiabilityShift.DOWN, min_priority="PLAN_MONITOR"),
        )
    if guardrails is None:
        guardrails = (
            Guardrail(when={"safety": "HIGH"}, allow_downgrade=False),
            Guardrail(when={"urgency": "IMMEDIATE"}, allow_liability_adjustment=False),
        )
    return PriorityRules(
        hard_overrides=frozenset(hard_overrides),
        matrix=tuple(matrix),
        liability_rules=tuple(liability_rules),
        guardrails=tuple(guardrails),
        findings=findings or {},
        custom_threshold=custom_threshold,
    )


def make_config(
    priority_rules: PriorityRules = None,
    profiles: list = None,
    global_overrides: dict = None,
    finding_rules=(),
) -> EngineConfig:
    """Create an EngineConfig from factory parts."""
    return EngineConfig(
        finding_rules=tuple(finding_rules),
        priority_rules=priority_rules or make_priority_rules(),
        profiles={p.finding_id: p for p in profiles or []},
        global_overrides=global_overrides or {},
        fingerprint="test",
    )


# =============================================================================
# Common Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def default_config() -> EngineConfig:
    """The configuration documents shipped with the package."""
    return load_default_config()


@pytest.fixture
def moderate_meta() -> PriorityMeta:
    """MODERATE / SHORT_TERM / MEDIUM, the documented default triple."""
    return PriorityMeta(safety="MODERATE", urgency="SHORT_TERM", liability="MEDIUM")


@pytest.fixture
def sample_answers() -> dict:
    """A small enveloped answer document with a few hazards."""
    return {
        "switchboard": {
            "asbestos_suspected": make_answer("no"),
            "labelling_quality": make_answer("poor"),
            "protection_types_present": make_answer(["rcd", "mcb"]),
            "board_at_capacity": make_answer(True),
        },
        "rcd_tests": {
            "performed": make_answer(True),
            "exceptions": make_answer([
                {"location": "Kitchen", "result": "pass", "trip_time_ms": 25},
                {"location": "Laundry", "result": "fail", "trip_time_ms": 410},
            ]),
        },
        "earthing": {
            "men_link_confirmed": make_answer("yes"),
        },
        "access": {
            "roof_accessible": make_skipped("inaccessible", "No ladder access"),
        },
    }
