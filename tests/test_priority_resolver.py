"""
Tests for InspectPilot Priority Resolver

Tests cover:
- Hard overrides
- Ordered matrix matching
- Liability adjustment and guardrails
- Custom-finding upgrade
- Override precedence for priority, title and budget
- Override audit and priority counts
"""
import logging
from itertools import product

import pytest

from inspectpilot.models import (
    FindingSource,
    Guardrail,
    LiabilityRule,
    LiabilityShift,
    MatrixEntry,
    OverrideEntry,
    OverrideSource,
    PriorityMeta,
)
from inspectpilot.engine.priority_resolver import (
    PriorityResolver,
    audit_overrides,
    count_priorities,
    is_override_valid,
    less_urgent,
    merge_overrides,
    more_urgent,
    resolve_priority_final,
)

from tests.conftest import (
    make_config,
    make_finding,
    make_override,
    make_priority_rules,
    make_profile,
)


SAFETY = ("LOW", "MODERATE", "HIGH")
URGENCY = ("LONG_TERM", "SHORT_TERM", "IMMEDIATE")
LIABILITY = ("LOW", "MEDIUM", "HIGH")
ALL_TRIPLES = list(product(SAFETY, URGENCY, LIABILITY))

# Matrix where HIGH safety lands in the downgradeable bucket
HIGH_TO_RECOMMENDED = (
    MatrixEntry(safety="HIGH", bucket="RECOMMENDED_0_3_MONTHS"),
    MatrixEntry(safety="MODERATE", urgency="SHORT_TERM", bucket="RECOMMENDED_0_3_MONTHS"),
    MatrixEntry(safety="LOW", bucket="PLAN_MONITOR"),
)


def resolver_for(**rule_kwargs) -> PriorityResolver:
    return PriorityResolver(make_config(priority_rules=make_priority_rules(**rule_kwargs)))


def meta(safety, urgency, liability) -> PriorityMeta:
    return PriorityMeta(safety=safety, urgency=urgency, liability=liability)


# =============================================================================
# Bucket Ordering Tests
# =============================================================================

class TestBucketOrdering:
    """Tests for more_urgent / less_urgent."""

    def test_more_urgent(self):
        """The more urgent bucket wins."""
        assert more_urgent("PLAN_MONITOR", "RECOMMENDED_0_3_MONTHS") == "RECOMMENDED_0_3_MONTHS"
        assert more_urgent("IMMEDIATE", "RECOMMENDED_0_3_MONTHS") == "IMMEDIATE"

    def test_less_urgent(self):
        """The less urgent bucket wins."""
        assert less_urgent("RECOMMENDED_0_3_MONTHS", "PLAN_MONITOR") == "PLAN_MONITOR"

    def test_ties_keep_first(self):
        """Synonyms of equal rank keep the first argument."""
        assert more_urgent("RECOMMENDED", "RECOMMENDED_0_3_MONTHS") == "RECOMMENDED"
        assert less_urgent("PLAN", "PLAN_MONITOR") == "PLAN"


# =============================================================================
# Base Bucket Tests
# =============================================================================

class TestBaseBucket:
    """Tests for PriorityResolver.base_bucket."""

    @pytest.mark.parametrize("safety,urgency,liability", ALL_TRIPLES)
    def test_hard_override_always_immediate(self, safety, urgency, liability):
        """Hard-override IDs resolve to IMMEDIATE for every input triple."""
        resolver = resolver_for(hard_overrides={"NO_RCD_PROTECTION"})
        assert resolver.base_bucket("NO_RCD_PROTECTION", meta(safety, urgency, liability)) == "IMMEDIATE"

    def test_high_safety_short_term_low_liability(self):
        """HIGH safety matches the first row; DOWN only touches RECOMMENDED."""
        resolver = resolver_for()
        assert resolver.base_bucket("X", meta("HIGH", "SHORT_TERM", "LOW")) == "IMMEDIATE"

    def test_down_blocked_by_high_safety_guardrail(self):
        """A HIGH-safety finding in RECOMMENDED is not downgraded."""
        resolver = resolver_for(matrix=HIGH_TO_RECOMMENDED)
        assert resolver.base_bucket("X", meta("HIGH", "SHORT_TERM", "LOW")) == "RECOMMENDED_0_3_MONTHS"

    def test_down_applies_without_guardrail(self):
        """The same finding is downgraded once the guardrail is removed."""
        resolver = resolver_for(matrix=HIGH_TO_RECOMMENDED, guardrails=())
        assert resolver.base_bucket("X", meta("HIGH", "SHORT_TERM", "LOW")) == "PLAN_MONITOR"

    @pytest.mark.parametrize("urgency", URGENCY)
    def test_down_never_fires_under_no_downgrade(self, urgency):
        """No urgency lets DOWN through for HIGH safety."""
        resolver = resolver_for(matrix=HIGH_TO_RECOMMENDED)
        assert resolver.base_bucket("X", meta("HIGH", urgency, "LOW")) == "RECOMMENDED_0_3_MONTHS"

    def test_guardrail_is_per_finding(self):
        """The HIGH-safety guardrail does not protect a MODERATE finding."""
        resolver = resolver_for()
        assert resolver.base_bucket("X", meta("MODERATE", "SHORT_TERM", "LOW")) == "PLAN_MONITOR"

    def test_up_from_plan_monitor(self):
        """HIGH liability raises PLAN_MONITOR to the ceiling."""
        resolver = resolver_for()
        assert resolver.base_bucket("X", meta("LOW", "LONG_TERM", "HIGH")) == "RECOMMENDED_0_3_MONTHS"

    def test_up_capped_at_ceiling(self):
        """UP never exceeds the configured ceiling."""
        resolver = resolver_for()
        assert resolver.base_bucket("X", meta("MODERATE", "SHORT_TERM", "HIGH")) == "RECOMMENDED_0_3_MONTHS"

    def test_up_leaves_immediate_alone(self):
        """UP only moves PLAN_MONITOR and RECOMMENDED."""
        liability_rules = (LiabilityRule(liability="HIGH", shift=LiabilityShift.UP, max_priority="URGENT"),)
        resolver = resolver_for(liability_rules=liability_rules)
        assert resolver.base_bucket("X", meta("HIGH", "SHORT_TERM", "HIGH")) == "IMMEDIATE"

    def test_immediate_urgency_skips_adjustment(self):
        """IMMEDIATE urgency bypasses liability adjustment entirely."""
        resolver = resolver_for(guardrails=())
        assert resolver.base_bucket("X", meta("LOW", "IMMEDIATE", "HIGH")) == "PLAN_MONITOR"

    def test_no_liability_adjustment_guardrail(self):
        """A matching guardrail can disable liability adjustment."""
        guardrails = (Guardrail(when={"liability": "HIGH"}, allow_liability_adjustment=False),)
        resolver = resolver_for(guardrails=guardrails)
        assert resolver.base_bucket("X", meta("LOW", "LONG_TERM", "HIGH")) == "PLAN_MONITOR"

    def test_urgency_specific_row(self):
        """Rows with urgency only match that urgency."""
        resolver = resolver_for()
        assert resolver.base_bucket("X", meta("MODERATE", "IMMEDIATE", "MEDIUM")) == "IMMEDIATE"
        assert resolver.base_bucket("X", meta("MODERATE", "LONG_TERM", "MEDIUM")) == "PLAN_MONITOR"

    def test_first_matching_row_wins(self):
        """Matrix order decides between overlapping rows."""
        matrix = (
            MatrixEntry(safety="MODERATE", bucket="URGENT"),
            MatrixEntry(safety="MODERATE", urgency="SHORT_TERM", bucket="IMMEDIATE"),
        )
        resolver = resolver_for(matrix=matrix, liability_rules=())
        assert resolver.base_bucket("X", meta("MODERATE", "SHORT_TERM", "MEDIUM")) == "URGENT"

    def test_no_matching_row(self):
        """Without a matching row the default bucket applies."""
        resolver = resolver_for(matrix=(), liability_rules=())
        assert resolver.base_bucket("X", meta("HIGH", "SHORT_TERM", "MEDIUM")) == "PLAN_MONITOR"

    def test_shipped_rules(self, default_config):
        """Shipped meta and matrix give the expected buckets."""
        resolver = PriorityResolver(default_config)
        rules = default_config.priority_rules

        assert resolver.base_bucket("EARTH_DEGRADED", rules.meta_for("EARTH_DEGRADED")) == "RECOMMENDED_0_3_MONTHS"
        assert resolver.base_bucket("LABELING_POOR", rules.meta_for("LABELING_POOR")) == "PLAN_MONITOR"
        assert resolver.base_bucket("LEGACY_DEVICES", rules.meta_for("LEGACY_DEVICES")) == "PLAN_MONITOR"
        assert resolver.base_bucket("NO_RCD_PROTECTION", rules.meta_for("NO_RCD_PROTECTION")) == "IMMEDIATE"


# =============================================================================
# Custom Finding Tests
# =============================================================================

class TestCustomBucket:
    """Tests for the custom-finding upgrade."""

    def test_severity_times_likelihood_at_threshold(self):
        """4 x 3 = 12 with HIGH escalation upgrades PLAN_MONITOR."""
        dims = make_override(
            safety="LOW", urgency="LONG_TERM", liability="MEDIUM",
            severity=4, likelihood=3, escalation="HIGH",
        )
        assert resolver_for().custom_bucket("CUSTOM_1", dims) == "RECOMMENDED_0_3_MONTHS"

    def test_score_alone_upgrades(self):
        """Reaching the threshold is enough without escalation."""
        dims = make_override(safety="LOW", urgency="LONG_TERM", liability="MEDIUM", severity=4, likelihood=3)
        assert resolver_for().custom_bucket("CUSTOM_1", dims) == "RECOMMENDED_0_3_MONTHS"

    def test_escalation_alone_upgrades(self):
        """HIGH escalation upgrades, whatever its case."""
        dims = make_override(safety="LOW", urgency="LONG_TERM", liability="MEDIUM", escalation="high")
        assert resolver_for().custom_bucket("CUSTOM_1", dims) == "RECOMMENDED_0_3_MONTHS"

    def test_below_threshold(self):
        """3 x 3 without escalation stays PLAN_MONITOR."""
        dims = make_override(safety="LOW", urgency="LONG_TERM", liability="MEDIUM", severity=3, likelihood=3)
        assert resolver_for().custom_bucket("CUSTOM_1", dims) == "PLAN_MONITOR"

    def test_missing_likelihood_counts_as_zero(self):
        """A missing dimension never reaches the threshold."""
        dims = make_override(safety="LOW", urgency="LONG_TERM", liability="MEDIUM", severity=5)
        assert resolver_for().custom_bucket("CUSTOM_1", dims) == "PLAN_MONITOR"

    def test_configurable_threshold(self):
        """The threshold comes from the priority rules."""
        dims = make_override(safety="LOW", urgency="LONG_TERM", liability="MEDIUM", severity=2, likelihood=3)
        assert resolver_for(custom_threshold=6).custom_bucket("CUSTOM_1", dims) == "RECOMMENDED_0_3_MONTHS"

    def test_defaults_without_dimensions(self):
        """No dimensions means MODERATE / SHORT_TERM / MEDIUM."""
        assert resolver_for().custom_bucket("CUSTOM_1", None) == "RECOMMENDED_0_3_MONTHS"

    @pytest.mark.parametrize("safety,urgency,liability", ALL_TRIPLES)
    def test_upgrade_only_from_plan_monitor(self, safety, urgency, liability):
        """The upgrade never changes any other base bucket."""
        resolver = resolver_for()
        base = resolver.base_bucket("CUSTOM_1", meta(safety, urgency, liability))
        dims = make_override(
            safety=safety, urgency=urgency, liability=liability,
            severity=5, likelihood=5, escalation="HIGH",
        )
        calculated = resolver.custom_bucket("CUSTOM_1", dims)

        if base == "PLAN_MONITOR":
            assert calculated == "RECOMMENDED_0_3_MONTHS"
        else:
            assert calculated == base


# =============================================================================
# Override Merge Tests
# =============================================================================

class TestMergeOverrides:
    """Tests for merge_overrides."""

    def test_debug_over_global(self):
        """The first source to set a field wins."""
        merged = merge_overrides([
            (OverrideSource.DEBUG, make_override(priority="PLAN_MONITOR", title="Debug")),
            (OverrideSource.GLOBAL, make_override(priority="IMMEDIATE", title="Global")),
        ])
        assert merged.priority == "PLAN_MONITOR"
        assert merged.priority_source == OverrideSource.DEBUG
        assert merged.title == "Debug"

    def test_fields_independent(self):
        """A source may override one field and not another."""
        merged = merge_overrides([
            (OverrideSource.DEBUG, make_override(title="Debug", budget_low=100)),
            (OverrideSource.GLOBAL, make_override(priority="URGENT", budget_low=50, budget_high=500)),
        ])
        assert merged.title == "Debug"
        assert merged.priority == "URGENT"
        assert merged.priority_source == OverrideSource.GLOBAL
        assert (merged.budget_low, merged.budget_high) == (100, 500)

    def test_custom_dimensions_never_set_priority(self):
        """Custom dimensions feed the calculated bucket, not the override."""
        merged = merge_overrides([
            (OverrideSource.CUSTOM_DIMENSIONS, make_override(priority="IMMEDIATE")),
        ])
        assert merged.priority is None

    def test_custom_dimensions_budget_needs_pair(self):
        """A half-entered custom budget is ignored."""
        partial = merge_overrides([(OverrideSource.CUSTOM_DIMENSIONS, make_override(budget_low=100))])
        full = merge_overrides([
            (OverrideSource.CUSTOM_DIMENSIONS, make_override(budget_low=100, budget_high=300)),
        ])
        assert (partial.budget_low, partial.budget_high) == (None, None)
        assert (full.budget_low, full.budget_high) == (100, 300)

    def test_missing_sources_skipped(self):
        """None entries contribute nothing."""
        merged = merge_overrides([(OverrideSource.DEBUG, None), (OverrideSource.GLOBAL, None)])
        assert merged.priority is None
        assert merged.title is None


# =============================================================================
# priority_final Tests
# =============================================================================

class TestResolvePriorityFinal:
    """Tests for resolve_priority_final precedence."""

    @pytest.mark.parametrize("debug_priority", ["IMMEDIATE", "URGENT", "RECOMMENDED_0_3_MONTHS", "PLAN_MONITOR"])
    def test_debug_wins_over_everything(self, debug_priority):
        """With debug, global and calculated present, debug always wins."""
        finding = make_finding(
            priority="RECOMMENDED_0_3_MONTHS",
            priority_selected="URGENT",
            priority_calculated="IMMEDIATE",
        )
        final, reason = resolve_priority_final(
            finding,
            debug=make_override(priority=debug_priority),
            global_override=make_override(priority="PLAN_MONITOR"),
        )
        assert final == debug_priority
        assert reason == OverrideSource.DEBUG.value

    def test_global_without_debug(self):
        """Global applies when debug has no priority."""
        finding = make_finding(priority_calculated="IMMEDIATE")
        final, reason = resolve_priority_final(
            finding,
            debug=make_override(title="Only a title"),
            global_override=make_override(priority="PLAN_MONITOR"),
        )
        assert final == "PLAN_MONITOR"
        assert reason == OverrideSource.GLOBAL.value

    def test_blank_debug_priority_ignored(self):
        """A whitespace-only debug priority is not an override."""
        finding = make_finding(priority="URGENT")
        final, _ = resolve_priority_final(finding, debug=make_override(priority="   "))
        assert final == "URGENT"

    def test_calculated_over_selected(self):
        """priority_calculated beats priority_selected."""
        finding = make_finding(priority_selected="PLAN_MONITOR", priority_calculated="RECOMMENDED_0_3_MONTHS")
        assert resolve_priority_final(finding)[0] == "RECOMMENDED_0_3_MONTHS"

    def test_selected_over_priority(self):
        """priority_selected beats the base priority."""
        finding = make_finding(priority="PLAN_MONITOR", priority_selected="URGENT")
        assert resolve_priority_final(finding)[0] == "URGENT"

    def test_default_plan_monitor(self):
        """Nothing set resolves to PLAN_MONITOR with no reason."""
        assert resolve_priority_final(make_finding()) == ("PLAN_MONITOR", None)

    def test_own_reason_kept(self):
        """Without an override source the finding's reason is kept."""
        finding = make_finding(priority_selected="URGENT", override_reason="Client request")
        assert resolve_priority_final(finding) == ("URGENT", "Client request")


# =============================================================================
# Full Resolution Tests
# =============================================================================

@pytest.fixture
def resolver():
    """Resolver with a small profile set and one global override."""
    config = make_config(
        priority_rules=make_priority_rules(
            hard_overrides={"NO_RCD_PROTECTION"},
            findings={
                "NO_RCD_PROTECTION": meta("HIGH", "IMMEDIATE", "HIGH"),
                "EARTH_DEGRADED": meta("MODERATE", "SHORT_TERM", "MEDIUM"),
                "LABELING_POOR": meta("LOW", "LONG_TERM", "LOW"),
            },
        ),
        profiles=[
            make_profile("NO_RCD_PROTECTION", category="SHOCK", title="No RCD protection",
                         severity=5, likelihood=4, budget_band="MED", budget_low=600, budget_high=1200),
            make_profile("EARTH_DEGRADED", category="SHOCK", title="Earth degraded", severity=4, likelihood=2),
            make_profile("LABELING_POOR", category="COMPLIANCE", title="Poor labelling",
                         severity=1, likelihood=3, budget_low=150, budget_high=300),
            make_profile("NO_META", title="Profile only", default_priority="URGENT"),
        ],
        global_overrides={
            "LABELING_POOR": make_override(title="Labelling unclear", priority="RECOMMENDED_0_3_MONTHS"),
        },
    )
    return PriorityResolver(config)


class TestResolve:
    """Tests for PriorityResolver.resolve."""

    def test_standard_uses_base_bucket(self, resolver):
        """Standard findings with priority meta take the computed bucket."""
        finding = resolver.resolve(make_finding("EARTH_DEGRADED", priority="IMMEDIATE"))

        assert finding.priority == "RECOMMENDED_0_3_MONTHS"
        assert finding.priority_final == "RECOMMENDED_0_3_MONTHS"
        assert finding.override_reason is None

    def test_hard_override(self, resolver):
        """Hard-override findings resolve IMMEDIATE."""
        finding = resolver.resolve(make_finding("NO_RCD_PROTECTION", priority="PLAN_MONITOR"))
        assert finding.priority_final == "IMMEDIATE"

    def test_existing_priority_kept(self, resolver):
        """An existing finding keeps its stored priority."""
        finding = resolver.resolve(
            make_finding("EARTH_DEGRADED", priority="PLAN_MONITOR", source=FindingSource.EXISTING)
        )
        assert finding.priority_final == "PLAN_MONITOR"

    def test_profile_default_priority(self, resolver):
        """Without priority meta, the profile default fills a missing priority."""
        finding = resolver.resolve(make_finding("NO_META", source=FindingSource.EXISTING))
        assert finding.priority_final == "URGENT"

    def test_unknown_finding_defaults(self, resolver):
        """A finding with no configuration resolves with fixed defaults."""
        finding = resolver.resolve(make_finding("UNKNOWN", source=FindingSource.EXISTING))

        assert finding.priority_final == "PLAN_MONITOR"
        assert finding.meta.severity == 2
        assert finding.meta.likelihood == 2
        assert finding.meta.safety == "MODERATE"
        assert finding.meta.urgency == "SHORT_TERM"
        assert finding.meta.liability == "MEDIUM"
        assert finding.display_title == "UNKNOWN"

    def test_global_override(self, resolver):
        """Global overrides set priority, title and reason."""
        finding = resolver.resolve(make_finding("LABELING_POOR", priority="PLAN_MONITOR"))

        assert finding.priority == "PLAN_MONITOR"
        assert finding.priority_final == "RECOMMENDED_0_3_MONTHS"
        assert finding.override_reason == OverrideSource.GLOBAL.value
        assert finding.title == "Labelling unclear"

    def test_debug_beats_global(self, resolver):
        """Debug overrides win over global ones field by field."""
        debug = make_override(priority="PLAN_MONITOR", budget_low=90)
        finding = resolver.resolve(make_finding("LABELING_POOR"), debug=debug)

        assert finding.priority_final == "PLAN_MONITOR"
        assert finding.override_reason == OverrideSource.DEBUG.value
        assert finding.title == "Labelling unclear"
        assert (finding.budget_low, finding.budget_high) == (90, 300)

    def test_profile_title_and_budget(self, resolver):
        """Titles and budgets fall back to the profile."""
        finding = resolver.resolve(make_finding("NO_RCD_PROTECTION"))

        assert finding.title == "No RCD protection"
        assert (finding.budget_low, finding.budget_high) == (600, 1200)

    def test_finding_budget_before_profile(self, resolver):
        """A finding's own budget pair beats the profile's."""
        finding = resolver.resolve(make_finding("NO_RCD_PROTECTION", budget_low=10, budget_high=20))
        assert (finding.budget_low, finding.budget_high) == (10, 20)

    def test_no_budget_anywhere(self, resolver):
        """No budget source leaves the budget unset."""
        finding = resolver.resolve(make_finding("EARTH_DEGRADED"))
        assert finding.has_budget is False

    def test_custom_finding(self, resolver):
        """Custom findings get a calculated bucket that beats their selection."""
        dims = make_override(
            safety="LOW", urgency="LONG_TERM", liability="MEDIUM",
            severity=4, likelihood=3, escalation="HIGH", budget_low=200, budget_high=400,
        )
        finding = make_finding("CUSTOM_1", title="Loose meter box", priority="PLAN_MONITOR",
                               source=FindingSource.CUSTOM)

        resolved = resolver.resolve(finding, custom=dims)

        assert resolved.priority_calculated == "RECOMMENDED_0_3_MONTHS"
        assert resolved.priority_selected == "PLAN_MONITOR"
        assert resolved.priority_final == "RECOMMENDED_0_3_MONTHS"
        assert (resolved.budget_low, resolved.budget_high) == (200, 400)
        assert resolved.meta.severity == 4
        assert resolved.meta.likelihood == 3

    def test_custom_dimensions_ignored_for_standard(self, resolver):
        """Custom dimensions only apply to custom findings."""
        dims = make_override(severity=5, likelihood=5)
        finding = resolver.resolve(make_finding("EARTH_DEGRADED"), custom=dims)

        assert finding.priority_calculated is None
        assert finding.meta.severity == 4

    def test_debug_dimensions_feed_meta(self, resolver):
        """Debug severity/likelihood overrides reach the scoring meta."""
        finding = resolver.resolve(make_finding("EARTH_DEGRADED"), debug=make_override(severity=1))
        assert finding.meta.severity == 1
        assert finding.meta.likelihood == 2

    def test_every_finding_gets_priority_final(self, resolver):
        """resolve_all populates priority_final for every finding, in order."""
        findings = resolver.resolve_all([
            make_finding("EARTH_DEGRADED"),
            make_finding("UNKNOWN"),
            make_finding("CUSTOM_2", source=FindingSource.CUSTOM),
        ])

        assert [f.id for f in findings] == ["EARTH_DEGRADED", "UNKNOWN", "CUSTOM_2"]
        assert all(f.priority_final for f in findings)

    def test_input_not_mutated(self, resolver):
        """Resolution returns copies."""
        original = make_finding("EARTH_DEGRADED")
        resolver.resolve(original)
        assert original.priority_final is None


# =============================================================================
# Audit and Count Tests
# =============================================================================

class TestOverrideAudit:
    """Tests for override validity checks."""

    def test_matching_selection_valid(self):
        """Selecting the calculated bucket needs no reason."""
        finding = make_finding(priority_selected="URGENT", priority_calculated="URGENT")
        assert is_override_valid(finding) is True

    def test_no_calculated_valid(self):
        """Without a calculated bucket there is nothing to audit."""
        assert is_override_valid(make_finding(priority_selected="URGENT")) is True

    def test_departure_without_reason_invalid(self):
        """A departure from the calculated bucket needs a reason."""
        finding = make_finding(priority_selected="URGENT", priority_calculated="PLAN_MONITOR")
        assert is_override_valid(finding) is False

    def test_departure_with_reason_valid(self):
        """A recorded reason makes the departure valid."""
        finding = make_finding(
            priority_selected="URGENT", priority_calculated="PLAN_MONITOR",
            override_reason="Tenant reported shocks",
        )
        assert is_override_valid(finding) is True

    def test_audit_logs_invalid(self, caplog):
        """audit_overrides warns for each invalid finding."""
        findings = [
            make_finding("A", priority_selected="URGENT", priority_calculated="PLAN_MONITOR"),
            make_finding("B", priority_selected="URGENT", priority_calculated="URGENT"),
        ]
        with caplog.at_level(logging.WARNING, logger="inspectpilot.engine.priority_resolver"):
            invalid = audit_overrides(findings, "INS-001")

        assert invalid == ["A"]
        assert "INS-001" in caplog.text


class TestCountPriorities:
    """Tests for count_priorities."""

    def test_groups(self):
        """Buckets and synonyms fall into the four groups."""
        findings = [
            make_finding("A", priority_final="IMMEDIATE"),
            make_finding("B", priority_final="URGENT"),
            make_finding("C", priority_final="RECOMMENDED_0_3_MONTHS"),
            make_finding("D", priority_final="RECOMMENDED"),
            make_finding("E", priority_final="PLAN_MONITOR"),
            make_finding("F", priority_final="PLAN"),
            make_finding("G", priority_final="SOMEDAY"),
        ]
        counts = count_priorities(findings)

        assert counts.to_dict() == {"immediate": 1, "urgent": 1, "recommended": 2, "plan": 3}
        assert counts.total == 7

    def test_empty(self):
        """No findings counts zero everywhere."""
        assert count_priorities([]).total == 0

    def test_unresolved_uses_effective_priority(self):
        """Unresolved findings count by their best available priority."""
        counts = count_priorities([make_finding(priority="IMMEDIATE"), make_finding()])
        assert (counts.immediate, counts.plan) == (1, 1)


def test_override_entry_blank_values():
    """Blank override values are treated as absent."""
    entry = OverrideEntry.from_dict({"title": "  ", "priority": "", "severity": "3"})
    assert entry.is_empty
