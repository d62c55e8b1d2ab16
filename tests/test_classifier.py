"""
Tests for InspectPilot Finding Classifier

Tests cover:
- First-match-wins system and space groups
- All-matches tag collection in table order
- Identifier normalization
- Defaults for unknown identifiers
"""
import pytest

from inspectpilot.models import ClassificationResult
from inspectpilot.engine.classifier import (
    DEFAULT_SPACE_GROUP,
    DEFAULT_SYSTEM_GROUP,
    classify_finding,
    classify_findings,
    normalize_finding_id,
)

from tests.conftest import make_finding


class TestNormalization:
    """Tests for identifier normalization."""

    def test_uppercase_and_hyphens(self):
        """IDs are uppercased with hyphens folded to underscores."""
        assert normalize_finding_id("gpo-earth-fault") == "GPO_EARTH_FAULT"

    def test_whitespace_stripped(self):
        """Surrounding whitespace is removed."""
        assert normalize_finding_id("  labeling_poor ") == "LABELING_POOR"


class TestClassifyFinding:
    """Tests for classify_finding."""

    @pytest.mark.parametrize("finding_id,system_group,space_group,tags", [
        ("NO_RCD_PROTECTION", "rcd", "general", ("safety", "rcd")),
        ("ASBESTOS_RISK", "other", "general", ("safety", "hazard")),
        ("LABELING_POOR", "switchboard", "general", ("compliance",)),
        ("COOKTOP_ISOLATOR_MISSING", "appliances", "kitchen", ("appliance",)),
    ])
    def test_known_ids(self, finding_id, system_group, space_group, tags):
        """Known identifiers classify by the keyword tables."""
        result = classify_finding(finding_id)

        assert result.system_group == system_group
        assert result.space_group == space_group
        assert result.tags == tags

    def test_first_system_match_wins(self):
        """An ID matching several system groups takes the earliest entry."""
        # EARTH appears in the earthing entry before GPO_EARTH_FAULT in power
        assert classify_finding("GPO_EARTH_FAULT").system_group == "earthing"

    def test_tags_collect_every_match(self):
        """Tags accumulate across entries in table order."""
        assert classify_finding("GPO_EARTH_FAULT").tags == ("earthing", "power")

    def test_hyphenated_lowercase_id(self):
        """Normalization makes separator and case irrelevant."""
        assert classify_finding("gpo-earth-fault") == classify_finding("GPO_EARTH_FAULT")

    def test_unknown_id_defaults(self):
        """Unmatched IDs take the default groups and no tags."""
        result = classify_finding("XYZ")

        assert result.system_group == DEFAULT_SYSTEM_GROUP
        assert result.space_group == DEFAULT_SPACE_GROUP
        assert result.tags == ()

    def test_results_cached(self):
        """Repeated lookups return the cached result."""
        assert classify_finding("SWITCH_ARCING") is classify_finding("SWITCH_ARCING")

    def test_to_dict(self):
        """Classification serializes with a tag list."""
        assert classify_finding("NO_RCD_PROTECTION").to_dict() == {
            "system_group": "rcd",
            "space_group": "general",
            "tags": ["safety", "rcd"],
        }


class TestClassifyFindings:
    """Tests for classify_findings."""

    def test_classification_attached(self):
        """Each finding gets a ClassificationResult."""
        findings = classify_findings([make_finding("NO_RCD_PROTECTION"), make_finding("XYZ")])

        assert all(isinstance(f.classification, ClassificationResult) for f in findings)
        assert findings[0].classification.system_group == "rcd"

    def test_inputs_not_mutated(self):
        """Originals keep no classification."""
        original = make_finding("NO_RCD_PROTECTION")
        classify_findings([original])
        assert original.classification is None
