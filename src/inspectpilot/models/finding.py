"""
InspectPilot Finding Models

Models for findings and the metadata that drives their priority and score.

Key components:
- Finding: the per-inspection record produced by derivation and enriched
  by classification, priority resolution and scoring
- FindingProfile: static per-finding scoring attributes from configuration
- PriorityMeta: static safety/urgency/liability triple from priority rules
- FindingMeta: the effective, fully-defaulted dimensions of one finding
- OverrideEntry: one override source's values for one finding
- ClassificationResult: system group, space group and tags

Stages never mutate a Finding; they return copies via dataclasses.replace.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

from .enums import DEFAULT_PRIORITY, FindingSource, enum_text


# =============================================================================
# Value Helpers
# =============================================================================

def clean_text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing/blank values."""
    if value is None:
        return None
    text = enum_text(value).strip()
    return text or None


def as_number(value: Any) -> Optional[float]:
    """
    Return value if it is a real, non-NaN number.

    Booleans and numeric strings are not numbers here; explicit budgets and
    dimensions must be entered as numbers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def humanize_finding_id(finding_id: str) -> str:
    """Fallback title for a finding with no configured title."""
    return finding_id.replace("_", " ")


def _parse_source(value: Any) -> FindingSource:
    """Stored sources are matched case-insensitively; anything else is EXISTING."""
    text = clean_text(value)
    if text is None:
        return FindingSource.EXISTING
    try:
        return FindingSource(text.lower())
    except ValueError:
        return FindingSource.EXISTING


# =============================================================================
# Classification
# =============================================================================

@dataclass(frozen=True)
class ClassificationResult:
    """Derived grouping of a finding by its identifier."""
    system_group: str = "other"
    space_group: str = "general"
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "system_group": self.system_group,
            "space_group": self.space_group,
            "tags": list(self.tags),
        }


# =============================================================================
# Static Metadata
# =============================================================================

@dataclass(frozen=True)
class PriorityMeta:
    """Safety/urgency/liability triple from the priority rules document."""
    safety: str
    urgency: str
    liability: str


@dataclass(frozen=True)
class FindingProfile:
    """
    Static scoring profile for one finding ID.

    Fields left as None fall back to category defaults when the profile
    document is loaded, then to the fixed defaults in FindingMeta.
    """
    finding_id: str
    category: Optional[str] = None
    title: Optional[str] = None
    severity: Optional[float] = None
    likelihood: Optional[float] = None
    budget_band: Optional[str] = None
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None
    default_priority: Optional[str] = None
    escalation: Optional[str] = None
    safety: Optional[str] = None
    urgency: Optional[str] = None
    liability: Optional[str] = None


@dataclass(frozen=True)
class FindingMeta:
    """
    Effective dimensions of a finding after profiles and overrides merge.

    Every field resolves to a documented default, so one finding with no
    metadata never blocks the rest of the report.
    """
    safety: str = "MODERATE"
    urgency: str = "SHORT_TERM"
    liability: str = "MEDIUM"
    severity: float = 2
    likelihood: float = 2
    escalation: Optional[str] = None
    budget_band: str = "LOW"
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None
    category: Optional[str] = None

    @classmethod
    def from_profile(
        cls,
        profile: Optional[FindingProfile],
        priority_meta: Optional[PriorityMeta] = None,
    ) -> FindingMeta:
        """Build effective meta from static configuration."""
        meta = cls()
        if priority_meta is not None:
            meta = replace(
                meta,
                safety=priority_meta.safety,
                urgency=priority_meta.urgency,
                liability=priority_meta.liability,
            )
        if profile is None:
            return meta

        text_fields = ["escalation", "budget_band", "category"]
        # Priority rules own safety/urgency/liability when present
        if priority_meta is None:
            text_fields += ["safety", "urgency", "liability"]

        updates: dict[str, Any] = {}
        for name in text_fields:
            value = clean_text(getattr(profile, name))
            if value is not None:
                updates[name] = value
        for name in ("severity", "likelihood", "budget_low", "budget_high"):
            value = as_number(getattr(profile, name))
            if value is not None:
                updates[name] = value
        return replace(meta, **updates)

    def with_overrides(self, entry: Optional[OverrideEntry]) -> FindingMeta:
        """Layer an override entry's dimension fields on top of this meta."""
        if entry is None:
            return self
        updates: dict[str, Any] = {}
        for name in ("safety", "urgency", "liability", "escalation"):
            value = getattr(entry, name)
            if value is not None:
                updates[name] = value
        for name in ("severity", "likelihood"):
            value = getattr(entry, name)
            if value is not None:
                updates[name] = value
        return replace(self, **updates) if updates else self

    @property
    def has_budget(self) -> bool:
        return self.budget_low is not None and self.budget_high is not None


# =============================================================================
# Override Entry
# =============================================================================

@dataclass(frozen=True)
class OverrideEntry:
    """
    One override source's values for one finding.

    Any subset of fields may be set. Text fields are stripped and blank
    values treated as absent; numeric fields accept real numbers only.
    """
    title: Optional[str] = None
    priority: Optional[str] = None
    safety: Optional[str] = None
    urgency: Optional[str] = None
    liability: Optional[str] = None
    escalation: Optional[str] = None
    severity: Optional[float] = None
    likelihood: Optional[float] = None
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> OverrideEntry:
        """Parse an override mapping leniently (unknown keys ignored)."""
        if not data:
            return cls()
        text_fields = ("title", "priority", "safety", "urgency", "liability", "escalation")
        number_fields = ("severity", "likelihood", "budget_low", "budget_high")
        values: dict[str, Any] = {}
        for name in text_fields:
            values[name] = clean_text(data.get(name))
        for name in number_fields:
            values[name] = as_number(data.get(name))
        for name in ("priority", "safety", "urgency", "liability"):
            if values[name] is not None:
                values[name] = values[name].upper()
        return cls(**values)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @property
    def has_budget(self) -> bool:
        return self.budget_low is not None and self.budget_high is not None


# =============================================================================
# Finding
# =============================================================================

@dataclass(frozen=True)
class Finding:
    """
    A single detected condition in an inspection.

    Attributes:
        id: Stable finding identifier (e.g. "NO_RCD_PROTECTION")
        title: Display title
        priority: Base / legacy priority bucket
        priority_selected: Explicitly chosen bucket, may equal an override
        priority_calculated: Bucket derived from custom dimensions
        priority_final: Authoritative resolved bucket
        override_reason: Label of the override source that won, if any
        budget_low: Explicit budget lower bound
        budget_high: Explicit budget upper bound
        photo_ids: Attached photo identifiers
        source: Where the finding came from
        classification: System/space group and tags
        meta: Effective dimensions used for scoring
        score: Weighted finding score, set by scoring
    """
    id: str
    title: Optional[str] = None
    priority: Optional[str] = None
    priority_selected: Optional[str] = None
    priority_calculated: Optional[str] = None
    priority_final: Optional[str] = None
    override_reason: Optional[str] = None
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None
    photo_ids: tuple[str, ...] = ()
    source: FindingSource = FindingSource.STANDARD
    classification: Optional[ClassificationResult] = None
    meta: Optional[FindingMeta] = None
    score: Optional[float] = None

    @property
    def display_title(self) -> str:
        return clean_text(self.title) or humanize_finding_id(self.id)

    @property
    def effective_priority(self) -> str:
        """priority_final when resolved, else the best pre-resolution value."""
        return (
            clean_text(self.priority_final)
            or clean_text(self.priority_selected)
            or clean_text(self.priority)
            or DEFAULT_PRIORITY
        )

    @property
    def has_budget(self) -> bool:
        return as_number(self.budget_low) is not None and as_number(self.budget_high) is not None

    @property
    def category(self) -> Optional[str]:
        return self.meta.category if self.meta else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Finding:
        """Build a finding from a stored record (unknown keys ignored)."""
        finding_id = clean_text(data.get("id"))
        if finding_id is None:
            raise ValueError("Finding record requires a non-empty 'id'")
        source = _parse_source(data.get("source"))
        return cls(
            id=finding_id,
            title=clean_text(data.get("title")),
            priority=clean_text(data.get("priority")),
            priority_selected=clean_text(data.get("priority_selected")),
            priority_calculated=clean_text(data.get("priority_calculated")),
            priority_final=clean_text(data.get("priority_final")),
            override_reason=clean_text(data.get("override_reason")),
            budget_low=as_number(data.get("budget_low")),
            budget_high=as_number(data.get("budget_high")),
            photo_ids=tuple(str(p) for p in data.get("photo_ids") or ()),
            source=source,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the report binding layer."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.display_title,
            "priority": self.priority,
            "priority_selected": self.priority_selected,
            "priority_calculated": self.priority_calculated,
            "priority_final": self.effective_priority,
            "override_reason": self.override_reason,
            "budget_low": self.budget_low,
            "budget_high": self.budget_high,
            "photo_ids": list(self.photo_ids),
            "source": self.source.value,
        }
        if self.classification is not None:
            result.update(self.classification.to_dict())
        if self.score is not None:
            result["score"] = self.score
        return result
