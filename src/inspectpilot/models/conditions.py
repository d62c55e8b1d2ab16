"""
InspectPilot Rule Condition Models

Declarative finding rules evaluated against a flattened fact table.

Key components:
- RuleCondition: a single operator applied to a fact path
- FindingRule: a condition paired with the finding it raises

Paths are dot-delimited ("switchboard.asbestos_suspected"). A path of the
form "a.b[].c" reads the array stored at "a.b" and projects field "c" out
of each element; the condition then holds if ANY projected value matches.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .enums import NUMERIC_OPERATORS, ConditionOperator, PriorityBucket


ARRAY_MARKER = "[]."


# =============================================================================
# Rule Condition
# =============================================================================

@dataclass(frozen=True)
class RuleCondition:
    """
    A leaf comparison against the fact table.

    Attributes:
        field: Dot-notation fact path, optionally with one "[]." projection
        operator: Comparison operator
        value: Literal to compare against (for exists: True/False)
        compare_field: Second fact path to compare against instead of value
    """
    field: str
    operator: ConditionOperator
    value: Any = None
    compare_field: Optional[str] = None

    def __post_init__(self) -> None:
        if self.compare_field and self.operator not in NUMERIC_OPERATORS:
            raise ValueError(
                f"compare_field is only supported for numeric operators, "
                f"got '{self.operator.value}'"
            )

    @property
    def is_projection(self) -> bool:
        """True if the field projects over array elements."""
        return ARRAY_MARKER in self.field

    @property
    def array_path(self) -> Optional[str]:
        """Path of the projected array, if this is a projection."""
        if not self.is_projection:
            return None
        return self.field.split(ARRAY_MARKER, 1)[0]

    @property
    def item_field(self) -> Optional[str]:
        """Field read from each array element, if this is a projection."""
        if not self.is_projection:
            return None
        return self.field.split(ARRAY_MARKER, 1)[1]


# =============================================================================
# Finding Rule
# =============================================================================

@dataclass(frozen=True)
class FindingRule:
    """
    A rule that raises a finding when its condition holds.

    Several rules may share a finding_id; the first one that fires wins
    and the rest are skipped.
    """
    finding_id: str
    priority_hint: str
    when: RuleCondition
    description: Optional[str] = None

    @classmethod
    def simple(
        cls,
        finding_id: str,
        field: str,
        operator: ConditionOperator,
        value: Any = None,
        priority_hint: str = PriorityBucket.PLAN_MONITOR.value,
    ) -> FindingRule:
        """Shorthand for building a rule in code and tests."""
        return cls(
            finding_id=finding_id,
            priority_hint=priority_hint,
            when=RuleCondition(field=field, operator=operator, value=value),
        )
