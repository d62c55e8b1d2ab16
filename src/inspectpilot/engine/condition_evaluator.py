"""
InspectPilot Condition Evaluator

Evaluates finding rule conditions against a flattened fact table.

Key features:
- Dot-path lookup with "a.b[].c" array projection
- Existential semantics: a condition holds if ANY resolved value matches
- Loose equality ("true" == True, "3" == 3)
- Numeric comparison against a literal or a second fact path
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from ..exceptions import InvalidConditionError
from ..models import ARRAY_MARKER, ConditionOperator, FindingRule, RuleCondition
from .facts import unwrap_envelope

logger = logging.getLogger(__name__)


# =============================================================================
# Path Resolution
# =============================================================================

def _unwrap(value: Any) -> Any:
    # Array elements may still carry answer envelopes
    value, _ = unwrap_envelope(value)
    return value


def _get_nested(item: Any, path: str) -> Any:
    current = item
    for part in path.split("."):
        current = _unwrap(current)
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return _unwrap(current)


def resolve_path_values(facts: Mapping[str, Any], path: str) -> list[Any]:
    """
    Resolve a fact path to the list of values a condition is tested against.

    - "a.b" yields [facts["a.b"]], or [] when absent or None
    - "a.b[].c" yields field "c" of every mapping element of the array at
      "a.b", skipping elements where it is missing or None

    Returns:
        List of resolved values (possibly empty)
    """
    if ARRAY_MARKER in path:
        array_path, item_field = path.split(ARRAY_MARKER, 1)
        items = facts.get(array_path)
        if not isinstance(items, (list, tuple)):
            return []
        values = []
        for item in items:
            value = _get_nested(item, item_field)
            if value is not None:
                values.append(value)
        return values

    value = facts.get(path)
    return [] if value is None else [value]


# =============================================================================
# Value Coercion
# =============================================================================

def coerce_number(value: Any) -> Optional[float]:
    """
    Coerce a fact or literal to a number.

    Numeric strings are parsed; booleans, NaN and anything unparseable
    return None so the comparison fails instead of guessing.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def loose_equals(actual: Any, expected: Any) -> bool:
    """
    Equality with light coercion between answer and rule literals.

    - bool vs "true"/"false" (case-insensitive)
    - number vs numeric string
    - otherwise plain equality
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        if isinstance(actual, bool) and isinstance(expected, bool):
            return actual == expected
        flag, other = (actual, expected) if isinstance(actual, bool) else (expected, actual)
        if isinstance(other, str):
            return other.strip().lower() == str(flag).lower()
        return False

    if isinstance(actual, (int, float)) or isinstance(expected, (int, float)):
        left, right = coerce_number(actual), coerce_number(expected)
        if left is not None and right is not None:
            return left == right
        return False

    return actual == expected


def value_contains(actual: Any, search: Any) -> bool:
    """
    Substring match for strings, element match for arrays.

    Array elements match when equal to, or containing, the search text
    after string coercion.
    """
    if actual is None or search is None:
        return False
    needle = str(search)
    if isinstance(actual, str):
        return needle in actual
    if isinstance(actual, (list, tuple)):
        return any(str(item) == needle or needle in str(item) for item in actual)
    return needle in str(actual)


# =============================================================================
# Comparison Operators
# =============================================================================

def compare_values(actual: Any, operator: ConditionOperator, expected: Any) -> bool:
    """
    Compare one resolved value against an expected value.

    exists is handled by evaluate_condition and is not accepted here.

    Raises:
        InvalidConditionError: If the operator is not a comparison operator
    """
    if operator == ConditionOperator.EQUALS:
        return loose_equals(actual, expected)

    elif operator == ConditionOperator.NOT_EQUALS:
        return not loose_equals(actual, expected)

    elif operator == ConditionOperator.CONTAINS:
        return value_contains(actual, expected)

    elif operator == ConditionOperator.NOT_CONTAINS:
        if isinstance(actual, (list, tuple)):
            return not any(str(item) == str(expected) for item in actual)
        return not value_contains(actual, expected)

    elif operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        left, right = coerce_number(actual), coerce_number(expected)
        if left is None or right is None:
            return False
        if operator == ConditionOperator.GREATER_THAN:
            return left > right
        return left < right

    raise InvalidConditionError(
        message=f"Unsupported comparison operator: {operator}",
        details={"operator": str(operator)},
    )


def evaluate_condition(condition: RuleCondition, facts: Mapping[str, Any]) -> bool:
    """
    Evaluate a rule condition against the fact table.

    - exists: True/False target tests presence/absence of any value
    - compare_field: first value of each path compared numerically
    - otherwise: True if ANY resolved value satisfies the operator;
      array-valued facts are tested element by element except for
      contains/not_contains; an absent path never matches

    Raises:
        InvalidConditionError: If the operator is unknown
    """
    operator = _as_operator(condition.operator)
    values = resolve_path_values(facts, condition.field)

    if operator == ConditionOperator.EXISTS:
        expected = condition.value if isinstance(condition.value, bool) else True
        return bool(values) == expected

    if not values:
        return False

    if condition.compare_field:
        others = resolve_path_values(facts, condition.compare_field)
        if not others:
            return False
        return _satisfies(values[0], operator, others[0])

    return any(_satisfies(value, operator, condition.value) for value in values)


# Operators that test an array-valued fact one element at a time.
# contains/not_contains keep testing membership of the whole array.
ELEMENTWISE_OPERATORS = (
    ConditionOperator.EQUALS,
    ConditionOperator.NOT_EQUALS,
    ConditionOperator.GREATER_THAN,
    ConditionOperator.LESS_THAN,
)


def _satisfies(actual: Any, operator: ConditionOperator, expected: Any) -> bool:
    if operator in ELEMENTWISE_OPERATORS and isinstance(actual, (list, tuple)):
        return any(compare_values(item, operator, expected) for item in actual)
    return compare_values(actual, operator, expected)


def _as_operator(operator: Any) -> ConditionOperator:
    try:
        return ConditionOperator(operator)
    except ValueError:
        raise InvalidConditionError(
            message=f"Unknown condition operator: {operator!r}",
            details={"operator": str(operator)},
        )


# =============================================================================
# Condition Evaluator Class
# =============================================================================

class ConditionEvaluator:
    """
    Evaluates finding rules against one fact table.

    Usage:
        evaluator = ConditionEvaluator(facts)
        if evaluator.evaluate(rule.when):
            ...
    """

    def __init__(self, facts: Mapping[str, Any]):
        self.facts = facts

    def evaluate(self, condition: RuleCondition) -> bool:
        return evaluate_condition(condition, self.facts)

    def fires(self, rule: FindingRule) -> bool:
        """True if the rule's condition holds for these facts."""
        result = self.evaluate(rule.when)
        if result:
            logger.debug(f"Rule {rule.finding_id} fired on '{rule.when.field}'")
        return result

    def values(self, path: str) -> list[Any]:
        return resolve_path_values(self.facts, path)
