"""
InspectPilot Fact Flattener

Turns a nested, possibly answer-enveloped inspection document into a flat,
read-only fact table keyed by dot-delimited path.

Key features:
- Answer envelopes ({"value": ..., "status": ...}) unwrapped to their value
- Nested envelopes unwrapped up to a fixed depth
- Arrays stored as-is at their path (never descended into)
- Skipped-section limitations collected from the raw document
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)


# Answer envelopes nest at most a couple of levels in practice
MAX_ENVELOPE_DEPTH = 4

SKIPPED_STATUS = "skipped"
IGNORED_KEYS = frozenset({"created_at"})


# =============================================================================
# Answer Envelopes
# =============================================================================

def is_envelope(node: Any) -> bool:
    """True if node is an answer envelope (a mapping carrying a "value" key)."""
    return isinstance(node, Mapping) and "value" in node


def unwrap_envelope(node: Any, max_depth: int = MAX_ENVELOPE_DEPTH) -> tuple[Any, bool]:
    """
    Unwrap nested answer envelopes.

    Args:
        node: Envelope or raw value
        max_depth: Maximum number of envelope levels to unwrap

    Returns:
        Tuple of (value, complete). complete is False when the value is
        still an envelope after max_depth levels.
    """
    value = node
    for _ in range(max_depth):
        if not is_envelope(value):
            return (value, True)
        value = value["value"]
    return (value, not is_envelope(value))


# =============================================================================
# Fact Table
# =============================================================================

class FactTable(Mapping[str, Any]):
    """
    Immutable mapping of dot-path to scalar or array value.

    Built once per inspection by flatten_answers(); stages only read it.
    """

    __slots__ = ("_facts",)

    def __init__(self, facts: Optional[Mapping[str, Any]] = None):
        self._facts = MappingProxyType(dict(facts or {}))

    def __getitem__(self, path: str) -> Any:
        return self._facts[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"FactTable({len(self)} facts)"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._facts)


# =============================================================================
# Flattening
# =============================================================================

def flatten_answers(answers: Optional[Mapping[str, Any]]) -> FactTable:
    """
    Flatten an answer document into a FactTable.

    Walks nested mappings, joining keys with "."; envelopes are replaced by
    their unwrapped value. An envelope whose value is a plain mapping is
    walked further under the same path. None leaves are dropped.

    Flattening an already-flat table returns an equal table.
    """
    out: dict[str, Any] = {}
    if answers:
        _walk(answers, "", out)
    return FactTable(out)


def _walk(node: Mapping[str, Any], prefix: str, out: dict[str, Any]) -> None:
    for key, value in node.items():
        path = f"{prefix}.{key}" if prefix else str(key)

        if is_envelope(value):
            value, complete = unwrap_envelope(value)
            if not complete:
                logger.warning(f"Answer at '{path}' nested deeper than {MAX_ENVELOPE_DEPTH} envelopes, skipped")
                continue

        if value is None:
            continue
        if isinstance(value, Mapping):
            _walk(value, path, out)
        elif isinstance(value, (list, tuple)):
            out[path] = list(value)
        else:
            out[path] = value


# =============================================================================
# Limitations
# =============================================================================

def collect_limitations(answers: Optional[Mapping[str, Any]]) -> list[str]:
    """
    List every skipped answer that recorded a reason.

    Each entry reads "<path>: skipped (<reason>)", with " - <note>" appended
    when the envelope carries a skip_note.
    """
    out: list[str] = []
    if answers:
        _walk_limitations(answers, "", out)
    return out


def _walk_limitations(node: Mapping[str, Any], prefix: str, out: list[str]) -> None:
    for key, value in node.items():
        if key in IGNORED_KEYS:
            continue
        path = f"{prefix}.{key}" if prefix else str(key)
        if not isinstance(value, Mapping):
            continue
        if "status" in value:
            reason = value.get("skip_reason")
            if value.get("status") == SKIPPED_STATUS and reason:
                note = value.get("skip_note")
                entry = f"{path}: skipped ({reason})"
                if note:
                    entry += f" - {note}"
                out.append(entry)
        else:
            _walk_limitations(value, path, out)
