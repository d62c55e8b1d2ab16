"""
InspectPilot Decision Signal Models

The narrative block handed to the report binding layer. Regenerated on
every report build and never persisted on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .enums import PriorityBucket


BULLET = "• "


@dataclass(frozen=True)
class TopFinding:
    """A scored finding considered for the representative sentence."""
    id: str
    score: float
    priority: str = PriorityBucket.PLAN_MONITOR.value
    title: Optional[str] = None


@dataclass(frozen=True)
class DecisionSignals:
    """
    Validated decision-support sentences.

    Attributes:
        sentences: 3-5 sentences, generation order preserved
        if_not_addressed: The consequence-if-deferred sentence
        why_not_immediate: The why-not-immediate sentence
        manageable_risk: The manageable-risk sentence
    """
    sentences: tuple[str, ...]
    if_not_addressed: str
    why_not_immediate: str
    manageable_risk: str

    def to_text(self) -> str:
        """Render as a bullet list, one sentence per line."""
        return "\n".join(f"{BULLET}{s}" for s in self.sentences)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bullets": list(self.sentences),
            "if_not_addressed": self.if_not_addressed,
            "why_not_immediate": self.why_not_immediate,
            "manageable_risk": self.manageable_risk,
        }
