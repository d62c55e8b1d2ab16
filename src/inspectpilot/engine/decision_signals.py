"""
InspectPilot Decision Signals

Synthesizes the short decision-support narrative for a report.

Every output carries four required sentence categories:
- consequence if deferred
- why the situation is not an emergency
- manageable-risk framing
- CapEx provisioning

plus an optional sentence naming the representative finding, 3 to 5
sentences in all. Generation is deterministic template selection;
validation drops sentences that read like an inspection summary and
appends a fallback for every missing category. Validation problems are
logged and repaired, never raised.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ..models import (
    BULLET,
    DecisionSignals,
    DominantRiskKind,
    OverallLevel,
    OverallScore,
    PriorityCounts,
    SignalCategory,
    TopFinding,
    enum_text,
    format_amount,
    humanize_finding_id,
)

logger = logging.getLogger(__name__)


MIN_SENTENCES = 3
MAX_SENTENCES = 5
REPRESENTATIVE_COUNT = 2


# =============================================================================
# Default Sentences
# =============================================================================

DEFAULT_IF_NOT_ADDRESSED = (
    "If the identified conditions are not addressed within the next 12-24 months, "
    "they may impact compliance confidence or increase future maintenance costs."
)
DEFAULT_WHY_NOT_IMMEDIATE = (
    "The current condition does not present an immediate or urgent risk that would "
    "prevent normal property operations or tenancy."
)
DEFAULT_MANAGEABLE_RISK = (
    "These items represent a manageable risk that can be incorporated into normal "
    "asset planning cycles, allowing for strategic budgeting and planned maintenance "
    "without immediate urgency."
)
DEFAULT_CAPEX_PROVISIONING = (
    "Capital expenditure provision should be planned based on detailed quotations "
    "from licensed electrical contractors for the identified conditions."
)

ROUTINE_MAINTENANCE = (
    "If routine maintenance is not maintained over the next 3-5 years, some of the "
    "observed conditions may gradually impact long-term reliability or compliance confidence."
)
WHY_NOT_ELEVATED_NO_IMMEDIATE = (
    "While these conditions require attention, they do not represent an immediate "
    "emergency or urgent risk that would prevent continued use of the property under "
    "normal conditions."
)
WHY_NOT_ELEVATED_URGENT = (
    "While these items require attention, they do not represent an immediate emergency "
    "that would prevent continued use of the property under normal conditions."
)
WHY_NOT_LOW = (
    "The current condition presents no immediate or urgent risk that would impact "
    "property operations, tenancy, or insurance coverage."
)
MANAGEABLE_ELEVATED_URGENT = (
    "These risks represent a manageable risk that can be addressed within standard "
    "asset planning cycles, allowing for proper budgeting and contractor engagement "
    "without urgent disruption."
)
MANAGEABLE_LOW = (
    "Any future considerations represent a manageable risk that can be addressed within "
    "normal asset planning cycles, with ample time for budgeting and strategic decision-making."
)
CAPEX_INCOMPLETE_NOTE = " (Note: Some findings may require detailed quotations for accurate budgeting)"

RISK_CONTEXT: dict[Optional[DominantRiskKind], str] = {
    DominantRiskKind.SAFETY: "safety risks or liability exposure",
    DominantRiskKind.COMPLIANCE: "compliance issues or regulatory exposure",
    DominantRiskKind.ESCALATION: "escalation risks or operational disruption",
    None: "liability exposure or operational disruption",
}


# =============================================================================
# Sentence Categories
# =============================================================================

CONSEQUENCE_PHRASES = (
    "if not addressed", "if deferred", "if left unresolved", "are not addressed",
    "is not maintained", "if these conditions are not", "if these items are not",
    "if routine maintenance is not", "if not maintained", "if not resolved",
    "are deferred", "items are deferred", "conditions are deferred", "left unresolved",
    "not resolved", "may escalate", "could escalate", "may impact", "could impact",
)
WHY_NOT_IMMEDIATE_PHRASES = (
    "not immediate", "no immediate hazard", "no immediate emergency",
    "does not present an immediate", "presents no immediate", "not an immediate",
    "not represent an immediate", "not require immediate", "would not prevent",
)
MANAGEABLE_RISK_PHRASES = (
    "manageable risk", "planned intervention", "can be managed", "managed within",
    "planning cycles", "planned maintenance", "asset planning", "strategic budgeting",
)
CAPEX_PHRASES = (
    "capex", "capital expenditure", "provision", "budgeting", "quotations",
)
INSPECTION_SUMMARY_PHRASES = (
    "inspection found", "inspection identified", "inspector observed", "during inspection",
    "visual inspection", "testing revealed", "measurements showed", "compliance check",
    "standards check", "as/nzs", "rcbo", "rcd", "gpo", "switchboard",
)

CATEGORY_PHRASES: dict[SignalCategory, tuple[str, ...]] = {
    SignalCategory.CONSEQUENCE: CONSEQUENCE_PHRASES,
    SignalCategory.WHY_NOT_IMMEDIATE: WHY_NOT_IMMEDIATE_PHRASES,
    SignalCategory.MANAGEABLE_RISK: MANAGEABLE_RISK_PHRASES,
    SignalCategory.CAPEX_PROVISIONING: CAPEX_PHRASES,
}


def matches_category(sentence: str, category: SignalCategory) -> bool:
    """True if the sentence contains any phrase of a required category."""
    lower = sentence.lower()
    return any(phrase in lower for phrase in CATEGORY_PHRASES.get(category, ()))


def sounds_like_inspection_summary(sentence: str) -> bool:
    """True for clinical/testing language that does not belong in a decision signal."""
    lower = sentence.lower()
    if any(phrase in lower for phrase in INSPECTION_SUMMARY_PHRASES):
        return True
    return ("found" in lower and "condition" in lower) or ("identified" in lower and "issue" in lower)


def normalize_dominant_risk(dominant_risk: Sequence[str]) -> Optional[DominantRiskKind]:
    """Map the first dominant category onto the narrative framing."""
    if not dominant_risk:
        return None
    first = enum_text(dominant_risk[0]).strip().upper()
    if first in ("SAFETY", "SHOCK", "FIRE", "LIFE_SAFETY"):
        return DominantRiskKind.SAFETY
    if first == "COMPLIANCE":
        return DominantRiskKind.COMPLIANCE
    if first in ("ESCALATION", "RELIABILITY", "LEGACY"):
        return DominantRiskKind.ESCALATION
    return None


# =============================================================================
# Signal Context
# =============================================================================

@dataclass(frozen=True)
class SignalContext:
    """Inputs to template selection, with counts and CapEx clamped at zero."""
    overall_level: OverallLevel = OverallLevel.LOW
    immediate: int = 0
    urgent: int = 0
    recommended: int = 0
    plan: int = 0
    capex_low: float = 0
    capex_high: float = 0
    capex_incomplete: bool = False
    risk_kind: Optional[DominantRiskKind] = None

    @classmethod
    def build(cls, overall: OverallScore, counts: PriorityCounts) -> SignalContext:
        return cls(
            overall_level=overall.overall_level,
            immediate=max(0, counts.immediate or 0),
            urgent=max(0, counts.urgent or 0),
            recommended=max(0, counts.recommended or 0),
            plan=max(0, counts.plan or 0),
            capex_low=max(0, overall.capex_low or 0),
            capex_high=max(0, overall.capex_high or 0),
            capex_incomplete=bool(overall.capex_incomplete),
            risk_kind=normalize_dominant_risk(overall.dominant_risk),
        )

    @property
    def total_urgent(self) -> int:
        return self.immediate + self.urgent

    @property
    def has_immediate(self) -> bool:
        return self.immediate > 0

    @property
    def has_capex(self) -> bool:
        return self.capex_low > 0 or self.capex_high > 0


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


# =============================================================================
# Templates
# =============================================================================

def if_not_addressed_sentence(ctx: SignalContext, fallback: bool = False) -> str:
    """
    Consequence-if-deferred sentence.

    The fallback variant always uses the generic liability wording for
    urgent concerns, whatever the dominant risk.
    """
    if ctx.overall_level == OverallLevel.ELEVATED:
        if ctx.total_urgent > 0:
            risk_context = RISK_CONTEXT[None if fallback else ctx.risk_kind]
            return (
                f"If these {ctx.total_urgent} urgent concern{_plural(ctx.total_urgent)} are not "
                f"addressed, they may escalate into more significant {risk_context} over the "
                f"next 6-12 months."
            )
        return DEFAULT_IF_NOT_ADDRESSED
    if ctx.overall_level == OverallLevel.MODERATE and ctx.recommended > 0:
        return (
            f"If the {ctx.recommended} recommended item{_plural(ctx.recommended)} are not "
            f"addressed within the next 12-24 months, they may impact compliance confidence "
            f"or increase future maintenance costs."
        )
    return ROUTINE_MAINTENANCE


def why_not_immediate_sentence(ctx: SignalContext) -> str:
    level = ctx.overall_level
    if not ctx.has_immediate:
        if level == OverallLevel.ELEVATED:
            return WHY_NOT_ELEVATED_NO_IMMEDIATE
        if level == OverallLevel.MODERATE:
            return DEFAULT_WHY_NOT_IMMEDIATE
        return WHY_NOT_LOW
    if level == OverallLevel.ELEVATED:
        return WHY_NOT_ELEVATED_URGENT if ctx.total_urgent > 0 else DEFAULT_WHY_NOT_IMMEDIATE
    if level == OverallLevel.MODERATE:
        return DEFAULT_WHY_NOT_IMMEDIATE
    return WHY_NOT_LOW


def fallback_why_not_immediate(ctx: SignalContext) -> str:
    if not ctx.has_immediate:
        return DEFAULT_WHY_NOT_IMMEDIATE
    if ctx.overall_level == OverallLevel.ELEVATED:
        return WHY_NOT_ELEVATED_URGENT
    if ctx.overall_level == OverallLevel.MODERATE:
        return DEFAULT_WHY_NOT_IMMEDIATE
    return WHY_NOT_LOW


def manageable_risk_sentence(ctx: SignalContext, fallback: bool = False) -> str:
    if ctx.overall_level == OverallLevel.ELEVATED:
        # The fallback has no counts to go on and always uses the urgent wording
        if fallback or ctx.total_urgent > 0:
            return MANAGEABLE_ELEVATED_URGENT
        return DEFAULT_MANAGEABLE_RISK
    if ctx.overall_level == OverallLevel.MODERATE:
        return DEFAULT_MANAGEABLE_RISK
    return MANAGEABLE_LOW


def capex_sentence(ctx: SignalContext) -> str:
    if not ctx.has_capex:
        return DEFAULT_CAPEX_PROVISIONING
    note = CAPEX_INCOMPLETE_NOTE if ctx.capex_incomplete else ""
    if ctx.capex_low == ctx.capex_high:
        amount = f"approximately ${format_amount(ctx.capex_low)}"
    else:
        amount = f"${format_amount(ctx.capex_low)} to ${format_amount(ctx.capex_high)}"
    return (
        f"Capital expenditure provision of {amount} should be allocated for addressing "
        f"the identified conditions within the next 12-24 months{note}."
    )


def representative_sentence(top: TopFinding, level: OverallLevel) -> str:
    title = (top.title or "").strip() or humanize_finding_id(top.id)
    if level == OverallLevel.ELEVATED:
        return f"The highest priority item identified relates to {title}, which warrants attention in planning cycles."
    if level == OverallLevel.MODERATE:
        return f"The primary concern relates to {title}, which should be factored into near-term planning considerations."
    return f"The assessment identified {title} as a monitoring item for future consideration."


def fallback_sentence(category: SignalCategory, ctx: SignalContext) -> str:
    """Deterministic replacement for a missing required category."""
    if category == SignalCategory.CONSEQUENCE:
        return if_not_addressed_sentence(ctx, fallback=True)
    if category == SignalCategory.WHY_NOT_IMMEDIATE:
        return fallback_why_not_immediate(ctx)
    if category == SignalCategory.MANAGEABLE_RISK:
        return manageable_risk_sentence(ctx, fallback=True)
    return capex_sentence(ctx)


REQUIRED_ORDER = (
    SignalCategory.CONSEQUENCE,
    SignalCategory.WHY_NOT_IMMEDIATE,
    SignalCategory.MANAGEABLE_RISK,
    SignalCategory.CAPEX_PROVISIONING,
)


def deterministic_fallback(ctx: SignalContext) -> list[str]:
    """One fallback sentence per required category."""
    return [fallback_sentence(category, ctx) for category in REQUIRED_ORDER]


# =============================================================================
# Validation
# =============================================================================

def validate_and_fix(sentences: Sequence[str], ctx: SignalContext) -> list[str]:
    """
    Validate generated sentences and repair the batch.

    1. Drop sentences that read like an inspection summary; if none
       survive, return the deterministic fallback set
    2. Append a fallback for every missing required category
    3. Pad with the manageable-risk fallback up to 3 sentences
    4. Truncate to 5 sentences
    """
    validated = [s for s in sentences if not sounds_like_inspection_summary(s)]
    if not validated:
        logger.warning("All decision signals read as inspection summary, using deterministic fallback")
        return deterministic_fallback(ctx)

    for category in REQUIRED_ORDER:
        if not any(matches_category(s, category) for s in validated):
            logger.warning(f"Decision signals missing '{category.value}' sentence, added fallback")
            validated.append(fallback_sentence(category, ctx))

    while len(validated) < MIN_SENTENCES:
        validated.append(manageable_risk_sentence(ctx, fallback=True))

    return validated[:MAX_SENTENCES]


_CONSEQUENCE_PATTERNS = [
    re.compile(r"if\s+(not\s+)?(addressed|deferred|left\s+unresolved|resolved|maintained)"),
    re.compile(r"(are|is)\s+not\s+(addressed|maintained|resolved)"),
    re.compile(r"(may|could)\s+escalate"),
    re.compile(r"(may|could)\s+impact"),
]
_NOT_IMMEDIATE_PATTERNS = [
    re.compile(r"not\s+immediate"),
    re.compile(r"no\s+immediate\s+(hazard|emergency|risk|urgent)"),
    re.compile(r"does\s+not\s+require\s+immediate"),
    re.compile(r"does\s+not\s+present\s+an\s+immediate"),
    re.compile(r"presents\s+no\s+immediate"),
    re.compile(r"not\s+an\s+immediate"),
    re.compile(r"not\s+represent\s+an\s+immediate"),
    re.compile(r"would\s+not\s+prevent"),
]
_MANAGEABLE_PATTERNS = [
    re.compile(r"manageable\s+risk"),
    re.compile(r"can\s+be\s+planned"),
    re.compile(r"within\s+normal\s+planning\s+cycles"),
    re.compile(r"asset\s+planning"),
    re.compile(r"strategic\s+budgeting"),
    re.compile(r"planned\s+maintenance"),
    re.compile(r"can\s+be\s+managed"),
    re.compile(r"managed\s+within"),
]

FALLBACK_SIGNALS_TEXT = "\n".join(
    f"{BULLET}{s}" for s in (DEFAULT_IF_NOT_ADDRESSED, DEFAULT_WHY_NOT_IMMEDIATE, DEFAULT_MANAGEABLE_RISK)
)


def validate_signals_text(text: Optional[str]) -> str:
    """
    Check free text for the consequence, not-immediate and manageable-risk
    points.

    Returns:
        text unchanged when all three are present, else the fixed
        three-bullet fallback
    """
    if not text or not text.strip():
        return FALLBACK_SIGNALS_TEXT

    lower = text.lower()
    checks = {
        "consequence": any(p.search(lower) for p in _CONSEQUENCE_PATTERNS),
        "not_immediate": any(p.search(lower) for p in _NOT_IMMEDIATE_PATTERNS),
        "manageable_risk": any(p.search(lower) for p in _MANAGEABLE_PATTERNS),
    }
    if all(checks.values()):
        return text

    missing = [name for name, ok in checks.items() if not ok]
    logger.warning(f"Decision signals text failed validation, missing: {missing}")
    return FALLBACK_SIGNALS_TEXT


# =============================================================================
# Synthesizer
# =============================================================================

class DecisionSignalSynthesizer:
    """
    Builds validated DecisionSignals from scoring outputs.

    Usage:
        synthesizer = DecisionSignalSynthesizer()
        signals = synthesizer.synthesize(overall, counts, top_findings)
    """

    def synthesize(
        self,
        overall: OverallScore,
        counts: PriorityCounts,
        top_findings: Sequence[TopFinding] = (),
    ) -> DecisionSignals:
        ctx = SignalContext.build(overall, counts)
        representative = sorted(top_findings, key=lambda t: t.score, reverse=True)[:REPRESENTATIVE_COUNT]

        generated = self.generate(ctx, representative)
        validated = validate_and_fix(generated, ctx)

        return DecisionSignals(
            sentences=tuple(validated),
            if_not_addressed=self._extract(validated, SignalCategory.CONSEQUENCE, ctx),
            why_not_immediate=self._extract(validated, SignalCategory.WHY_NOT_IMMEDIATE, ctx),
            manageable_risk=self._extract(validated, SignalCategory.MANAGEABLE_RISK, ctx),
        )

    def generate(self, ctx: SignalContext, representative: Sequence[TopFinding] = ()) -> list[str]:
        """Template sentences in fixed order, before validation."""
        sentences = [
            if_not_addressed_sentence(ctx),
            why_not_immediate_sentence(ctx),
            manageable_risk_sentence(ctx),
            capex_sentence(ctx),
        ]
        if representative and len(sentences) < MAX_SENTENCES:
            sentences.append(representative_sentence(representative[0], ctx.overall_level))
        return sentences

    @staticmethod
    def _extract(sentences: Sequence[str], category: SignalCategory, ctx: SignalContext) -> str:
        for sentence in sentences:
            if matches_category(sentence, category):
                return sentence
        return fallback_sentence(category, ctx)


def synthesize_signals(
    overall: OverallScore,
    counts: PriorityCounts,
    top_findings: Sequence[TopFinding] = (),
) -> DecisionSignals:
    """Convenience function that creates a temporary synthesizer."""
    return DecisionSignalSynthesizer().synthesize(overall, counts, top_findings)
