"""
InspectPilot Inspection Engine

Runs the full findings pipeline for one inspection:

    answers -> facts -> findings -> classification -> priority
            -> scores -> decision signals

Key features:
- Configuration injected once; every stage reads it, none mutates it
- Existing findings kept, newly derived IDs appended after them
- Custom findings and debug overrides read from the answer document
  when not passed explicitly
- Output findings ranked by priority, then by descending score
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from ..models import (
    DecisionSignals,
    EngineConfig,
    Finding,
    FindingSource,
    OverallScore,
    OverrideEntry,
    PriorityCounts,
    TopFinding,
    clean_text,
    priority_rank,
)
from .classifier import classify_findings
from .decision_signals import DecisionSignalSynthesizer
from .facts import FactTable, collect_limitations, flatten_answers
from .finding_deriver import FindingDeriver
from .priority_resolver import PriorityResolver, audit_overrides, count_priorities
from .scoring import compute_overall

logger = logging.getLogger(__name__)


CUSTOM_FINDINGS_KEY = "custom_findings_completed"
DEBUG_OVERRIDES_KEY = "finding_dimensions_debug"

FindingRecord = Union[Finding, Mapping[str, Any]]


# =============================================================================
# Engine Result
# =============================================================================

@dataclass(frozen=True)
class EngineResult:
    """
    Output of one engine run, handed to the report binding layer.

    Attributes:
        inspection_id: Inspection the run was for, if given
        facts: Flattened fact table
        findings: Resolved, scored findings in ranked order
        overall: Aggregate scoring snapshot
        signals: Validated decision signals
        limitations: Skipped-section notes from the answer document
        config_fingerprint: Fingerprint of the configuration used
    """
    inspection_id: Optional[str]
    facts: FactTable
    findings: tuple[Finding, ...]
    overall: OverallScore
    signals: DecisionSignals
    limitations: tuple[str, ...] = ()
    config_fingerprint: str = ""
    counts: PriorityCounts = field(default_factory=PriorityCounts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inspection_id": self.inspection_id,
            "findings": [f.to_dict() for f in self.findings],
            "overall": self.overall.to_dict(),
            "counts": self.counts.to_dict(),
            "signals": self.signals.to_dict(),
            "limitations": list(self.limitations),
            "config_fingerprint": self.config_fingerprint,
        }


# =============================================================================
# Input Normalization
# =============================================================================

def parse_debug_overrides(data: Optional[Mapping[str, Any]]) -> dict[str, OverrideEntry]:
    """Parse a {finding_id: {field: value}} map, dropping empty entries."""
    overrides: dict[str, OverrideEntry] = {}
    for finding_id, values in (data or {}).items():
        if not isinstance(values, Mapping):
            continue
        entry = OverrideEntry.from_dict(values)
        if not entry.is_empty:
            overrides[str(finding_id)] = entry
    return overrides


def parse_custom_findings(
    entries: Optional[Sequence[Mapping[str, Any]]],
) -> tuple[list[Finding], dict[str, OverrideEntry]]:
    """
    Parse author-entered custom findings.

    Returns:
        Tuple of (findings, dimensions by finding ID). Entries without an
        id are skipped.
    """
    findings: list[Finding] = []
    dimensions: dict[str, OverrideEntry] = {}
    for entry in entries or ():
        if not isinstance(entry, Mapping):
            continue
        finding_id = clean_text(entry.get("id"))
        if finding_id is None:
            logger.debug("Custom finding without id skipped")
            continue
        if finding_id in dimensions:
            continue
        dimensions[finding_id] = OverrideEntry.from_dict(entry)
        findings.append(Finding(
            id=finding_id,
            title=clean_text(entry.get("title")),
            priority=clean_text(entry.get("priority")),
            priority_selected=clean_text(entry.get("priority_selected")),
            override_reason=clean_text(entry.get("override_reason")),
            photo_ids=tuple(str(p) for p in entry.get("photo_ids") or ()),
            source=FindingSource.CUSTOM,
        ))
    return findings, dimensions


def _as_finding(record: FindingRecord) -> Finding:
    return record if isinstance(record, Finding) else Finding.from_dict(record)


def rank_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Order by priority rank, then descending score; stable otherwise."""
    return sorted(
        findings,
        key=lambda f: (priority_rank(f.effective_priority), -(f.score or 0.0)),
    )


# =============================================================================
# Inspection Engine
# =============================================================================

class InspectionEngine:
    """
    Orchestrates the findings pipeline.

    Usage:
        config = load_default_config()
        engine = InspectionEngine(config)
        result = engine.run(answers, inspection_id="INS-001")

        for finding in result.findings:
            print(finding.id, finding.priority_final)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.deriver = FindingDeriver(self.config)
        self.resolver = PriorityResolver(self.config)
        self.synthesizer = DecisionSignalSynthesizer()

    def run(
        self,
        answers: Optional[Mapping[str, Any]],
        *,
        custom_findings: Optional[Sequence[Mapping[str, Any]]] = None,
        debug_overrides: Optional[Mapping[str, Any]] = None,
        existing_findings: Optional[Sequence[FindingRecord]] = None,
        inspection_id: Optional[str] = None,
    ) -> EngineResult:
        """
        Run the pipeline for one inspection.

        Args:
            answers: Nested, possibly enveloped answer document
            custom_findings: Custom finding entries; defaults to the
                document's custom_findings_completed list
            debug_overrides: Per-finding debug overrides; defaults to the
                document's finding_dimensions_debug map
            existing_findings: Findings from a previous pass, kept as-is
            inspection_id: Identifier carried onto the result and logs

        Returns:
            EngineResult with ranked findings, score and signals
        """
        answers = answers or {}
        if custom_findings is None:
            custom_findings = answers.get(CUSTOM_FINDINGS_KEY)
        if debug_overrides is None:
            debug_overrides = answers.get(DEBUG_OVERRIDES_KEY)

        facts = flatten_answers(answers)
        limitations = collect_limitations(answers)

        existing = [_as_finding(r) for r in existing_findings or ()]
        findings = existing + self.deriver.derive_and_merge(facts, existing)

        custom, dimensions = parse_custom_findings(custom_findings)
        present = {f.id for f in findings}
        findings = [
            replace(f, source=FindingSource.CUSTOM) if f.id in dimensions else f
            for f in findings
        ]
        findings.extend(f for f in custom if f.id not in present)

        findings = classify_findings(findings)
        findings = self.resolver.resolve_all(
            findings,
            debug_overrides=parse_debug_overrides(debug_overrides),
            custom_dimensions=dimensions,
        )
        audit_overrides(findings, inspection_id)

        overall = compute_overall(findings)
        findings = [replace(f, score=overall.score_for(f.id)) for f in findings]
        counts = count_priorities(findings)

        top = [
            TopFinding(id=f.id, score=f.score or 0.0, priority=f.effective_priority, title=f.title)
            for f in findings
        ]
        signals = self.synthesizer.synthesize(overall, counts, top)

        logger.info(
            f"Inspection {inspection_id}: {len(findings)} findings, "
            f"level {overall.overall_level.value}, config {self.config.fingerprint}"
        )

        return EngineResult(
            inspection_id=inspection_id,
            facts=facts,
            findings=tuple(rank_findings(findings)),
            overall=overall,
            signals=signals,
            limitations=tuple(limitations),
            config_fingerprint=self.config.fingerprint,
            counts=counts,
        )


def run_inspection(
    answers: Optional[Mapping[str, Any]],
    config: Optional[EngineConfig] = None,
    **kwargs: Any,
) -> EngineResult:
    """
    Run the pipeline once.

    Convenience function that creates a temporary engine.
    """
    return InspectionEngine(config).run(answers, **kwargs)
