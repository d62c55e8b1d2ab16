"""
InspectPilot Configuration Pack Loader

Loads and validates configuration documents from YAML or JSON files and
assembles them into an immutable EngineConfig.

Converts Pydantic schema models to InspectPilot domain models. The host
process loads once and injects the result; nothing here is cached at
module level.
"""
from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError

from ..canon import content_hash_short
from ..exceptions import ConfigLoadError, ConfigValidationError, ConfigVersionMismatch
from ..models import (
    ConditionOperator,
    EngineConfig,
    FindingProfile,
    FindingRule,
    Guardrail,
    LiabilityRule,
    LiabilityShift,
    MatrixEntry,
    OverrideEntry,
    PriorityMeta,
    PriorityRules,
    RuleCondition,
)
from .schema import (
    SCHEMA_VERSION,
    CategoryDefaultsSchema,
    FindingProfileSchema,
    FindingProfilesDocument,
    FindingRulesDocument,
    GlobalOverridesDocument,
    OverrideSchema,
    PriorityRulesDocument,
    check_schema_version,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_DATA_PACKAGE = "inspectpilot.data"
DEFAULT_FINDING_RULES = "finding_rules.yaml"
DEFAULT_PRIORITY_RULES = "priority_rules.yaml"
DEFAULT_FINDING_PROFILES = "finding_profiles.yaml"
DEFAULT_GLOBAL_OVERRIDES = "global_overrides.yaml"

FALLBACK_CATEGORY = "OTHER"


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_priority_references(doc: PriorityRulesDocument, path: str = "") -> None:
    """
    Validate priority rules are internally consistent.

    Catches:
    - Duplicate hard-override IDs
    - Matrix rows that can never match (shadowed by an earlier catch-all row)

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors = []

    seen: set[str] = set()
    for finding_id in doc.hard_overrides.findings:
        if finding_id in seen:
            errors.append(f"Duplicate hard override: '{finding_id}'")
        seen.add(finding_id)

    catch_all: set[str] = set()
    for i, row in enumerate(doc.base_priority_matrix):
        if row.when.safety in catch_all:
            errors.append(
                f"Matrix row {i} (safety={row.when.safety}) is shadowed by an earlier row"
            )
        if row.when.urgency is None:
            catch_all.add(row.when.safety)

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Reference integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_finding_rules(doc: FindingRulesDocument) -> tuple[FindingRule, ...]:
    rules = []
    for schema in doc.rules:
        when = schema.when
        rules.append(FindingRule(
            finding_id=schema.finding_id,
            priority_hint=schema.priority,
            when=RuleCondition(
                field=when.field,
                operator=ConditionOperator(when.condition),
                value=when.value,
                compare_field=when.compare_field,
            ),
            description=schema.description,
        ))
    return tuple(rules)


def _convert_priority_rules(doc: PriorityRulesDocument) -> PriorityRules:
    matrix = tuple(
        MatrixEntry(safety=row.when.safety, urgency=row.when.urgency, bucket=row.then)
        for row in doc.base_priority_matrix
    )
    liability_rules = tuple(
        LiabilityRule(
            liability=rule.when.liability,
            shift=LiabilityShift(rule.action.shift),
            max_priority=rule.action.max_priority,
            min_priority=rule.action.min_priority,
        )
        for rule in doc.liability_adjustment.rules
    )
    guardrails = tuple(
        Guardrail(
            when=g.if_.model_dump(exclude_none=True),
            allow_downgrade=g.then.allow_downgrade,
            allow_liability_adjustment=g.then.allow_liability_adjustment,
        )
        for g in doc.liability_guardrails.rules
    )
    findings = {
        finding_id: PriorityMeta(safety=m.safety, urgency=m.urgency, liability=m.liability)
        for finding_id, m in doc.findings.items()
    }
    return PriorityRules(
        hard_overrides=frozenset(doc.hard_overrides.findings),
        hard_override_bucket=doc.hard_overrides.priority_bucket,
        matrix=matrix,
        default_bucket=doc.default_bucket,
        liability_rules=liability_rules,
        guardrails=guardrails,
        findings=findings,
        custom_threshold=doc.custom_findings.severity_likelihood_threshold,
        custom_upgrade_bucket=doc.custom_findings.upgrade_bucket,
    )


def _convert_profile(
    finding_id: str,
    schema: FindingProfileSchema,
    category_defaults: dict[str, CategoryDefaultsSchema],
) -> FindingProfile:
    """
    Convert a profile, filling gaps from category defaults.

    Fallback chain: profile -> its category -> OTHER category. Anything
    still missing stays None and takes the fixed FindingMeta default.
    """
    chain = [
        category_defaults.get(schema.category or ""),
        category_defaults.get(FALLBACK_CATEGORY),
    ]

    def inherit(name: str) -> Any:
        value = getattr(schema, name)
        if value is not None:
            return value
        for defaults in chain:
            if defaults is not None and getattr(defaults, name) is not None:
                return getattr(defaults, name)
        return None

    return FindingProfile(
        finding_id=finding_id,
        category=schema.category,
        title=schema.title,
        severity=inherit("severity"),
        likelihood=inherit("likelihood"),
        budget_band=inherit("budget_band"),
        budget_low=schema.budget_low,
        budget_high=schema.budget_high,
        default_priority=inherit("default_priority"),
        escalation=schema.escalation,
        safety=schema.safety,
        urgency=schema.urgency,
        liability=schema.liability,
    )


def _convert_profiles(doc: FindingProfilesDocument) -> dict[str, FindingProfile]:
    return {
        finding_id: _convert_profile(finding_id, schema, doc.category_defaults)
        for finding_id, schema in doc.finding_profiles.items()
    }


def _convert_override(schema: OverrideSchema) -> OverrideEntry:
    return OverrideEntry.from_dict(schema.model_dump(exclude_none=True))


def _convert_global_overrides(doc: GlobalOverridesDocument) -> dict[str, OverrideEntry]:
    return {finding_id: _convert_override(s) for finding_id, s in doc.overrides.items()}


# =============================================================================
# Configuration Pack Loader
# =============================================================================

class ConfigPackLoader:
    """
    Loads configuration documents from YAML or JSON files.

    Usage:
        loader = ConfigPackLoader()
        rules = loader.load_finding_rules("finding_rules.yaml")
        config = loader.load_config(
            finding_rules="finding_rules.yaml",
            priority_rules="priority_rules.yaml",
            finding_profiles="finding_profiles.yaml",
        )
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject documents with incompatible schema versions
        """
        self.strict_version = strict_version

    # -------------------------------------------------------------------------
    # Individual documents
    # -------------------------------------------------------------------------

    def load_finding_rules(self, path: PathLike) -> FindingRulesDocument:
        """Load and validate a finding-rule document."""
        return self._load_document(path, FindingRulesDocument)

    def load_priority_rules(self, path: PathLike) -> PriorityRulesDocument:
        """Load and validate a priority-rule document, including reference checks."""
        doc = self._load_document(path, PriorityRulesDocument)
        try:
            validate_priority_references(doc, str(path))
        except ValueError as e:
            raise ConfigValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": str(path)},
            )
        return doc

    def load_finding_profiles(self, path: PathLike) -> FindingProfilesDocument:
        """Load and validate a finding-profile document."""
        return self._load_document(path, FindingProfilesDocument)

    def load_global_overrides(self, path: PathLike) -> GlobalOverridesDocument:
        """Load and validate a global-override document."""
        return self._load_document(path, GlobalOverridesDocument)

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    def load_config(
        self,
        finding_rules: PathLike,
        priority_rules: PathLike,
        finding_profiles: PathLike,
        global_overrides: Optional[PathLike] = None,
    ) -> EngineConfig:
        """
        Load all documents and assemble an EngineConfig.

        Raises:
            ConfigLoadError: If a file cannot be read
            ConfigValidationError: If validation fails
            ConfigVersionMismatch: If a schema version is incompatible
        """
        rules_doc = self.load_finding_rules(finding_rules)
        priority_doc = self.load_priority_rules(priority_rules)
        profiles_doc = self.load_finding_profiles(finding_profiles)
        overrides_doc = (
            self.load_global_overrides(global_overrides)
            if global_overrides is not None
            else GlobalOverridesDocument()
        )
        return build_engine_config(rules_doc, priority_doc, profiles_doc, overrides_doc)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _load_document(self, path: PathLike, model: type[BaseModel]) -> Any:
        path = Path(path)

        try:
            data = self._load_file(path)
        except Exception as e:
            raise ConfigLoadError(
                message=f"Failed to load configuration document: {e}",
                details={"path": str(path), "error": str(e)},
            )

        return self.validate_data(data, model, str(path))

    def validate_data(self, data: Any, model: type[BaseModel], path: str) -> Any:
        if not isinstance(data, dict):
            raise ConfigValidationError(
                message="Configuration document must be a mapping",
                details={"path": path, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            doc_version = data.get("schema_version", "unknown")
            raise ConfigVersionMismatch(
                message=f"Schema version mismatch: document has {doc_version}, expected {SCHEMA_VERSION}",
                details={
                    "document_version": doc_version,
                    "expected_version": SCHEMA_VERSION,
                    "path": path,
                },
            )

        try:
            doc = model.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(
                message=f"{model.__name__} validation failed: {e.error_count()} errors",
                details={"errors": e.errors(), "path": path},
            )

        logger.info(
            f"Loaded {model.__name__} from {path} "
            f"(schema {doc.schema_version}, fingerprint {content_hash_short(data)})"
        )
        return doc

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            elif path.suffix.lower() == ".json":
                return json.load(f)
            else:
                # Try YAML first, then JSON
                content = f.read()
                try:
                    return yaml.safe_load(content)
                except yaml.YAMLError:
                    return json.loads(content)


# =============================================================================
# Convenience Functions
# =============================================================================

def build_engine_config(
    finding_rules: FindingRulesDocument,
    priority_rules: PriorityRulesDocument,
    finding_profiles: FindingProfilesDocument,
    global_overrides: Optional[GlobalOverridesDocument] = None,
) -> EngineConfig:
    """Assemble validated documents into an EngineConfig with a fingerprint."""
    global_overrides = global_overrides or GlobalOverridesDocument()
    fingerprint = content_hash_short({
        "finding_rules": finding_rules.model_dump(mode="json"),
        "priority_rules": priority_rules.model_dump(mode="json", by_alias=True),
        "finding_profiles": finding_profiles.model_dump(mode="json"),
        "global_overrides": global_overrides.model_dump(mode="json"),
    })
    return EngineConfig(
        finding_rules=_convert_finding_rules(finding_rules),
        priority_rules=_convert_priority_rules(priority_rules),
        profiles=_convert_profiles(finding_profiles),
        global_overrides=_convert_global_overrides(global_overrides),
        fingerprint=fingerprint,
    )


def load_engine_config(
    finding_rules: PathLike,
    priority_rules: PathLike,
    finding_profiles: PathLike,
    global_overrides: Optional[PathLike] = None,
    strict_version: bool = True,
) -> EngineConfig:
    """
    Load an EngineConfig from document paths.

    Convenience function that creates a temporary loader.
    """
    loader = ConfigPackLoader(strict_version=strict_version)
    return loader.load_config(finding_rules, priority_rules, finding_profiles, global_overrides)


def load_engine_config_from_strings(
    finding_rules: str,
    priority_rules: str,
    finding_profiles: str,
    global_overrides: Optional[str] = None,
    format: str = "yaml",
) -> EngineConfig:
    """
    Load an EngineConfig from document strings.

    Args:
        format: "yaml" or "json"
    """
    def parse(content: str) -> Any:
        if format.lower() == "json":
            return json.loads(content)
        return yaml.safe_load(content)

    loader = ConfigPackLoader()
    rules_doc = loader.validate_data(parse(finding_rules), FindingRulesDocument, "<string>")
    priority_doc = loader.validate_data(parse(priority_rules), PriorityRulesDocument, "<string>")
    try:
        validate_priority_references(priority_doc)
    except ValueError as e:
        raise ConfigValidationError(
            message="Reference integrity validation failed",
            details={"errors": str(e), "path": "<string>"},
        )
    profiles_doc = loader.validate_data(parse(finding_profiles), FindingProfilesDocument, "<string>")
    overrides_doc = (
        loader.validate_data(parse(global_overrides), GlobalOverridesDocument, "<string>")
        if global_overrides is not None
        else None
    )
    return build_engine_config(rules_doc, priority_doc, profiles_doc, overrides_doc)


def default_data_path(name: str) -> Path:
    """Path of a configuration document bundled in inspectpilot/data."""
    return Path(str(resources.files(DEFAULT_DATA_PACKAGE).joinpath(name)))


def load_default_config(strict_version: bool = True) -> EngineConfig:
    """Load the configuration documents shipped with the package."""
    return load_engine_config(
        finding_rules=default_data_path(DEFAULT_FINDING_RULES),
        priority_rules=default_data_path(DEFAULT_PRIORITY_RULES),
        finding_profiles=default_data_path(DEFAULT_FINDING_PROFILES),
        global_overrides=default_data_path(DEFAULT_GLOBAL_OVERRIDES),
        strict_version=strict_version,
    )
