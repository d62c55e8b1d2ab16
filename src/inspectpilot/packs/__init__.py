"""
InspectPilot Configuration Packs

Schemas and loader for the versioned configuration documents: finding
rules, priority rules, finding profiles and global overrides.

Usage:
    from inspectpilot.packs import load_default_config, load_engine_config

    config = load_default_config()
"""
from __future__ import annotations

from .loader import (
    ConfigPackLoader,
    build_engine_config,
    default_data_path,
    load_default_config,
    load_engine_config,
    load_engine_config_from_strings,
    validate_priority_references,
)
from .schema import (
    SCHEMA_VERSION,
    FindingProfilesDocument,
    FindingRulesDocument,
    GlobalOverridesDocument,
    PriorityRulesDocument,
    check_schema_version,
    parse_budget_range,
)


__all__ = [
    # Loader
    "ConfigPackLoader",
    "build_engine_config",
    "default_data_path",
    "load_default_config",
    "load_engine_config",
    "load_engine_config_from_strings",
    "validate_priority_references",
    # Schemas
    "SCHEMA_VERSION",
    "FindingProfilesDocument",
    "FindingRulesDocument",
    "GlobalOverridesDocument",
    "PriorityRulesDocument",
    "check_schema_version",
    "parse_budget_range",
]
