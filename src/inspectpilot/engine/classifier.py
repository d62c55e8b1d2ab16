"""
InspectPilot Finding Classifier

Pure keyword lookup assigning a system group, a space group and tags to a
finding by its identifier.

Identifiers are normalized (uppercased, hyphens folded to underscores) and
a table entry matches when any of its keywords is a substring of the
normalized ID.

- System and space groups: ordered tables, first matching entry wins
- Tags: every matching entry contributes, de-duplicated in table order
"""
from __future__ import annotations

from dataclasses import replace
from functools import lru_cache
from typing import Iterable

from ..models import ClassificationResult, Finding


DEFAULT_SYSTEM_GROUP = "other"
DEFAULT_SPACE_GROUP = "general"

KeywordTable = tuple[tuple[tuple[str, ...], str], ...]


# =============================================================================
# Keyword Tables
# =============================================================================

# Order matters: first match wins
SYSTEM_GROUP_RULES: KeywordTable = (
    (("SWITCHBOARD", "MAIN_SWITCH", "SERVICE_FUSE", "BOARD_AT_CAPACITY",
      "NO_EXPANSION_MARGIN", "LABELING"), "switchboard"),
    (("EARTH", "MEN_", "BONDING", "GROUND", "EARTH_DEGRADED", "EARTH_PIN"), "earthing"),
    (("RCD", "RCBO", "TEST_BUTTON", "TRIP_TIME", "RCD_TEST", "NO_RCD_PROTECTION"), "rcd"),
    (("LIGHT", "LAMP", "FITTING", "CEILING", "EXTERIOR_LIGHT", "SWITCH_ARCING"), "lighting"),
    (("GPO", "POWER_POINT", "OUTLET", "PLUG_", "SOCKET", "GPO_EARTH_FAULT",
      "GPO_MECHANICAL"), "power"),
    (("SMOKE_ALARM", "ALARM_SOUNDED", "TYPE_OBSERVED_PHOTOELECTRIC",
      "UNIT_TESTED_AS_INTERCONNECTED"), "smoke_alarm"),
    (("ROOF_SPACE", "TRANSFORMER", "INSULATION_CONTACT", "ROOF_"), "roof_space"),
    (("THERMAL", "HEAT_DAMAGE", "SURFACE_FEELS_ABNORMALLY", "OVERHEATING",
      "THERMAL_STRESS", "HOTSPOT"), "thermal"),
    (("COOKTOP", "OVEN", "RANGEHOOD", "RANGE_HOOD", "SUPPLY_CABLE_LOCATED",
      "DISHWASHER", "WASHING_MACHINE", "DRYER", "EXHAUST_FAN", "HEATED_TOWEL"), "appliances"),
    (("CABLE", "WIRING", "INSULATION", "FLEXIBLE_LEAD", "TAPED_CONNECTION",
      "BARE_METAL", "CABLE_DAMAGE"), "cabling"),
    (("ASBESTOS", "COVER_BROKEN", "CERAMIC_FUSE", "BAKELITE", "DAMAGE_CORROSION"), "other"),
    (("EXTENSION_LEAD", "POWER_BOARD", "NUMBER_OF_POWER"), "other"),
    (("GARAGE_DOOR", "LOCATION_PHOTOGRAPHED", "MANUFACTURE_DATE", "ALL_CHECKLIST",
      "ALL_REQUIRED_PHOTOS", "NO_ADVICE", "LIMITATION"), "other"),
)

SPACE_GROUP_RULES: KeywordTable = (
    (("KITCHEN", "COOKTOP", "OVEN", "RANGEHOOD", "DISHWASHER"), "kitchen"),
    (("BATHROOM", "BATH_", "SHOWER", "SINK_", "WATER_TAP", "HEATED_TOWEL"), "bathroom"),
    (("LIVING", "COMMON"), "living"),
    (("BEDROOM", "BED_"), "bedroom"),
    (("EXTERIOR", "OUTDOOR", "OUTSIDE"), "exterior"),
    (("ROOF_SPACE", "ROOF_", "CEILING", "ATTIC", "VOID"), "roof_space"),
    (("SWITCHBOARD", "MAIN_SWITCH", "METER", "METERBOX"), "switchboard_area"),
    (("LAUNDRY", "WASHING_MACHINE", "DRYER"), "laundry"),
    (("GARAGE", "CARPORT"), "garage"),
    (("POWER_POINT", "OUTLET", "LIGHT_", "GPO"), "general"),
)

# All matching entries apply
TAG_RULES: KeywordTable = (
    (("SAFETY", "ALARM", "RCD", "EARTH_PIN", "BURN_", "HEAT_DAMAGE", "ASBESTOS", "HAZARD"), "safety"),
    (("COMPLIANCE", "LIABILITY", "MEN_", "LABEL", "CLEARANCE", "NON_STANDARD"), "compliance"),
    (("THERMAL", "HEAT_", "OVERHEAT", "SURFACE_FEELS", "THERMAL_STRESS", "HOTSPOT"), "thermal"),
    (("WATER", "MOISTURE", "BATHROOM", "SINK", "WEATHERPROOF", "WET"), "moisture"),
    (("CABLE", "WIRING", "INSULATION", "DAMAGE_VISIBLE", "BARE_METAL", "CABLE_DAMAGE"), "cabling"),
    (("SWITCHBOARD", "FUSE", "BOARD", "MAIN_SWITCH"), "switchboard"),
    (("EARTH", "MEN_", "BONDING", "GROUND"), "earthing"),
    (("RCD", "RCBO", "RESIDUAL"), "rcd"),
    (("LIGHT", "LAMP", "FITTING", "SWITCH"), "lighting"),
    (("GPO", "POWER_POINT", "OUTLET", "SOCKET"), "power"),
    (("COOKTOP", "OVEN", "RANGEHOOD", "DISHWASHER", "WASHING_MACHINE", "DRYER", "APPLIANCE"), "appliance"),
    (("BUDGET", "CAPEX", "COST", "BUDGETARY"), "budget"),
    (("IMMEDIATE", "URGENT", "CRITICAL"), "urgent"),
    (("CERAMIC_FUSE", "BAKELITE", "LEGACY", "OLD"), "legacy"),
    (("ASBESTOS", "HAZARD", "DANGEROUS"), "hazard"),
)


# =============================================================================
# Lookup
# =============================================================================

def normalize_finding_id(finding_id: str) -> str:
    """Uppercase and fold hyphens to underscores."""
    return finding_id.strip().upper().replace("-", "_")


def _matches(normalized_id: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in normalized_id for keyword in keywords)


def _first_match(normalized_id: str, table: KeywordTable, default: str) -> str:
    for keywords, value in table:
        if _matches(normalized_id, keywords):
            return value
    return default


def _all_matches(normalized_id: str, table: KeywordTable) -> tuple[str, ...]:
    tags: list[str] = []
    for keywords, value in table:
        if value not in tags and _matches(normalized_id, keywords):
            tags.append(value)
    return tuple(tags)


@lru_cache(maxsize=1024)
def classify_finding(finding_id: str) -> ClassificationResult:
    """
    Classify a finding ID.

    The tables are static, so results are cached for the process lifetime.

    Example:
        >>> classify_finding("NO_RCD_PROTECTION").system_group
        'rcd'
    """
    normalized = normalize_finding_id(finding_id)
    return ClassificationResult(
        system_group=_first_match(normalized, SYSTEM_GROUP_RULES, DEFAULT_SYSTEM_GROUP),
        space_group=_first_match(normalized, SPACE_GROUP_RULES, DEFAULT_SPACE_GROUP),
        tags=_all_matches(normalized, TAG_RULES),
    )


def classify_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Attach a ClassificationResult to each finding."""
    return [replace(f, classification=classify_finding(f.id)) for f in findings]
