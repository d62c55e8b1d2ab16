"""
InspectPilot Configuration Pack Schemas

Pydantic models for validating configuration YAML/JSON documents:
- finding rules (conditions -> finding IDs)
- priority rules (matrix, liability adjustment, guardrails, finding meta)
- finding profiles (severity/likelihood/budget/category per finding)
- global overrides (configuration-level per-finding overrides)

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check major version compatibility
"""
from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

PriorityBucketValue = Literal[
    "IMMEDIATE", "URGENT", "RECOMMENDED_0_3_MONTHS", "PLAN_MONITOR",
    "RECOMMENDED", "PLAN",
]

SafetyValue = Literal["LOW", "MODERATE", "HIGH"]

UrgencyValue = Literal["LONG_TERM", "SHORT_TERM", "IMMEDIATE"]

LiabilityValue = Literal["LOW", "MEDIUM", "HIGH"]

EscalationValue = Literal["LOW", "MODERATE", "HIGH"]

BudgetBandValue = Literal["LOW", "MED", "MEDIUM", "HIGH"]

ConditionOperatorValue = Literal[
    "equals", "not_equals", "exists", "contains", "not_contains",
    "greater_than", "less_than",
]

ShiftValue = Literal["UP", "DOWN", "NONE"]


def _upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


# =============================================================================
# Finding Rule Schemas
# =============================================================================

class RuleConditionSchema(BaseModel):
    """Schema for a single rule condition."""
    field: str = Field(..., min_length=1, description="Dot-notation fact path, may use 'a.b[].c'")
    condition: ConditionOperatorValue = Field(..., description="Comparison operator")
    value: Any = Field(None, description="Literal to compare against")
    compare_field: Optional[str] = Field(
        None, description="Second fact path compared numerically instead of value"
    )

    @model_validator(mode="after")
    def validate_structure(self) -> "RuleConditionSchema":
        """Validate operator/value combinations."""
        if self.compare_field is not None:
            if self.condition not in ("greater_than", "less_than"):
                raise ValueError(
                    f"compare_field requires greater_than or less_than, got '{self.condition}'"
                )
        elif self.condition == "exists":
            if self.value is None:
                self.value = True
            if not isinstance(self.value, bool):
                raise ValueError("exists condition requires a boolean value")
        elif self.value is None:
            raise ValueError(f"Condition '{self.condition}' requires 'value' or 'compare_field'")
        if self.field.count("[].") > 1:
            raise ValueError(f"Only one array projection is supported per path: '{self.field}'")
        return self


class FindingRuleSchema(BaseModel):
    """Schema for a finding rule."""
    finding_id: str = Field(..., min_length=1, description="Finding raised when the rule fires")
    priority: PriorityBucketValue = Field(..., description="Priority hint for the finding")
    when: RuleConditionSchema = Field(..., description="Condition to evaluate")
    description: Optional[str] = Field(None, description="Human-readable description")

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class FindingRulesDocument(BaseModel):
    """Root schema for a finding-rule document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version")
    description: Optional[str] = Field(None, description="Document description")
    rules: list[FindingRuleSchema] = Field(default_factory=list, description="Ordered rules")

    model_config = {"extra": "forbid"}


# =============================================================================
# Priority Rule Schemas
# =============================================================================

class HardOverridesSchema(BaseModel):
    """Finding IDs that always resolve to a fixed bucket."""
    priority_bucket: PriorityBucketValue = Field("IMMEDIATE")
    findings: list[str] = Field(default_factory=list)


class MatrixWhenSchema(BaseModel):
    safety: SafetyValue
    urgency: Optional[UrgencyValue] = None

    @field_validator("safety", "urgency", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class MatrixEntrySchema(BaseModel):
    """One ordered row of the base priority matrix."""
    when: MatrixWhenSchema
    then: PriorityBucketValue

    @field_validator("then", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class LiabilityWhenSchema(BaseModel):
    liability: LiabilityValue

    @field_validator("liability", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class LiabilityActionSchema(BaseModel):
    shift: ShiftValue = "NONE"
    max_priority: Optional[PriorityBucketValue] = None
    min_priority: Optional[PriorityBucketValue] = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "LiabilityActionSchema":
        if self.shift == "UP" and self.max_priority is None:
            raise ValueError("UP shift requires max_priority")
        if self.shift == "DOWN" and self.min_priority is None:
            raise ValueError("DOWN shift requires min_priority")
        return self


class LiabilityRuleSchema(BaseModel):
    when: LiabilityWhenSchema
    action: LiabilityActionSchema


class LiabilityAdjustmentSchema(BaseModel):
    rules: list[LiabilityRuleSchema] = Field(default_factory=list)


class GuardrailWhenSchema(BaseModel):
    safety: Optional[SafetyValue] = None
    urgency: Optional[UrgencyValue] = None
    liability: Optional[LiabilityValue] = None

    @field_validator("safety", "urgency", "liability", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class GuardrailThenSchema(BaseModel):
    allow_downgrade: Optional[bool] = None
    allow_liability_adjustment: Optional[bool] = None


class GuardrailSchema(BaseModel):
    """A rule disabling an adjustment under stated conditions."""
    if_: GuardrailWhenSchema = Field(..., alias="if")
    then: GuardrailThenSchema

    model_config = {"populate_by_name": True}


class LiabilityGuardrailsSchema(BaseModel):
    rules: list[GuardrailSchema] = Field(default_factory=list)


class PriorityMetaSchema(BaseModel):
    """Static safety/urgency/liability for one finding."""
    safety: SafetyValue
    urgency: UrgencyValue
    liability: LiabilityValue

    @field_validator("safety", "urgency", "liability", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class CustomFindingsSchema(BaseModel):
    """Upgrade rule for author-entered custom findings."""
    severity_likelihood_threshold: float = Field(12, gt=0)
    upgrade_bucket: PriorityBucketValue = Field("RECOMMENDED_0_3_MONTHS")


class PriorityRulesDocument(BaseModel):
    """Root schema for a priority-rule document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version")
    description: Optional[str] = Field(None, description="Document description")
    hard_overrides: HardOverridesSchema = Field(default_factory=HardOverridesSchema)
    base_priority_matrix: list[MatrixEntrySchema] = Field(default_factory=list)
    default_bucket: PriorityBucketValue = Field("PLAN_MONITOR")
    liability_adjustment: LiabilityAdjustmentSchema = Field(default_factory=LiabilityAdjustmentSchema)
    liability_guardrails: LiabilityGuardrailsSchema = Field(default_factory=LiabilityGuardrailsSchema)
    findings: dict[str, PriorityMetaSchema] = Field(default_factory=dict)
    custom_findings: CustomFindingsSchema = Field(default_factory=CustomFindingsSchema)

    model_config = {"extra": "forbid"}


# =============================================================================
# Finding Profile Schemas
# =============================================================================

_BUDGET_RANGE_RE = re.compile(r"\$?([\d,]+(?:\.\d+)?)\s*[–—-]\s*\$?([\d,]+(?:\.\d+)?)")


def parse_budget_range(text: Optional[str]) -> Optional[tuple[float, float]]:
    """
    Parse a display budget like "AUD $350–$450" into (350, 450).

    Returns None when the text holds no recognisable range.
    """
    if not text:
        return None
    match = _BUDGET_RANGE_RE.search(text)
    if not match:
        return None
    low = float(match.group(1).replace(",", ""))
    high = float(match.group(2).replace(",", ""))
    return (int(low) if low.is_integer() else low, int(high) if high.is_integer() else high)


class CategoryDefaultsSchema(BaseModel):
    """Defaults inherited by profiles in a category."""
    severity: Optional[int] = Field(None, ge=1, le=5)
    likelihood: Optional[int] = Field(None, ge=1, le=5)
    budget_band: Optional[BudgetBandValue] = None
    default_priority: Optional[PriorityBucketValue] = None

    @field_validator("budget_band", "default_priority", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)


class FindingProfileSchema(BaseModel):
    """Scoring profile for one finding."""
    category: Optional[str] = None
    title: Optional[str] = None
    severity: Optional[int] = Field(None, ge=1, le=5)
    likelihood: Optional[int] = Field(None, ge=1, le=5)
    budget_band: Optional[BudgetBandValue] = None
    budget_low: Optional[float] = Field(None, ge=0)
    budget_high: Optional[float] = Field(None, ge=0)
    budget_range: Optional[str] = Field(None, description="Display range, e.g. 'AUD $350–$450'")
    default_priority: Optional[PriorityBucketValue] = None
    escalation: Optional[EscalationValue] = None
    safety: Optional[SafetyValue] = None
    urgency: Optional[UrgencyValue] = None
    liability: Optional[LiabilityValue] = None

    @field_validator(
        "category", "budget_band", "default_priority", "escalation",
        "safety", "urgency", "liability", mode="before",
    )
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)

    @model_validator(mode="after")
    def validate_budget(self) -> "FindingProfileSchema":
        """Resolve budget_range into numbers and check ordering."""
        if self.budget_low is None and self.budget_high is None and self.budget_range:
            parsed = parse_budget_range(self.budget_range)
            if parsed is None:
                raise ValueError(f"Unparseable budget_range: '{self.budget_range}'")
            self.budget_low, self.budget_high = parsed
        if (self.budget_low is None) != (self.budget_high is None):
            raise ValueError("budget_low and budget_high must be given together")
        if self.budget_low is not None and self.budget_low > self.budget_high:
            raise ValueError("budget_low must not exceed budget_high")
        return self


class FindingProfilesDocument(BaseModel):
    """Root schema for a finding-profile document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version")
    description: Optional[str] = Field(None, description="Document description")
    category_defaults: dict[str, CategoryDefaultsSchema] = Field(default_factory=dict)
    finding_profiles: dict[str, FindingProfileSchema] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    @field_validator("category_defaults", mode="before")
    @classmethod
    def upper_category_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k).strip().upper(): val for k, val in v.items()}
        return v


# =============================================================================
# Global Override Schemas
# =============================================================================

class OverrideSchema(BaseModel):
    """Configuration-level override for one finding."""
    title: Optional[str] = None
    priority: Optional[PriorityBucketValue] = None
    safety: Optional[SafetyValue] = None
    urgency: Optional[UrgencyValue] = None
    liability: Optional[LiabilityValue] = None
    escalation: Optional[EscalationValue] = None
    severity: Optional[int] = Field(None, ge=1, le=5)
    likelihood: Optional[int] = Field(None, ge=1, le=5)
    budget_low: Optional[float] = Field(None, ge=0)
    budget_high: Optional[float] = Field(None, ge=0)

    @field_validator(
        "priority", "safety", "urgency", "liability", "escalation", mode="before",
    )
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        return _upper(v)

    model_config = {"extra": "forbid"}


class GlobalOverridesDocument(BaseModel):
    """Root schema for a global-override document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version")
    description: Optional[str] = Field(None, description="Document description")
    overrides: dict[str, OverrideSchema] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


# =============================================================================
# Validation Helpers
# =============================================================================

def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a document's schema version is compatible.

    Only the major version must match.
    """
    doc_version = str(data.get("schema_version", SCHEMA_VERSION))
    return doc_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
