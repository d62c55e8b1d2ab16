"""
InspectPilot Exception Hierarchy

Domain-specific exceptions for the inspection findings engine.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: IP_<CATEGORY>_<SPECIFIC>

Only configuration problems are raised. Missing finding metadata is
recovered with fixed defaults and narrative validation failures fall back
to deterministic sentences, so neither surfaces here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class InspectPilotError(Exception):
    """
    Base exception for all InspectPilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (IP_*)
        details: Additional context about the error
        inspection_id: Associated inspection ID if applicable
    """
    message: str
    code: str = "IP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    inspection_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.inspection_id:
            parts.append(f"(inspection: {self.inspection_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.inspection_id:
            result["inspection_id"] = self.inspection_id
        return result


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigError(InspectPilotError):
    """Configuration document problem (rules, profiles, overrides)."""
    code: str = "IP_CONFIG_ERROR"


@dataclass
class ConfigLoadError(ConfigError):
    """Failed to read a configuration document from file."""
    code: str = "IP_CONFIG_LOAD_ERROR"


@dataclass
class ConfigValidationError(ConfigError):
    """Configuration document failed schema or reference validation."""
    code: str = "IP_CONFIG_VALIDATION_ERROR"


@dataclass
class ConfigVersionMismatch(ConfigError):
    """Configuration schema version is not supported."""
    code: str = "IP_CONFIG_VERSION_MISMATCH"


# =============================================================================
# Rule Evaluation Errors
# =============================================================================

@dataclass
class RuleEvaluationError(InspectPilotError):
    """A finding rule could not be evaluated."""
    code: str = "IP_RULE_EVAL_ERROR"


@dataclass
class InvalidConditionError(RuleEvaluationError):
    """Rule condition uses an unknown operator or is malformed."""
    code: str = "IP_INVALID_CONDITION"
