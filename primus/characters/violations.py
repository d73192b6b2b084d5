"""Structured rule violations returned by the character rule engine."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

RANGE_VIOLATION = "range_violation"
BUDGET_EXCEEDED = "budget_exceeded"
TIER_CAP_EXCEEDED = "tier_cap_exceeded"
ROLE_INELIGIBLE = "role_ineligible"
UNKNOWN_SKILL = "unknown_skill"
DUPLICATE_SKILL = "duplicate_skill"
NAME_REQUIRED = "name_required"
NAME_TOO_LONG = "name_too_long"
LEVEL_OUT_OF_RANGE = "level_out_of_range"
UNKNOWN_ROLE = "unknown_role"
UNKNOWN_ARCHETYPE = "unknown_archetype"
ARCHETYPE_MISMATCH = "archetype_mismatch"

_EMPTY_DETAILS: Mapping[str, Any] = MappingProxyType({})


class CharacterRulesError(ValueError):
    """Raised when the rule engine is called with a malformed input shape."""


@dataclass(frozen=True)
class RuleViolation:
    code: str
    message: str
    field: str | None = None
    details: Mapping[str, Any] = dataclasses.field(default_factory=lambda: _EMPTY_DETAILS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Zero or more violations; valid when there are none."""

    violations: tuple[RuleViolation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    def codes(self) -> list[str]:
        return [violation.code for violation in self.violations]

    def by_code(self, code: str) -> list[RuleViolation]:
        return [violation for violation in self.violations if violation.code == code]

    def merge(self, *others: "ValidationResult") -> "ValidationResult":
        merged = list(self.violations)
        for other in others:
            merged.extend(other.violations)
        return ValidationResult(tuple(merged))

    @classmethod
    def from_violations(cls, violations: Iterable[RuleViolation]) -> "ValidationResult":
        return cls(tuple(violations))

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [violation.to_dict() for violation in self.violations],
        }
