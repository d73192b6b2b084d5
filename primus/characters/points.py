"""Helpers for ability-score point-buy accounting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from primus.helpers.config_helper import ConfigHelper

from .catalog import Archetype
from .constants import (
    ABILITY_KEYS,
    ABILITY_NAMES,
    DEFAULT_PROFILE,
    POINT_BUY_BASE,
    POINT_BUY_PROFILES,
    STEP_PREMIUM_THRESHOLD,
)
from .violations import (
    BUDGET_EXCEEDED,
    RANGE_VIOLATION,
    CharacterRulesError,
    RuleViolation,
    ValidationResult,
)


@dataclass(frozen=True)
class PointBuyRules:
    budget: int = 27
    floor: int = 8
    ceiling: int = 15
    base: int = POINT_BUY_BASE
    cost_mode: str = "stepped"

    def __post_init__(self):
        if self.cost_mode not in ("stepped", "flat"):
            raise CharacterRulesError(f"Unknown point-buy cost mode: {self.cost_mode!r}")
        if self.floor > self.ceiling:
            raise CharacterRulesError("Point-buy floor cannot exceed its ceiling.")
        if self.cost_mode == "stepped" and self.floor < self.base:
            raise CharacterRulesError(
                f"Stepped point-buy floor ({self.floor}) cannot be below the free base score ({self.base})."
            )

    @classmethod
    def for_profile(cls, profile: str) -> "PointBuyRules":
        try:
            budget, floor, ceiling, cost_mode = POINT_BUY_PROFILES[profile]
        except KeyError as exc:
            raise CharacterRulesError(f"Unknown point-buy profile: {profile!r}") from exc
        return cls(budget=budget, floor=floor, ceiling=ceiling, cost_mode=cost_mode)

    @classmethod
    def from_config(cls) -> "PointBuyRules":
        """Profile defaults from ``[Rules] profile``, individually overridable."""

        profile = (ConfigHelper.get("Rules", "profile", fallback=DEFAULT_PROFILE) or DEFAULT_PROFILE).strip()
        defaults = cls.for_profile(profile)
        return cls(
            budget=ConfigHelper.getint("Rules", "budget", fallback=defaults.budget),
            floor=ConfigHelper.getint("Rules", "floor", fallback=defaults.floor),
            ceiling=ConfigHelper.getint("Rules", "ceiling", fallback=defaults.ceiling),
            cost_mode=defaults.cost_mode,
        )


DEFAULT_RULES = PointBuyRules()


def _require_scores(scores: Mapping[str, int]) -> dict[str, int]:
    if not isinstance(scores, Mapping):
        raise CharacterRulesError("Ability scores must be a mapping of ability name to score.")
    missing = [key for key in ABILITY_KEYS if key not in scores]
    if missing:
        raise CharacterRulesError(f"Missing ability scores: {', '.join(missing)}")
    normalized = {}
    for key in ABILITY_KEYS:
        value = scores[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise CharacterRulesError(f"Ability score '{key}' must be an integer, got {value!r}.")
        normalized[key] = value
    return normalized


def point_cost(score: int, rules: PointBuyRules = DEFAULT_RULES) -> int:
    """Cost of a single score: 1 point per step up to 13, 2 per step above.

    Scores outside the rules' range are rejected before any cost is computed.
    """

    if not rules.floor <= score <= rules.ceiling:
        raise CharacterRulesError(
            f"Score {score} is outside the point-buy range [{rules.floor}, {rules.ceiling}]."
        )
    if rules.cost_mode == "flat":
        return score
    return (score - rules.base) + max(0, score - STEP_PREMIUM_THRESHOLD)


def compute_cost(scores: Mapping[str, int], rules: PointBuyRules = DEFAULT_RULES) -> int:
    normalized = _require_scores(scores)
    return sum(point_cost(normalized[key], rules) for key in ABILITY_KEYS)


def is_within_budget(
    scores: Mapping[str, int],
    budget: Optional[int] = None,
    rules: PointBuyRules = DEFAULT_RULES,
) -> bool:
    limit = rules.budget if budget is None else budget
    return compute_cost(scores, rules) <= limit


def can_change_score(
    scores: Mapping[str, int],
    ability: str,
    new_value: int,
    rules: PointBuyRules = DEFAULT_RULES,
) -> bool:
    """Whether a single-score adjustment may be applied to an in-progress draft.

    Lowering a score is always allowed while it stays in range, even when the
    draft is currently over budget.
    """

    if ability not in ABILITY_KEYS:
        raise CharacterRulesError(f"Unknown ability: {ability!r}")
    current = _require_scores(scores)
    if not rules.floor <= new_value <= rules.ceiling:
        return False
    if new_value <= current[ability]:
        return True
    proposed = dict(current)
    proposed[ability] = new_value
    return compute_cost(proposed, rules) <= rules.budget


def summarize_point_budget(scores: Mapping[str, int], rules: PointBuyRules = DEFAULT_RULES) -> dict[str, int]:
    """Return current point usage for "X / Y points used" display."""

    spent = compute_cost(scores, rules)
    return {
        "spent": spent,
        "budget": rules.budget,
        "remaining": rules.budget - spent,
    }


def ability_modifier(score: int) -> int:
    return (score - 10) // 2


def format_modifier(score: int) -> str:
    modifier = ability_modifier(score)
    return f"+{modifier}" if modifier >= 0 else str(modifier)


def format_bonus(bonus: int) -> str:
    """Signed bonus label; empty when there is no bonus."""

    if bonus == 0:
        return ""
    return f"+{bonus}" if bonus > 0 else str(bonus)


def apply_archetype_bonuses(scores: Mapping[str, int], archetype: Optional[Archetype]) -> dict[str, int]:
    final_scores = {key: int(scores[key]) for key in ABILITY_KEYS}
    if archetype is None:
        return final_scores
    for key, bonus in archetype.bonuses.items():
        final_scores[key] = final_scores.get(key, 0) + int(bonus)
    return final_scores


def validate_ability_scores(scores: Mapping[str, int], rules: PointBuyRules = DEFAULT_RULES) -> ValidationResult:
    normalized = _require_scores(scores)

    violations: list[RuleViolation] = []
    for key in ABILITY_KEYS:
        value = normalized[key]
        if not rules.floor <= value <= rules.ceiling:
            violations.append(
                RuleViolation(
                    code=RANGE_VIOLATION,
                    message=f"{ABILITY_NAMES[key]} must be between {rules.floor} and {rules.ceiling} (got {value}).",
                    field=f"stats.{key}",
                    details={"ability": key, "value": value, "floor": rules.floor, "ceiling": rules.ceiling},
                )
            )
    if violations:
        return ValidationResult.from_violations(violations)

    spent = compute_cost(normalized, rules)
    if spent > rules.budget:
        violations.append(
            RuleViolation(
                code=BUDGET_EXCEEDED,
                message=f"{spent} / {rules.budget} points used.",
                field="stats",
                details={"spent": spent, "budget": rules.budget},
            )
        )
    return ValidationResult.from_violations(violations)
