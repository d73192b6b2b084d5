"""Rules engine for Primus character creation.

Everything here is a pure function of its inputs: callers re-run validation on
every change to a draft, and nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from primus.helpers.config_helper import ConfigHelper

from .catalog import GameCatalog, get_default_catalog
from .constants import (
    ABILITY_ABBREVIATIONS,
    ABILITY_KEYS,
    ABILITY_NAMES,
    MAX_LEVEL,
    MIN_LEVEL,
    NAME_MAX_LENGTH,
    SKILL_TIERS,
    TIER_LABELS,
)
from .models import Character
from .points import (
    PointBuyRules,
    ability_modifier,
    apply_archetype_bonuses,
    compute_cost,
    format_modifier,
    validate_ability_scores,
)
from .progression import selected_for_tier, tier_cap, tier_unlock_level, validate_selection
from .violations import (
    ARCHETYPE_MISMATCH,
    LEVEL_OUT_OF_RANGE,
    NAME_REQUIRED,
    NAME_TOO_LONG,
    UNKNOWN_ARCHETYPE,
    UNKNOWN_ROLE,
    CharacterRulesError,
    RuleViolation,
    ValidationResult,
)

CharacterInput = Union[Character, Mapping[str, Any]]


@dataclass(frozen=True)
class AbilityLine:
    key: str
    name: str
    abbreviation: str
    base: int
    bonus: int
    score: int
    modifier: int
    modifier_label: str


@dataclass(frozen=True)
class TierLine:
    tier: int
    label: str
    cap: int
    unlock_level: int
    selected: tuple[str, ...]


@dataclass(frozen=True)
class CharacterSummary:
    points_spent: Optional[int]
    points_budget: int
    points_remaining: Optional[int]
    abilities: tuple[AbilityLine, ...]
    tiers: tuple[TierLine, ...]
    role_name: str
    archetype_name: str
    validation: ValidationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": {
                "spent": self.points_spent,
                "budget": self.points_budget,
                "remaining": self.points_remaining,
            },
            "abilities": [
                {
                    "key": line.key,
                    "name": line.name,
                    "abbreviation": line.abbreviation,
                    "base": line.base,
                    "bonus": line.bonus,
                    "score": line.score,
                    "modifier": line.modifier,
                }
                for line in self.abilities
            ],
            "tiers": [
                {
                    "tier": line.tier,
                    "label": line.label,
                    "cap": line.cap,
                    "unlock_level": line.unlock_level,
                    "selected": list(line.selected),
                }
                for line in self.tiers
            ],
            "role_name": self.role_name,
            "archetype_name": self.archetype_name,
            "validation": self.validation.to_dict(),
        }


def max_level_from_config() -> int:
    return ConfigHelper.getint("Rules", "max_level", fallback=MAX_LEVEL)


def _as_fields(character: CharacterInput) -> Mapping[str, Any]:
    if isinstance(character, Character):
        return character.to_dict()
    if not isinstance(character, Mapping):
        raise CharacterRulesError("Character input must be a Character or a mapping of fields.")
    for key in ("name", "level", "role", "archetype", "stats", "skills"):
        if key not in character:
            raise CharacterRulesError(f"Character input is missing '{key}'.")
    return character


def _validate_record_fields(fields: Mapping[str, Any], catalog: GameCatalog, max_level: int) -> list[RuleViolation]:
    violations: list[RuleViolation] = []

    name = str(fields["name"] or "").strip()
    if not name:
        violations.append(RuleViolation(code=NAME_REQUIRED, message="Name is required.", field="name"))
    elif len(name) > NAME_MAX_LENGTH:
        violations.append(
            RuleViolation(
                code=NAME_TOO_LONG,
                message=f"Name must be at most {NAME_MAX_LENGTH} characters.",
                field="name",
                details={"length": len(name), "max": NAME_MAX_LENGTH},
            )
        )

    level = fields["level"]
    if isinstance(level, bool) or not isinstance(level, int):
        raise CharacterRulesError(f"Level must be an integer, got {level!r}.")
    if not MIN_LEVEL <= level <= max_level:
        violations.append(
            RuleViolation(
                code=LEVEL_OUT_OF_RANGE,
                message=f"Level must be between {MIN_LEVEL} and {max_level} (got {level}).",
                field="level",
                details={"level": level, "min": MIN_LEVEL, "max": max_level},
            )
        )

    role_id = str(fields["role"] or "")
    archetype_id = str(fields["archetype"] or "")
    if catalog.role(role_id) is None:
        violations.append(
            RuleViolation(
                code=UNKNOWN_ROLE,
                message=f"Unknown role '{role_id}'." if role_id else "Role is required.",
                field="role",
                details={"role": role_id},
            )
        )

    archetype = catalog.archetype(archetype_id)
    if archetype is None:
        violations.append(
            RuleViolation(
                code=UNKNOWN_ARCHETYPE,
                message=f"Unknown archetype '{archetype_id}'." if archetype_id else "Archetype is required.",
                field="archetype",
                details={"archetype": archetype_id},
            )
        )
    elif archetype.role_id != role_id:
        violations.append(
            RuleViolation(
                code=ARCHETYPE_MISMATCH,
                message=f"{archetype.name} is an archetype of the '{archetype.role_id}' role.",
                field="archetype",
                details={"archetype": archetype_id, "role": role_id, "expected_role": archetype.role_id},
            )
        )
    return violations


def validate_character(
    character: CharacterInput,
    catalog: Optional[GameCatalog] = None,
    rules: Optional[PointBuyRules] = None,
    max_level: Optional[int] = None,
) -> ValidationResult:
    """Validate a whole character, reporting every violation found."""

    catalog = catalog or get_default_catalog()
    rules = rules or PointBuyRules.from_config()
    max_level = max_level if max_level is not None else max_level_from_config()

    fields = _as_fields(character)
    record = ValidationResult.from_violations(_validate_record_fields(fields, catalog, max_level))
    abilities = validate_ability_scores(fields["stats"], rules)
    skills = validate_selection(fields["skills"], fields["level"], str(fields["role"] or ""), catalog)
    return record.merge(abilities, skills)


def describe_character(
    character: CharacterInput,
    catalog: Optional[GameCatalog] = None,
    rules: Optional[PointBuyRules] = None,
    max_level: Optional[int] = None,
) -> CharacterSummary:
    """Compute the derived values shown on a character sheet."""

    catalog = catalog or get_default_catalog()
    rules = rules or PointBuyRules.from_config()
    fields = _as_fields(character)
    validation = validate_character(fields, catalog, rules, max_level)

    stats = fields["stats"]
    in_range = all(rules.floor <= int(stats[key]) <= rules.ceiling for key in ABILITY_KEYS)
    spent = compute_cost(stats, rules) if in_range else None

    archetype = catalog.archetype(str(fields["archetype"] or ""))
    role = catalog.role(str(fields["role"] or ""))
    final_scores = apply_archetype_bonuses(stats, archetype)

    abilities = tuple(
        AbilityLine(
            key=key,
            name=ABILITY_NAMES[key],
            abbreviation=ABILITY_ABBREVIATIONS[key],
            base=int(stats[key]),
            bonus=final_scores[key] - int(stats[key]),
            score=final_scores[key],
            modifier=ability_modifier(final_scores[key]),
            modifier_label=format_modifier(final_scores[key]),
        )
        for key in ABILITY_KEYS
    )

    level = fields["level"]
    tiers = tuple(
        TierLine(
            tier=tier,
            label=TIER_LABELS[tier],
            cap=tier_cap(level, tier),
            unlock_level=tier_unlock_level(tier),
            selected=tuple(selected_for_tier(fields["skills"], tier, catalog)),
        )
        for tier in SKILL_TIERS
    )

    return CharacterSummary(
        points_spent=spent,
        points_budget=rules.budget,
        points_remaining=rules.budget - spent if spent is not None else None,
        abilities=abilities,
        tiers=tiers,
        role_name=role.name if role else str(fields["role"] or ""),
        archetype_name=archetype.name if archetype else str(fields["archetype"] or ""),
        validation=validation,
    )
