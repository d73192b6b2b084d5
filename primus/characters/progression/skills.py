"""Skill-selection eligibility gated by level and role."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from ..catalog import GameCatalog, SkillCatalogEntry
from ..constants import SKILL_TIERS, TIER_LABELS
from ..violations import (
    DUPLICATE_SKILL,
    ROLE_INELIGIBLE,
    TIER_CAP_EXCEEDED,
    UNKNOWN_SKILL,
    CharacterRulesError,
    RuleViolation,
    ValidationResult,
)
from .tier_limits import tier_cap, tier_unlock_level


def _require_selection(selection: Iterable[str]) -> list[str]:
    if isinstance(selection, (str, bytes)):
        raise CharacterRulesError("Skill selection must be a collection of skill ids, not a string.")
    try:
        return [str(skill_id) for skill_id in selection]
    except TypeError as exc:
        raise CharacterRulesError("Skill selection must be iterable.") from exc


def selected_for_tier(selection: Iterable[str], tier: int, catalog: GameCatalog) -> list[str]:
    selected: list[str] = []
    for skill_id in dict.fromkeys(_require_selection(selection)):
        skill = catalog.skill(skill_id)
        if skill is not None and skill.tier == tier:
            selected.append(skill_id)
    return selected


def available_skills(tier: int, role: str, catalog: GameCatalog) -> list[SkillCatalogEntry]:
    """Skills of ``tier`` the role may pick, regardless of the current cap."""

    return [skill for skill in catalog.skills_for_tier(tier) if skill.allows_role(role)]


def is_selectable(
    skill_id: str,
    selection: Iterable[str],
    level: int,
    role: str,
    catalog: GameCatalog,
) -> bool:
    """Whether toggling ``skill_id`` on the current draft is allowed.

    An already-selected skill is always selectable so that it can be removed.
    """

    skill = catalog.skill(skill_id)
    if skill is None:
        return False
    if not skill.allows_role(role):
        return False

    current = _require_selection(selection)
    if skill_id in current:
        return True
    return len(selected_for_tier(current, skill.tier, catalog)) < tier_cap(level, skill.tier)


def toggle_skill(
    skill_id: str,
    selection: Sequence[str],
    level: int,
    role: str,
    catalog: GameCatalog,
) -> list[str]:
    """Return a new selection with ``skill_id`` removed, added, or left unchanged."""

    current = _require_selection(selection)
    if skill_id in current:
        return [selected for selected in current if selected != skill_id]
    if is_selectable(skill_id, current, level, role, catalog):
        return current + [skill_id]
    return current


def validate_selection(
    selection: Iterable[str],
    level: int,
    role: str,
    catalog: GameCatalog,
) -> ValidationResult:
    """Check every skill and every tier, collecting all violations."""

    skills = _require_selection(selection)
    violations: list[RuleViolation] = []

    counts = Counter(skills)
    for skill_id, count in counts.items():
        if count > 1:
            violations.append(
                RuleViolation(
                    code=DUPLICATE_SKILL,
                    message=f"Skill '{skill_id}' is selected {count} times.",
                    field="skills",
                    details={"skill_id": skill_id, "count": count},
                )
            )

    per_tier: dict[int, int] = {tier: 0 for tier in SKILL_TIERS}
    for skill_id in counts:
        skill = catalog.skill(skill_id)
        if skill is None:
            violations.append(
                RuleViolation(
                    code=UNKNOWN_SKILL,
                    message=f"Unknown skill '{skill_id}'.",
                    field="skills",
                    details={"skill_id": skill_id},
                )
            )
            continue

        per_tier[skill.tier] += 1
        if not skill.allows_role(role):
            violations.append(
                RuleViolation(
                    code=ROLE_INELIGIBLE,
                    message=f"{skill.name} is not available to the '{role}' role.",
                    field="skills",
                    details={"skill_id": skill_id, "role": role, "allowed_roles": sorted(skill.roles or ())},
                )
            )

    for tier in SKILL_TIERS:
        cap = tier_cap(level, tier)
        selected = per_tier[tier]
        if selected > cap:
            if cap == 0:
                message = (
                    f"{TIER_LABELS[tier]} (tier {tier}) skills unlock at level {tier_unlock_level(tier)}."
                )
            else:
                message = f"{selected} tier {tier} skills selected, maximum at level {level} is {cap}."
            violations.append(
                RuleViolation(
                    code=TIER_CAP_EXCEEDED,
                    message=message,
                    field="skills",
                    details={"tier": tier, "selected": selected, "cap": cap, "level": level},
                )
            )

    return ValidationResult.from_violations(violations)
