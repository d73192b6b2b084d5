"""Level-dependent skill tier limits."""

from __future__ import annotations

from ..constants import SKILL_TIERS
from ..violations import CharacterRulesError

TIER_UNLOCK_LEVELS = {
    1: 1,
    2: 3,
    3: 6,
}


def _require_tier(tier: int) -> int:
    if tier not in SKILL_TIERS:
        raise CharacterRulesError(f"Unknown skill tier: {tier!r}")
    return tier


def tier_cap(level: int, tier: int) -> int:
    """Return the max number of skills of ``tier`` selectable at ``level``."""

    _require_tier(tier)
    if isinstance(level, bool) or not isinstance(level, int):
        raise CharacterRulesError(f"Level must be an integer, got {level!r}.")

    if tier == 1:
        return max(0, min(level, 3))
    if tier == 2:
        return max(0, min(level - 2, 2))
    return max(0, min(level - 5, 1))


def tier_unlock_level(tier: int) -> int:
    return TIER_UNLOCK_LEVELS[_require_tier(tier)]


def tier_caps(level: int) -> dict[int, int]:
    return {tier: tier_cap(level, tier) for tier in SKILL_TIERS}
