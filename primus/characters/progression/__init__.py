"""Progression helpers for Primus character creation."""

from .skills import available_skills, is_selectable, selected_for_tier, toggle_skill, validate_selection
from .tier_limits import TIER_UNLOCK_LEVELS, tier_cap, tier_caps, tier_unlock_level

__all__ = [
    "TIER_UNLOCK_LEVELS",
    "available_skills",
    "is_selectable",
    "selected_for_tier",
    "tier_cap",
    "tier_caps",
    "tier_unlock_level",
    "toggle_skill",
    "validate_selection",
]
