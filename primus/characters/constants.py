"""Primus constants for character creation and progression."""

ABILITY_KEYS = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

ABILITY_NAMES = {
    "strength": "Strength",
    "dexterity": "Dexterity",
    "constitution": "Constitution",
    "intelligence": "Intelligence",
    "wisdom": "Wisdom",
    "charisma": "Charisma",
}

ABILITY_ABBREVIATIONS = {
    "strength": "STR",
    "dexterity": "DEX",
    "constitution": "CON",
    "intelligence": "INT",
    "wisdom": "WIS",
    "charisma": "CHA",
}

DEFAULT_ABILITY_SCORE = 10

# Point-buy profiles: (budget, floor, ceiling, cost mode)
POINT_BUY_PROFILES = {
    "point_buy": (27, 8, 15, "stepped"),
    "flat": (90, 1, 30, "flat"),
}
DEFAULT_PROFILE = "point_buy"

POINT_BUY_BASE = 8
# Marginal cost is 1 up to this score, 2 above it.
STEP_PREMIUM_THRESHOLD = 13

SKILL_TIERS = (1, 2, 3)
TIER_LABELS = {
    1: "Basic",
    2: "Advanced",
    3: "Master",
}

MIN_LEVEL = 1
MAX_LEVEL = 50
NAME_MAX_LENGTH = 100
