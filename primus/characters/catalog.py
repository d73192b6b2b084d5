"""Static reference tables: roles, archetypes and skills."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from primus.helpers.config_helper import ConfigHelper
from primus.helpers.logging_helper import log_info, log_module_import

from .constants import ABILITY_KEYS, SKILL_TIERS
from .violations import CharacterRulesError

log_module_import(__name__)


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    description: str = ""
    primary_stats: tuple[str, ...] = ()
    recommended_skills: tuple[str, ...] = ()


@dataclass(frozen=True)
class Archetype:
    id: str
    name: str
    role_id: str
    description: str = ""
    bonuses: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class SkillCatalogEntry:
    id: str
    name: str
    tier: int
    description: str = ""
    roles: Optional[frozenset[str]] = None

    def allows_role(self, role: str) -> bool:
        """Skills without a role restriction are open to every role."""

        return self.roles is None or role in self.roles


DEFAULT_ROLES = [
    {
        "id": "warrior",
        "name": "Warrior",
        "description": "Masters of combat and physical prowess, warriors excel in melee combat and protecting allies.",
        "primary_stats": ["strength", "constitution"],
        "recommended_skills": ["combat-mastery", "shield-wall", "intimidation"],
    },
    {
        "id": "scout",
        "name": "Scout",
        "description": "Agile and perceptive, scouts specialize in reconnaissance, ranged combat, and survival.",
        "primary_stats": ["dexterity", "wisdom"],
        "recommended_skills": ["archery", "stealth", "tracking"],
    },
    {
        "id": "scholar",
        "name": "Scholar",
        "description": "Students of arcane knowledge, scholars wield magic and possess vast intellectual abilities.",
        "primary_stats": ["intelligence", "wisdom"],
        "recommended_skills": ["arcane-lore", "ritual-magic", "investigation"],
    },
    {
        "id": "mystic",
        "name": "Mystic",
        "description": "Connected to divine or natural forces, mystics heal allies and commune with otherworldly powers.",
        "primary_stats": ["wisdom", "charisma"],
        "recommended_skills": ["divine-channeling", "healing", "nature-bond"],
    },
]

DEFAULT_ARCHETYPES = [
    {"id": "guardian", "name": "Guardian", "role_id": "warrior",
     "description": "A defensive specialist focused on protecting allies.",
     "bonuses": {"constitution": 2, "strength": 1}},
    {"id": "berserker", "name": "Berserker", "role_id": "warrior",
     "description": "A fierce combatant who channels rage into devastating attacks.",
     "bonuses": {"strength": 2, "constitution": 1}},
    {"id": "ranger", "name": "Ranger", "role_id": "scout",
     "description": "A wilderness expert skilled in tracking and survival.",
     "bonuses": {"wisdom": 2, "dexterity": 1}},
    {"id": "assassin", "name": "Assassin", "role_id": "scout",
     "description": "A deadly infiltrator who strikes from the shadows.",
     "bonuses": {"dexterity": 2, "intelligence": 1}},
    {"id": "wizard", "name": "Wizard", "role_id": "scholar",
     "description": "A master of arcane magic through study and preparation.",
     "bonuses": {"intelligence": 2, "wisdom": 1}},
    {"id": "artificer", "name": "Artificer", "role_id": "scholar",
     "description": "A magical inventor who crafts wondrous items and constructs.",
     "bonuses": {"intelligence": 2, "dexterity": 1}},
    {"id": "cleric", "name": "Cleric", "role_id": "mystic",
     "description": "A divine servant who channels the power of their deity.",
     "bonuses": {"wisdom": 2, "charisma": 1}},
    {"id": "druid", "name": "Druid", "role_id": "mystic",
     "description": "A guardian of nature who can shapeshift and command the elements.",
     "bonuses": {"wisdom": 2, "constitution": 1}},
]

DEFAULT_SKILLS = [
    # Tier 1
    {"id": "combat-mastery", "name": "Combat Mastery", "tier": 1,
     "description": "Proficiency with weapons and basic combat techniques.", "roles": ["warrior"]},
    {"id": "archery", "name": "Archery", "tier": 1,
     "description": "Skill with bows and ranged weapons.", "roles": ["scout"]},
    {"id": "arcane-lore", "name": "Arcane Lore", "tier": 1,
     "description": "Knowledge of magical theory and spell identification.", "roles": ["scholar"]},
    {"id": "healing", "name": "Healing", "tier": 1,
     "description": "Ability to restore health and treat injuries.", "roles": ["mystic"]},
    {"id": "stealth", "name": "Stealth", "tier": 1,
     "description": "Moving unseen and unheard.", "roles": ["scout", "warrior"]},
    {"id": "investigation", "name": "Investigation", "tier": 1,
     "description": "Gathering clues and solving mysteries.", "roles": ["scholar", "scout"]},
    # Tier 2
    {"id": "shield-wall", "name": "Shield Wall", "tier": 2,
     "description": "Advanced defensive formations and protection techniques.", "roles": ["warrior"]},
    {"id": "tracking", "name": "Tracking", "tier": 2,
     "description": "Following trails and hunting quarry through any terrain.", "roles": ["scout"]},
    {"id": "ritual-magic", "name": "Ritual Magic", "tier": 2,
     "description": "Casting powerful spells through extended ceremonies.", "roles": ["scholar", "mystic"]},
    {"id": "divine-channeling", "name": "Divine Channeling", "tier": 2,
     "description": "Manifesting divine power for healing or harm.", "roles": ["mystic"]},
    {"id": "intimidation", "name": "Intimidation", "tier": 2,
     "description": "Using presence and threats to influence others.", "roles": ["warrior"]},
    {"id": "nature-bond", "name": "Nature Bond", "tier": 2,
     "description": "Deep connection with natural forces and creatures.", "roles": ["mystic", "scout"]},
    # Tier 3
    {"id": "weapon-mastery", "name": "Weapon Mastery", "tier": 3,
     "description": "Legendary skill with weapons, unlocking devastating techniques.", "roles": ["warrior"]},
    {"id": "shadow-step", "name": "Shadow Step", "tier": 3,
     "description": "Teleporting through shadows and becoming one with darkness.", "roles": ["scout"]},
    {"id": "archmage-power", "name": "Archmage Power", "tier": 3,
     "description": "Access to reality-altering magic and forbidden knowledge.", "roles": ["scholar"]},
    {"id": "divine-avatar", "name": "Divine Avatar", "tier": 3,
     "description": "Becoming a vessel for divine power and transcendent abilities.", "roles": ["mystic"]},
]


class GameCatalog:
    """Read-only lookup tables shared by the rule engine and the web layer."""

    def __init__(self, roles: Sequence[Role], archetypes: Sequence[Archetype], skills: Sequence[SkillCatalogEntry]):
        self._roles = MappingProxyType({role.id: role for role in roles})
        self._archetypes = MappingProxyType({archetype.id: archetype for archetype in archetypes})
        self._skills = MappingProxyType({skill.id: skill for skill in skills})

        for archetype in self._archetypes.values():
            if archetype.role_id not in self._roles:
                raise CharacterRulesError(
                    f"Archetype '{archetype.id}' references unknown role '{archetype.role_id}'."
                )
        for skill in self._skills.values():
            if skill.tier not in SKILL_TIERS:
                raise CharacterRulesError(f"Skill '{skill.id}' has invalid tier {skill.tier!r}.")

    @property
    def roles(self) -> Mapping[str, Role]:
        return self._roles

    @property
    def archetypes(self) -> Mapping[str, Archetype]:
        return self._archetypes

    @property
    def skills(self) -> Mapping[str, SkillCatalogEntry]:
        return self._skills

    def role(self, role_id: str) -> Optional[Role]:
        return self._roles.get(role_id)

    def archetype(self, archetype_id: str) -> Optional[Archetype]:
        return self._archetypes.get(archetype_id)

    def skill(self, skill_id: str) -> Optional[SkillCatalogEntry]:
        return self._skills.get(skill_id)

    def archetypes_for_role(self, role_id: str) -> list[Archetype]:
        return [archetype for archetype in self._archetypes.values() if archetype.role_id == role_id]

    def skills_for_tier(self, tier: int) -> list[SkillCatalogEntry]:
        return [skill for skill in self._skills.values() if skill.tier == tier]

    def to_dict(self) -> dict[str, Any]:
        return {
            "roles": [
                {
                    "id": role.id,
                    "name": role.name,
                    "description": role.description,
                    "primary_stats": list(role.primary_stats),
                    "recommended_skills": list(role.recommended_skills),
                }
                for role in self._roles.values()
            ],
            "archetypes": [
                {
                    "id": archetype.id,
                    "name": archetype.name,
                    "role_id": archetype.role_id,
                    "description": archetype.description,
                    "bonuses": dict(archetype.bonuses),
                }
                for archetype in self._archetypes.values()
            ],
            "skills": [
                {
                    "id": skill.id,
                    "name": skill.name,
                    "tier": skill.tier,
                    "description": skill.description,
                    "roles": sorted(skill.roles) if skill.roles is not None else None,
                }
                for skill in self._skills.values()
            ],
        }


def _role_from_dict(raw: dict) -> Role:
    return Role(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        description=str(raw.get("description") or ""),
        primary_stats=tuple(raw.get("primary_stats") or raw.get("primaryStats") or ()),
        recommended_skills=tuple(raw.get("recommended_skills") or raw.get("recommendedSkills") or ()),
    )


def _archetype_from_dict(raw: dict) -> Archetype:
    bonuses = raw.get("bonuses") or {}
    for key in bonuses:
        if key not in ABILITY_KEYS:
            raise CharacterRulesError(f"Archetype '{raw.get('id')}' has a bonus on unknown ability '{key}'.")
    return Archetype(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        role_id=str(raw.get("role_id") or raw.get("roleId") or ""),
        description=str(raw.get("description") or ""),
        bonuses=MappingProxyType({key: int(value) for key, value in bonuses.items()}),
    )


def _skill_from_dict(raw: dict) -> SkillCatalogEntry:
    roles = raw.get("roles")
    return SkillCatalogEntry(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        tier=int(raw["tier"]),
        description=str(raw.get("description") or ""),
        roles=frozenset(str(role) for role in roles) if roles is not None else None,
    )


def build_catalog(raw: Mapping[str, Any]) -> GameCatalog:
    try:
        return GameCatalog(
            roles=[_role_from_dict(item) for item in raw.get("roles") or []],
            archetypes=[_archetype_from_dict(item) for item in raw.get("archetypes") or []],
            skills=[_skill_from_dict(item) for item in raw.get("skills") or []],
        )
    except CharacterRulesError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise CharacterRulesError(f"Invalid catalog definition: {exc}") from exc


def load_catalog(path: str | Path | None = None) -> GameCatalog:
    """Build a catalog from a JSON file, or from the built-in tables when ``path`` is empty."""

    if not path:
        return build_catalog(
            {"roles": DEFAULT_ROLES, "archetypes": DEFAULT_ARCHETYPES, "skills": DEFAULT_SKILLS}
        )

    catalog_path = Path(path)
    with catalog_path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    catalog = build_catalog(raw)
    log_info(
        f"Loaded catalog from {catalog_path}: {len(catalog.roles)} roles, "
        f"{len(catalog.archetypes)} archetypes, {len(catalog.skills)} skills"
    )
    return catalog


_DEFAULT_CATALOG: Optional[GameCatalog] = None


def get_default_catalog() -> GameCatalog:
    """Return the process-wide catalog, loading it on first use."""

    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        path = (ConfigHelper.get("Catalog", "path", fallback="") or "").strip()
        _DEFAULT_CATALOG = load_catalog(path or None)
    return _DEFAULT_CATALOG
