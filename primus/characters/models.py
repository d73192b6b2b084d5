"""Character record as persisted by the character stores."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .constants import ABILITY_KEYS, DEFAULT_ABILITY_SCORE

EDITABLE_FIELDS = ("name", "level", "role", "archetype", "stats", "skills")

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_character_id() -> str:
    return uuid.uuid4().hex


def is_valid_character_id(value: str) -> bool:
    return bool(_ID_PATTERN.match(str(value or "")))


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def default_stats() -> Dict[str, int]:
    return {key: DEFAULT_ABILITY_SCORE for key in ABILITY_KEYS}


@dataclass
class Character:
    id: str
    owner_id: str
    name: str = ""
    level: int = 1
    role: str = ""
    archetype: str = ""
    stats: Dict[str, int] = field(default_factory=default_stats)
    skills: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Character":
        stats = default_stats()
        stats.update({key: int(value) for key, value in (raw.get("stats") or {}).items() if key in stats})
        return Character(
            id=str(raw.get("id") or ""),
            owner_id=str(raw.get("owner_id") or ""),
            name=str(raw.get("name") or ""),
            level=int(raw["level"]) if raw.get("level") is not None else 1,
            role=str(raw.get("role") or ""),
            archetype=str(raw.get("archetype") or ""),
            stats=stats,
            skills=[str(skill) for skill in raw.get("skills") or []],
            created_at=str(raw.get("created_at") or ""),
            updated_at=str(raw.get("updated_at") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "level": self.level,
            "role": self.role,
            "archetype": self.archetype,
            "stats": {key: int(self.stats.get(key, DEFAULT_ABILITY_SCORE)) for key in ABILITY_KEYS},
            "skills": list(self.skills),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def editable_fields(self) -> Dict[str, Any]:
        data = self.to_dict()
        return {key: data[key] for key in EDITABLE_FIELDS}

    def with_changes(self, changes: Dict[str, Any]) -> "Character":
        """Return a copy with editable fields replaced; ``stats`` is merged per ability."""

        data = self.to_dict()
        for key in EDITABLE_FIELDS:
            if key not in changes:
                continue
            if key == "stats":
                merged = dict(data["stats"])
                merged.update(changes["stats"] or {})
                data["stats"] = merged
            else:
                data[key] = changes[key]
        return Character.from_dict(data)
