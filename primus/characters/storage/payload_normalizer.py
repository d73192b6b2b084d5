"""Helpers to normalize incoming character payloads before validation and storage."""

from __future__ import annotations

from typing import Any

from ..constants import ABILITY_ABBREVIATIONS, ABILITY_KEYS, DEFAULT_ABILITY_SCORE
from ..violations import CharacterRulesError

_ABILITY_ALIASES = {key: key for key in ABILITY_KEYS}
_ABILITY_ALIASES.update({abbr.lower(): key for key, abbr in ABILITY_ABBREVIATIONS.items()})


def _coerce_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise CharacterRulesError(f"{label} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise CharacterRulesError(f"{label} must be an integer.") from exc
    raise CharacterRulesError(f"{label} must be an integer.")


def _read_stats(payload: dict) -> dict | None:
    raw = payload.get("stats")
    if raw is None:
        # Older clients sent abbreviated scores under `abilities`.
        raw = payload.get("abilities")
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise CharacterRulesError("stats must be an object mapping ability names to scores.")

    stats: dict[str, int] = {}
    for raw_key, raw_value in raw.items():
        key = _ABILITY_ALIASES.get(str(raw_key).strip().lower())
        if key is None:
            raise CharacterRulesError(f"Unknown ability '{raw_key}'.")
        if key in stats:
            raise CharacterRulesError(f"Ability '{key}' is given more than once.")
        stats[key] = _coerce_int(raw_value, f"stats.{key}")
    return stats


def _read_skills(payload: dict) -> list[str]:
    raw = payload.get("skills")
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise CharacterRulesError("skills must be a list of skill ids.")
    skills = []
    for item in raw:
        if not isinstance(item, str):
            raise CharacterRulesError("skills must be a list of skill ids.")
        skills.append(item.strip())
    return skills


def _read_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CharacterRulesError(f"{key} must be a string.")
    return value.strip()


def normalize_character_payload(payload: Any, *, partial: bool = False) -> dict:
    """Return the editable character fields from a client payload.

    With ``partial`` only the fields present in the payload are returned, so
    an update can be merged onto the stored record. Otherwise every editable
    field is filled, missing ability scores defaulting to 10.
    """

    if not isinstance(payload, dict):
        raise CharacterRulesError("Character payload must be a JSON object.")

    normalized: dict[str, Any] = {}
    for key in ("name", "role", "archetype"):
        if key in payload or not partial:
            normalized[key] = _read_text(payload, key)

    if "level" in payload and payload.get("level") is not None:
        normalized["level"] = _coerce_int(payload["level"], "level")
    elif not partial:
        normalized["level"] = 1

    stats = _read_stats(payload)
    if stats is not None:
        normalized["stats"] = stats
    if not partial:
        filled = {key: DEFAULT_ABILITY_SCORE for key in ABILITY_KEYS}
        filled.update(stats or {})
        normalized["stats"] = filled

    if "skills" in payload or not partial:
        normalized["skills"] = _read_skills(payload)

    return normalized
