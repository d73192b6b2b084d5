"""Character persistence backends."""

from __future__ import annotations

import os

from primus.helpers.config_helper import ConfigHelper

from .payload_normalizer import normalize_character_payload
from .repository import (
    CharacterStore,
    InMemoryCharacterRepository,
    JsonFileCharacterRepository,
    SqliteCharacterRepository,
)

BACKENDS = ("sqlite", "memory", "json")


def create_character_store(backend: str | None = None) -> CharacterStore:
    """Build the store named by ``backend`` or by ``[Storage] backend``."""

    selected = (backend or ConfigHelper.get("Storage", "backend", fallback="sqlite") or "sqlite").strip().lower()
    if selected == "sqlite":
        return SqliteCharacterRepository()
    if selected == "memory":
        return InMemoryCharacterRepository()
    if selected == "json":
        directory = ConfigHelper.get("Storage", "directory", fallback="") or os.path.join(
            ConfigHelper.get_data_dir(), "characters"
        )
        return JsonFileCharacterRepository(directory)
    raise ValueError(f"Unknown storage backend '{selected}'. Expected one of: {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "CharacterStore",
    "InMemoryCharacterRepository",
    "JsonFileCharacterRepository",
    "SqliteCharacterRepository",
    "create_character_store",
    "normalize_character_payload",
]
