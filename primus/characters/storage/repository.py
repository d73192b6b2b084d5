"""Owner-scoped character persistence with swappable backends."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, List, Optional

from db.db import get_connection, initialize_db
from primus.helpers.logging_helper import log_info, log_methods, log_module_import

from ..models import Character, new_character_id, utc_timestamp

log_module_import(__name__)

SORT_FIELDS = ("created_at", "updated_at", "name", "level")


class CharacterStore(ABC):
    """Create/read/update/delete of character records, always scoped to one owner."""

    backend_name = "abstract"

    @abstractmethod
    def _put(self, character: Character) -> None:
        ...

    @abstractmethod
    def _get(self, owner_id: str, character_id: str) -> Optional[Character]:
        ...

    @abstractmethod
    def _remove(self, owner_id: str, character_id: str) -> bool:
        ...

    @abstractmethod
    def _load_owner(self, owner_id: str) -> List[Character]:
        ...

    def create(self, owner_id: str, data: Dict[str, Any]) -> Character:
        timestamp = utc_timestamp()
        character = Character(id=new_character_id(), owner_id=owner_id, created_at=timestamp, updated_at=timestamp)
        character = character.with_changes(data)
        self._put(character)
        log_info(f"Created character {character.id} for owner {owner_id} ({self.backend_name})")
        return character

    def list_by_owner(
        self,
        owner_id: str,
        role: Optional[str] = None,
        level: Optional[int] = None,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> List[Character]:
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort characters by '{sort_by}'.")
        characters = self._load_owner(owner_id)
        if role:
            characters = [character for character in characters if character.role == role]
        if level is not None:
            characters = [character for character in characters if character.level == level]

        def sort_key(character: Character):
            value = getattr(character, sort_by)
            return value.casefold() if sort_by == "name" else value

        return sorted(characters, key=sort_key, reverse=(order != "asc"))

    def get_by_id(self, owner_id: str, character_id: str) -> Optional[Character]:
        return self._get(owner_id, character_id)

    def update(self, owner_id: str, character_id: str, changes: Dict[str, Any]) -> Optional[Character]:
        existing = self._get(owner_id, character_id)
        if existing is None:
            return None
        updated = existing.with_changes(changes)
        updated.updated_at = utc_timestamp()
        self._put(updated)
        log_info(f"Updated character {character_id} for owner {owner_id} ({self.backend_name})")
        return updated

    def delete(self, owner_id: str, character_id: str) -> bool:
        removed = self._remove(owner_id, character_id)
        if removed:
            log_info(f"Deleted character {character_id} for owner {owner_id} ({self.backend_name})")
        return removed

    def stats_for_owner(self, owner_id: str) -> Dict[str, Any]:
        characters = self._load_owner(owner_id)
        total = len(characters)
        average = round(sum(character.level for character in characters) / total, 1) if total else 0
        return {
            "total_characters": total,
            "average_level": average,
            "role_breakdown": dict(Counter(character.role for character in characters)),
        }


@log_methods
class SqliteCharacterRepository(CharacterStore):
    TABLE_NAME = "characters"
    backend_name = "sqlite"

    def __init__(self):
        initialize_db()

    def _put(self, character: Character) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO {self.TABLE_NAME} (id, owner_id, name, level, role, payload_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    level=excluded.level,
                    role=excluded.role,
                    payload_json=excluded.payload_json,
                    updated_at=excluded.updated_at
                WHERE {self.TABLE_NAME}.owner_id = excluded.owner_id
                """,
                (
                    character.id,
                    character.owner_id,
                    character.name,
                    character.level,
                    character.role,
                    json.dumps(character.to_dict(), ensure_ascii=False),
                    character.created_at,
                    character.updated_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def _get(self, owner_id: str, character_id: str) -> Optional[Character]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT payload_json FROM {self.TABLE_NAME} WHERE owner_id = ? AND id = ?",
                (owner_id, character_id),
            )
            row = cursor.fetchone()
            if not row:
                return None
            return Character.from_dict(json.loads(row[0]))
        finally:
            conn.close()

    def _remove(self, owner_id: str, character_id: str) -> bool:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"DELETE FROM {self.TABLE_NAME} WHERE owner_id = ? AND id = ?",
                (owner_id, character_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def _load_owner(self, owner_id: str) -> List[Character]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT payload_json FROM {self.TABLE_NAME} WHERE owner_id = ? ORDER BY created_at DESC",
                (owner_id,),
            )
            return [Character.from_dict(json.loads(row[0])) for row in cursor.fetchall()]
        finally:
            conn.close()


@log_methods
class InMemoryCharacterRepository(CharacterStore):
    """Key-value store keyed by owner then character id; lives as long as the process."""

    backend_name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._records: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _put(self, character: Character) -> None:
        with self._lock:
            self._records.setdefault(character.owner_id, {})[character.id] = character.to_dict()

    def _get(self, owner_id: str, character_id: str) -> Optional[Character]:
        with self._lock:
            raw = self._records.get(owner_id, {}).get(character_id)
        return Character.from_dict(raw) if raw is not None else None

    def _remove(self, owner_id: str, character_id: str) -> bool:
        with self._lock:
            return self._records.get(owner_id, {}).pop(character_id, None) is not None

    def _load_owner(self, owner_id: str) -> List[Character]:
        with self._lock:
            raws = list(self._records.get(owner_id, {}).values())
        return [Character.from_dict(raw) for raw in raws]


@log_methods
class JsonFileCharacterRepository(CharacterStore):
    """One JSON document per owner in a local directory."""

    backend_name = "json"

    def __init__(self, directory: str):
        self._directory = os.path.abspath(directory)
        self._lock = threading.RLock()
        os.makedirs(self._directory, exist_ok=True)

    @property
    def directory(self) -> str:
        return self._directory

    def _owner_path(self, owner_id: str) -> str:
        digest = hashlib.sha256(owner_id.encode("utf-8")).hexdigest()
        return os.path.join(self._directory, f"{digest}.json")

    def _read(self, owner_id: str) -> Dict[str, Dict[str, Any]]:
        path = self._owner_path(owner_id)
        if not os.path.exists(path):
            return {}
        with open(path, "r", encoding="utf-8") as handle:
            document = json.load(handle)
        return dict(document.get("characters") or {})

    def _write(self, owner_id: str, records: Dict[str, Dict[str, Any]]) -> None:
        path = self._owner_path(owner_id)
        fd, tmp_path = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"owner_id": owner_id, "characters": records}, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _put(self, character: Character) -> None:
        with self._lock:
            records = self._read(character.owner_id)
            records[character.id] = character.to_dict()
            self._write(character.owner_id, records)

    def _get(self, owner_id: str, character_id: str) -> Optional[Character]:
        with self._lock:
            raw = self._read(owner_id).get(character_id)
        return Character.from_dict(raw) if raw is not None else None

    def _remove(self, owner_id: str, character_id: str) -> bool:
        with self._lock:
            records = self._read(owner_id)
            if records.pop(character_id, None) is None:
                return False
            self._write(owner_id, records)
            return True

    def _load_owner(self, owner_id: str) -> List[Character]:
        with self._lock:
            raws = list(self._read(owner_id).values())
        return [Character.from_dict(raw) for raw in raws]
