import sqlite3
from contextlib import closing

import pytest

from db import db as db_module
from primus.characters.storage import (
    InMemoryCharacterRepository,
    JsonFileCharacterRepository,
    SqliteCharacterRepository,
    create_character_store,
)
from primus.helpers.config_helper import ConfigHelper


def _data(name, level=1, role="warrior", **extra):
    data = {
        "name": name,
        "level": level,
        "role": role,
        "archetype": "guardian" if role == "warrior" else "ranger",
        "stats": {"strength": 12},
        "skills": [],
    }
    data.update(extra)
    return data


@pytest.fixture
def campaign_db(monkeypatch, tmp_path):
    db_path = tmp_path / "primus.db"

    original_get = ConfigHelper.get

    def fake_get(cls, section, key, fallback=None):
        if (section, key) == ("Database", "path"):
            return str(db_path)
        return original_get(section, key, fallback=fallback)

    monkeypatch.setattr(ConfigHelper, "get", classmethod(fake_get))
    return db_path


@pytest.fixture(params=["sqlite", "memory", "json"])
def store(request, campaign_db, tmp_path):
    if request.param == "sqlite":
        return SqliteCharacterRepository()
    if request.param == "memory":
        return InMemoryCharacterRepository()
    return JsonFileCharacterRepository(str(tmp_path / "characters"))


def test_initialize_db_creates_characters_table(campaign_db):
    db_module.initialize_db()
    with closing(sqlite3.connect(campaign_db)) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "characters" in tables


def test_create_assigns_id_and_timestamps(store):
    character = store.create("owner-a", _data("Brenna"))

    assert len(character.id) == 32
    assert character.owner_id == "owner-a"
    assert character.created_at
    assert character.created_at == character.updated_at
    assert character.stats["strength"] == 12
    assert character.stats["wisdom"] == 10

    fetched = store.get_by_id("owner-a", character.id)
    assert fetched == character


def test_records_are_scoped_to_owner(store):
    character = store.create("owner-a", _data("Brenna"))

    assert store.get_by_id("owner-b", character.id) is None
    assert store.list_by_owner("owner-b") == []
    assert store.update("owner-b", character.id, {"name": "Stolen"}) is None
    assert store.delete("owner-b", character.id) is False
    assert store.get_by_id("owner-a", character.id).name == "Brenna"


def test_update_merges_changes_and_bumps_timestamp(store):
    character = store.create("owner-a", _data("Brenna"))

    updated = store.update("owner-a", character.id, {"level": 4, "stats": {"wisdom": 13}})

    assert updated.level == 4
    assert updated.stats["wisdom"] == 13
    assert updated.stats["strength"] == 12
    assert updated.created_at == character.created_at
    assert updated.updated_at >= character.updated_at
    assert store.get_by_id("owner-a", character.id).level == 4


def test_delete_removes_record(store):
    character = store.create("owner-a", _data("Brenna"))

    assert store.delete("owner-a", character.id) is True
    assert store.get_by_id("owner-a", character.id) is None
    assert store.delete("owner-a", character.id) is False


def test_list_filters_and_sorts(store):
    store.create("owner-a", _data("charlie", level=3))
    store.create("owner-a", _data("Alpha", level=1, role="scout"))
    store.create("owner-a", _data("bravo", level=3))

    by_name = store.list_by_owner("owner-a", sort_by="name", order="asc")
    assert [character.name for character in by_name] == ["Alpha", "bravo", "charlie"]

    warriors = store.list_by_owner("owner-a", role="warrior", sort_by="name", order="desc")
    assert [character.name for character in warriors] == ["charlie", "bravo"]

    level_three = store.list_by_owner("owner-a", level=3)
    assert {character.name for character in level_three} == {"charlie", "bravo"}

    with pytest.raises(ValueError):
        store.list_by_owner("owner-a", sort_by="stats")


def test_stats_for_owner(store):
    store.create("owner-a", _data("One", level=1))
    store.create("owner-a", _data("Two", level=2))
    store.create("owner-a", _data("Three", level=2, role="scout"))
    store.create("owner-b", _data("Other", level=20))

    stats = store.stats_for_owner("owner-a")
    assert stats["total_characters"] == 3
    assert stats["average_level"] == 1.7
    assert stats["role_breakdown"] == {"warrior": 2, "scout": 1}

    assert store.stats_for_owner("owner-c") == {"total_characters": 0, "average_level": 0, "role_breakdown": {}}


def test_json_store_survives_reopen(tmp_path):
    directory = tmp_path / "characters"
    character = JsonFileCharacterRepository(str(directory)).create("owner-a", _data("Brenna"))

    reopened = JsonFileCharacterRepository(str(directory))
    assert reopened.get_by_id("owner-a", character.id).name == "Brenna"
    assert len(list(directory.glob("*.json"))) == 1


def test_create_character_store_reads_backend(monkeypatch, tmp_path):
    values = {("Storage", "backend"): "json", ("Storage", "directory"): str(tmp_path / "store")}

    def fake_get(cls, section, key, fallback=None):
        return values.get((section, key), fallback)

    monkeypatch.setattr(ConfigHelper, "get", classmethod(fake_get))

    store = create_character_store()
    assert isinstance(store, JsonFileCharacterRepository)
    assert store.directory == str(tmp_path / "store")
    assert isinstance(create_character_store("memory"), InMemoryCharacterRepository)
    with pytest.raises(ValueError):
        create_character_store("postgres")
