import json

import pytest

from primus.characters import catalog as catalog_module
from primus.characters.catalog import build_catalog, get_default_catalog, load_catalog
from primus.characters.violations import CharacterRulesError
from primus.helpers.config_helper import ConfigHelper


def test_builtin_catalog_contents():
    catalog = load_catalog()

    assert set(catalog.roles) == {"warrior", "scout", "scholar", "mystic"}
    assert len(catalog.archetypes) == 8
    assert len(catalog.skills) == 16
    assert {archetype.id for archetype in catalog.archetypes_for_role("mystic")} == {"cleric", "druid"}
    assert [len(catalog.skills_for_tier(tier)) for tier in (1, 2, 3)] == [6, 6, 4]


def test_catalog_lookups_are_read_only():
    catalog = load_catalog()
    assert catalog.skill("stealth").allows_role("warrior")
    assert not catalog.skill("stealth").allows_role("mystic")
    assert catalog.role("unknown") is None
    with pytest.raises(TypeError):
        catalog.roles["bard"] = None


def test_catalog_to_dict_is_json_serializable():
    data = json.loads(json.dumps(load_catalog().to_dict()))
    guardian = next(item for item in data["archetypes"] if item["id"] == "guardian")
    assert guardian["bonuses"] == {"constitution": 2, "strength": 1}
    assert any(skill["roles"] == ["scout", "warrior"] for skill in data["skills"])


def test_build_catalog_accepts_camel_case_and_open_skills():
    catalog = build_catalog(
        {
            "roles": [{"id": "bard", "name": "Bard", "primaryStats": ["charisma"]}],
            "archetypes": [{"id": "skald", "name": "Skald", "roleId": "bard", "bonuses": {"charisma": 2}}],
            "skills": [{"id": "song", "name": "Song", "tier": 1}],
        }
    )
    assert catalog.role("bard").primary_stats == ("charisma",)
    assert catalog.archetype("skald").role_id == "bard"
    assert catalog.skill("song").allows_role("anyone")


@pytest.mark.parametrize(
    "raw",
    [
        {"roles": [], "archetypes": [{"id": "orphan", "role_id": "ghost"}], "skills": []},
        {"roles": [], "archetypes": [], "skills": [{"id": "odd", "tier": 4}]},
        {"roles": [], "archetypes": [], "skills": [{"name": "No id", "tier": 1}]},
        {"roles": [{"id": "r"}], "archetypes": [{"id": "a", "role_id": "r", "bonuses": {"luck": 1}}], "skills": []},
    ],
)
def test_build_catalog_rejects_inconsistent_tables(raw):
    with pytest.raises(CharacterRulesError):
        build_catalog(raw)


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "roles": [{"id": "bard", "name": "Bard"}],
                "archetypes": [],
                "skills": [{"id": "song", "name": "Song", "tier": 2, "roles": ["bard"]}],
            }
        ),
        encoding="utf-8",
    )
    catalog = load_catalog(path)
    assert list(catalog.roles) == ["bard"]
    assert catalog.skill("song").tier == 2


def test_default_catalog_uses_configured_path(monkeypatch, tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"roles": [{"id": "bard"}], "archetypes": [], "skills": []}), encoding="utf-8")

    original_get = ConfigHelper.get

    def fake_get(cls, section, key, fallback=None):
        if (section, key) == ("Catalog", "path"):
            return str(path)
        return original_get(section, key, fallback=fallback)

    monkeypatch.setattr(ConfigHelper, "get", classmethod(fake_get))
    monkeypatch.setattr(catalog_module, "_DEFAULT_CATALOG", None)

    catalog = get_default_catalog()
    assert list(catalog.roles) == ["bard"]
    assert get_default_catalog() is catalog
