import pytest

from primus.characters.catalog import load_catalog
from primus.characters.progression import (
    available_skills,
    is_selectable,
    selected_for_tier,
    tier_cap,
    tier_caps,
    tier_unlock_level,
    toggle_skill,
    validate_selection,
)
from primus.characters.violations import (
    DUPLICATE_SKILL,
    ROLE_INELIGIBLE,
    TIER_CAP_EXCEEDED,
    UNKNOWN_SKILL,
    CharacterRulesError,
)


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.mark.parametrize(
    "level, expected",
    [
        (1, {1: 1, 2: 0, 3: 0}),
        (2, {1: 2, 2: 0, 3: 0}),
        (3, {1: 3, 2: 1, 3: 0}),
        (4, {1: 3, 2: 2, 3: 0}),
        (5, {1: 3, 2: 2, 3: 0}),
        (6, {1: 3, 2: 2, 3: 1}),
        (50, {1: 3, 2: 2, 3: 1}),
    ],
)
def test_tier_caps_table(level, expected):
    assert tier_caps(level) == expected


def test_tier_cap_never_negative():
    assert tier_cap(0, 1) == 0
    assert tier_cap(-4, 2) == 0


def test_tier_cap_rejects_bad_input():
    with pytest.raises(CharacterRulesError):
        tier_cap(3, 4)
    with pytest.raises(CharacterRulesError):
        tier_cap("3", 1)


def test_unlock_levels():
    assert [tier_unlock_level(tier) for tier in (1, 2, 3)] == [1, 3, 6]


def test_available_skills_filters_by_role(catalog):
    warrior_tier1 = {skill.id for skill in available_skills(1, "warrior", catalog)}
    assert warrior_tier1 == {"combat-mastery", "stealth"}
    assert {skill.id for skill in available_skills(3, "mystic", catalog)} == {"divine-avatar"}


def test_selected_for_tier_ignores_other_tiers_and_duplicates(catalog):
    selection = ["combat-mastery", "shield-wall", "combat-mastery", "nonexistent"]
    assert selected_for_tier(selection, 1, catalog) == ["combat-mastery"]
    assert selected_for_tier(selection, 2, catalog) == ["shield-wall"]


def test_is_selectable_respects_cap(catalog):
    assert is_selectable("combat-mastery", [], 1, "warrior", catalog)
    assert not is_selectable("stealth", ["combat-mastery"], 1, "warrior", catalog)
    assert is_selectable("stealth", ["combat-mastery"], 2, "warrior", catalog)
    assert not is_selectable("shield-wall", [], 2, "warrior", catalog)
    assert is_selectable("shield-wall", [], 3, "warrior", catalog)


def test_is_selectable_rejects_unknown_and_other_roles(catalog):
    assert not is_selectable("fireball", [], 10, "warrior", catalog)
    assert not is_selectable("archery", [], 10, "warrior", catalog)


def test_selected_skill_is_always_selectable_for_removal(catalog):
    # Level dropped after picking a tier 2 skill: removal must still be possible.
    selection = ["shield-wall"]
    assert is_selectable("shield-wall", selection, 1, "warrior", catalog)
    assert toggle_skill("shield-wall", selection, 1, "warrior", catalog) == []


def test_toggle_skill_returns_new_list(catalog):
    selection = ["combat-mastery"]
    added = toggle_skill("stealth", selection, 2, "warrior", catalog)
    assert added == ["combat-mastery", "stealth"]
    assert selection == ["combat-mastery"]

    unchanged = toggle_skill("stealth", selection, 1, "warrior", catalog)
    assert unchanged == ["combat-mastery"]


def test_validate_selection_accepts_legal_picks(catalog):
    result = validate_selection(["combat-mastery", "stealth", "shield-wall"], 3, "warrior", catalog)
    assert result.valid


def test_validate_selection_reports_locked_tier(catalog):
    result = validate_selection(["weapon-mastery"], 5, "warrior", catalog)
    assert result.codes() == [TIER_CAP_EXCEEDED]
    violation = result.violations[0]
    assert "unlock at level 6" in violation.message
    assert violation.details == {"tier": 3, "selected": 1, "cap": 0, "level": 5}


def test_validate_selection_collects_every_violation(catalog):
    selection = ["combat-mastery", "combat-mastery", "archery", "stealth", "fireball", "shield-wall"]
    result = validate_selection(selection, 1, "warrior", catalog)

    codes = result.codes()
    assert DUPLICATE_SKILL in codes
    assert UNKNOWN_SKILL in codes
    assert ROLE_INELIGIBLE in codes
    tier_violations = result.by_code(TIER_CAP_EXCEEDED)
    assert {violation.details["tier"] for violation in tier_violations} == {1, 2}
    tier1 = next(v for v in tier_violations if v.details["tier"] == 1)
    assert tier1.details["selected"] == 3
    assert tier1.details["cap"] == 1


def test_validate_selection_rejects_string_selection(catalog):
    with pytest.raises(CharacterRulesError):
        validate_selection("combat-mastery", 1, "warrior", catalog)
