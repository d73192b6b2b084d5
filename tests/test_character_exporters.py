import pytest

from primus.characters import exporters
from primus.characters.catalog import load_catalog
from primus.characters.exporters import BACKENDS, export_character_sheet, render_character_sheet_html
from primus.characters.models import Character
from primus.characters.points import PointBuyRules
from primus.characters.rules_engine import describe_character


@pytest.fixture
def catalog():
    return load_catalog()


def _character(**overrides):
    raw = {
        "id": "f" * 32,
        "owner_id": "owner-a",
        "name": "Mira <Stormcaller>",
        "level": 3,
        "role": "mystic",
        "archetype": "cleric",
        "stats": {
            "strength": 8,
            "dexterity": 10,
            "constitution": 12,
            "intelligence": 10,
            "wisdom": 15,
            "charisma": 14,
        },
        "skills": ["healing", "ritual-magic"],
    }
    raw.update(overrides)
    return Character.from_dict(raw)


def _summary(character, catalog):
    return describe_character(character, catalog, PointBuyRules(), 50)


def test_render_character_sheet_html_contains_core_fields(catalog):
    character = _character()
    html = render_character_sheet_html(character, _summary(character, catalog), catalog)

    assert "Mira &lt;Stormcaller&gt;" in html
    assert "<Stormcaller>" not in html
    assert "Level 3 Cleric Mystic" in html
    assert "Points used: 24 / 27" in html
    assert "Wisdom (WIS)" in html
    assert "<td class='num'>15</td><td class='num'>+2</td><td class='num'>17</td><td class='num'>+3</td>" in html
    assert "Tier 1 - Basic (1 / 3)" in html
    assert "Tier 2 - Advanced (1 / 1)" in html
    assert "Unlocks at level 6" in html
    assert "Ritual Magic" in html
    assert "breaks the creation rules" not in html
    assert "$" not in html


def test_render_character_sheet_html_lists_violations(catalog):
    character = _character(level=1)
    html = render_character_sheet_html(character, _summary(character, catalog), catalog)

    assert "This character breaks the creation rules:" in html
    assert "skills unlock at level 3" in html


def test_render_character_sheet_html_without_cost(catalog):
    character = _character(stats={"wisdom": 18})
    html = render_character_sheet_html(character, _summary(character, catalog), catalog)
    assert "Points used: - / 27" in html


def test_export_character_sheet_html_writes_file(tmp_path, catalog):
    character = _character()
    path, backend = export_character_sheet(
        character, _summary(character, catalog), str(tmp_path / "sheet.pdf"), backend="html", catalog=catalog
    )

    assert backend == "html"
    assert path.endswith(".html")
    assert "Mira" in (tmp_path / "sheet.html").read_text(encoding="utf-8")


def test_export_character_sheet_falls_back_to_html(tmp_path, monkeypatch, catalog):
    def broken(*_args, **_kwargs):
        raise RuntimeError("fitz unavailable")

    monkeypatch.setattr(exporters, "_export_with_fitz", broken)
    character = _character()

    path, backend = export_character_sheet(
        character, _summary(character, catalog), str(tmp_path / "sheet"), backend="fitz", catalog=catalog
    )

    assert backend == "html"
    assert (tmp_path / "sheet.html").exists()
    assert "fitz" in BACKENDS


def test_export_character_sheet_raises_when_every_backend_fails(tmp_path, monkeypatch, catalog):
    def broken(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(exporters, "_export_with_fitz", broken)
    monkeypatch.setattr(exporters, "_export_with_html", broken)
    character = _character()

    with pytest.raises(RuntimeError, match="All export backends failed"):
        export_character_sheet(character, _summary(character, catalog), str(tmp_path / "sheet"), catalog=catalog)


def test_export_character_pdf_writes_document(tmp_path, catalog):
    fitz = pytest.importorskip("fitz")
    from primus.characters.exporters.pdf_exporter import export_character_pdf

    character = _character(level=1)
    output = tmp_path / "out" / "sheet.pdf"
    path = export_character_pdf(character, _summary(character, catalog), str(output), catalog)

    assert path == str(output)
    with fitz.open(path) as doc:
        text = "".join(page.get_text() for page in doc)
    assert "Mira <Stormcaller>" in text
    assert "Points used: 24 / 27" in text
    assert "breaks the creation rules" in text


def test_export_character_pdf_rejects_empty_path(catalog):
    pytest.importorskip("fitz")
    from primus.characters.exporters.pdf_exporter import export_character_pdf

    character = _character()
    with pytest.raises(ValueError):
        export_character_pdf(character, _summary(character, catalog), "", catalog)


def _penalty_catalog():
    from primus.characters.catalog import build_catalog

    return build_catalog(
        {
            "roles": [{"id": "brute", "name": "Brute"}],
            "archetypes": [
                {"id": "oaf", "name": "Oaf", "role_id": "brute", "bonuses": {"strength": 2, "intelligence": -1}}
            ],
            "skills": [],
        }
    )


def test_render_character_sheet_html_signs_negative_bonus():
    catalog = _penalty_catalog()
    character = _character(role="brute", archetype="oaf", skills=[])
    html = render_character_sheet_html(character, _summary(character, catalog), catalog)

    assert "<td class='num'>10</td><td class='num'>-1</td><td class='num'>9</td><td class='num'>-1</td>" in html
    assert "+-1" not in html


def test_export_character_pdf_signs_negative_bonus(tmp_path):
    fitz = pytest.importorskip("fitz")
    from primus.characters.exporters.pdf_exporter import export_character_pdf

    catalog = _penalty_catalog()
    character = _character(role="brute", archetype="oaf", skills=[])
    path = export_character_pdf(character, _summary(character, catalog), str(tmp_path / "oaf.pdf"), catalog)

    with fitz.open(path) as doc:
        text = "".join(page.get_text() for page in doc)
    assert "+2" in text
    assert "+-1" not in text
