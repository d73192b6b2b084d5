"""PDF export utilities for Primus character sheets."""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF

from ..catalog import GameCatalog, get_default_catalog
from ..models import Character
from ..points import format_bonus
from ..rules_engine import CharacterSummary

PAGE_WIDTH = 595
PAGE_HEIGHT = 842


def _write(page: fitz.Page, x: float, y: float, text: str, size: float = 10, bold: bool = False) -> None:
    font = "helv" if not bold else "hebo"
    page.insert_text((x, y), text, fontsize=size, fontname=font)


def _build_document(character: Character, summary: CharacterSummary, catalog: GameCatalog) -> fitz.Document:
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)

    _write(page, 40, 50, character.name or "Unnamed", 20, bold=True)
    _write(page, 40, 72, f"Level {character.level} {summary.archetype_name} {summary.role_name}", 12)

    points = "-" if summary.points_spent is None else str(summary.points_spent)
    _write(page, 40, 110, "Abilities", 14, bold=True)
    _write(page, 40, 128, f"Points used: {points} / {summary.points_budget}", 10)

    y = 150
    _write(page, 40, y, "Ability", 10, bold=True)
    _write(page, 200, y, "Base", 10, bold=True)
    _write(page, 250, y, "Bonus", 10, bold=True)
    _write(page, 305, y, "Score", 10, bold=True)
    _write(page, 360, y, "Mod", 10, bold=True)
    for line in summary.abilities:
        y += 18
        _write(page, 40, y, f"{line.name} ({line.abbreviation})", 10)
        _write(page, 200, y, str(line.base), 10)
        _write(page, 250, y, format_bonus(line.bonus), 10)
        _write(page, 305, y, str(line.score), 10)
        _write(page, 360, y, line.modifier_label, 10)

    y += 40
    _write(page, 40, y, "Skills", 14, bold=True)
    for tier_line in summary.tiers:
        y += 22
        _write(page, 40, y, f"Tier {tier_line.tier} - {tier_line.label} ({len(tier_line.selected)} / {tier_line.cap})", 11, bold=True)
        if tier_line.cap == 0 and not tier_line.selected:
            y += 16
            _write(page, 55, y, f"Unlocks at level {tier_line.unlock_level}", 9)
        for skill_id in tier_line.selected:
            skill = catalog.skill(skill_id)
            y += 16
            _write(page, 55, y, f"- {skill.name if skill else skill_id}", 10)
            if y > PAGE_HEIGHT - 60:
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                y = 50

    if not summary.validation.valid:
        y += 36
        _write(page, 40, y, "This character breaks the creation rules:", 11, bold=True)
        for violation in summary.validation.violations:
            y += 16
            if y > PAGE_HEIGHT - 40:
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                y = 50
            _write(page, 55, y, f"- {violation.message}", 9)
    return doc


def render_character_pdf_bytes(character: Character, summary: CharacterSummary, catalog: GameCatalog | None = None) -> bytes:
    doc = _build_document(character, summary, catalog or get_default_catalog())
    try:
        return doc.tobytes()
    finally:
        doc.close()


def export_character_pdf(
    character: Character,
    summary: CharacterSummary,
    output_path: str,
    catalog: GameCatalog | None = None,
) -> str:
    if not output_path:
        raise ValueError("Invalid PDF output path.")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    doc = _build_document(character, summary, catalog or get_default_catalog())
    try:
        doc.save(str(output))
    finally:
        doc.close()
    return str(output)
