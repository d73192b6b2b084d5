"""HTML rendering for Primus character sheets."""

from __future__ import annotations

from html import escape
from pathlib import Path
from string import Template

from ..catalog import GameCatalog, get_default_catalog
from ..models import Character
from ..points import format_bonus
from ..rules_engine import CharacterSummary

_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "character_sheet.html"


def _build_ability_rows(summary: CharacterSummary) -> str:
    rows: list[str] = []
    for line in summary.abilities:
        bonus = format_bonus(line.bonus)
        rows.append(
            f"      <tr><td>{escape(line.name)} ({escape(line.abbreviation)})</td>"
            f"<td class='num'>{line.base}</td><td class='num'>{escape(bonus)}</td>"
            f"<td class='num'>{line.score}</td><td class='num'>{escape(line.modifier_label)}</td></tr>"
        )
    return "\n".join(rows)


def _build_tier_blocks(summary: CharacterSummary, catalog: GameCatalog) -> str:
    blocks: list[str] = []
    for line in summary.tiers:
        parts = [
            "    <div class='tier'>",
            f"      <h3>Tier {line.tier} - {escape(line.label)} ({len(line.selected)} / {line.cap})</h3>",
        ]
        if line.cap == 0 and not line.selected:
            parts.append(f"      <div class='locked'>Unlocks at level {line.unlock_level}</div>")
        for skill_id in line.selected:
            skill = catalog.skill(skill_id)
            name = skill.name if skill else skill_id
            description = skill.description if skill else ""
            parts.append(
                f"      <div class='skill'><strong>{escape(name)}</strong> <small>{escape(description)}</small></div>"
            )
        parts.append("    </div>")
        blocks.append("\n".join(parts))
    return "\n".join(blocks)


def _build_violations_block(summary: CharacterSummary) -> str:
    if summary.validation.valid:
        return ""
    items = "".join(f"<li>{escape(violation.message)}</li>" for violation in summary.validation.violations)
    return f"<div class='violations'><strong>This character breaks the creation rules:</strong><ul>{items}</ul></div>"


def _points_line(summary: CharacterSummary) -> str:
    if summary.points_spent is None:
        return f"- / {summary.points_budget}"
    return f"{summary.points_spent} / {summary.points_budget}"


def render_character_sheet_html(character: Character, summary: CharacterSummary, catalog: GameCatalog | None = None) -> str:
    catalog = catalog or get_default_catalog()
    template = Template(_TEMPLATE_PATH.read_text(encoding="utf-8"))

    context = {
        "name": escape(character.name),
        "level": escape(str(character.level)),
        "role_name": escape(summary.role_name),
        "archetype_name": escape(summary.archetype_name),
        "points_line": escape(_points_line(summary)),
        "ability_rows": _build_ability_rows(summary),
        "tier_blocks": _build_tier_blocks(summary, catalog),
        "violations_block": _build_violations_block(summary),
    }
    return template.safe_substitute(context)
