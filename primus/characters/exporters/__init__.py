"""Export facade for Primus character sheets."""

from __future__ import annotations

from pathlib import Path

from primus.helpers.logging_helper import log_warning

from ..catalog import GameCatalog
from ..models import Character
from ..rules_engine import CharacterSummary
from .html_renderer import render_character_sheet_html

BACKENDS = ("fitz", "html")


def _target_for_backend(output_path: str, backend: str) -> Path:
    base = Path(output_path)
    if backend == "fitz":
        return base.with_suffix(".pdf")
    if backend == "html":
        return base.with_suffix(".html")
    return base


def _export_with_fitz(character: Character, summary: CharacterSummary, output_path: str, catalog) -> str:
    from .pdf_exporter import export_character_pdf

    return export_character_pdf(character, summary, str(_target_for_backend(output_path, "fitz")), catalog)


def _export_with_html(character: Character, summary: CharacterSummary, output_path: str, catalog) -> str:
    html = render_character_sheet_html(character, summary, catalog)
    target = _target_for_backend(output_path, "html")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(html, encoding="utf-8")
    return str(target)


def export_character_sheet(
    character: Character,
    summary: CharacterSummary,
    output_path: str,
    backend: str = "fitz",
    catalog: GameCatalog | None = None,
) -> tuple[str, str]:
    """Write the sheet with ``backend``, falling back to the others; return (path, backend used)."""

    selected = backend if backend in BACKENDS else "fitz"
    ordered = [selected] + [candidate for candidate in BACKENDS if candidate != selected]

    last_error = None
    for candidate in ordered:
        try:
            if candidate == "fitz":
                return _export_with_fitz(character, summary, output_path, catalog), candidate
            if candidate == "html":
                return _export_with_html(character, summary, output_path, catalog), candidate
        except (ImportError, OSError, RuntimeError, ValueError) as exc:
            log_warning(f"Export backend '{candidate}' failed: {exc}")
            last_error = exc

    raise RuntimeError(f"All export backends failed: {last_error}")


__all__ = ["BACKENDS", "export_character_sheet", "render_character_sheet_html"]
