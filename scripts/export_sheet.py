"""Write a stored character's sheet to disk as PDF (or HTML when PyMuPDF is missing)."""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from primus.characters.catalog import get_default_catalog  # noqa: E402
from primus.characters.exporters import BACKENDS, export_character_sheet  # noqa: E402
from primus.characters.points import PointBuyRules  # noqa: E402
from primus.characters.rules_engine import describe_character, max_level_from_config  # noqa: E402
from primus.characters.storage import create_character_store  # noqa: E402
from primus.helpers.logging_helper import initialize_logging  # noqa: E402


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("owner_id")
    parser.add_argument("character_id")
    parser.add_argument("-o", "--output", help="target file; the extension follows the backend used")
    parser.add_argument("--backend", choices=BACKENDS, default="fitz")
    parser.add_argument("--storage", help="storage backend overriding [Storage] backend")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    initialize_logging()

    store = create_character_store(args.storage)
    character = store.get_by_id(args.owner_id, args.character_id)
    if character is None:
        print(f"Character {args.character_id} not found for owner {args.owner_id}", file=sys.stderr)
        return 1

    catalog = get_default_catalog()
    summary = describe_character(character, catalog, PointBuyRules.from_config(), max_level_from_config())
    output = args.output or f"{character.name or character.id}-character-sheet"
    path, backend = export_character_sheet(character, summary, output, backend=args.backend, catalog=catalog)
    print(f"Wrote {path} ({backend})")
    if not summary.validation.valid:
        print("Warning: this character breaks the creation rules.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
