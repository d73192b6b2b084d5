from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from werkzeug.utils import secure_filename

from primus.characters.catalog import GameCatalog
from primus.characters.exporters import render_character_sheet_html
from primus.characters.models import is_valid_character_id
from primus.characters.points import PointBuyRules
from primus.characters.rules_engine import describe_character, validate_character
from primus.characters.storage import CharacterStore, normalize_character_payload
from primus.characters.violations import CharacterRulesError, ValidationResult
from primus.helpers.logging_helper import log_exception, log_info, log_module_import
from primus.web.auth import AuthVerifier, extract_bearer_token

log_module_import(__name__)

SORT_PARAMS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "name": "name",
    "level": "level",
}


def _error(message: str, status: int, details=None):
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def _violations_response(result: ValidationResult):
    return _error("Validation failed", 400, [violation.to_dict() for violation in result.violations])


def register_character_api(
    app,
    store: CharacterStore,
    verifier: AuthVerifier,
    catalog: GameCatalog,
    rules: PointBuyRules,
    max_level: int,
):
    blueprint = Blueprint("character_api", __name__)

    def _require_identity():
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is None:
            return _error("Missing or invalid authorization header", 401)
        identity = verifier.verify(token)
        if identity is None:
            return _error("Invalid or expired token", 401)
        g.identity = identity
        return None

    def _validate(character):
        return validate_character(character, catalog, rules, max_level)

    @blueprint.route("/api/catalog", methods=["GET"])
    def api_catalog():
        data = catalog.to_dict()
        data["point_buy"] = {
            "budget": rules.budget,
            "floor": rules.floor,
            "ceiling": rules.ceiling,
            "cost_mode": rules.cost_mode,
        }
        return jsonify({"success": True, "data": data})

    @blueprint.route("/api/rules/validate", methods=["POST"])
    def api_validate_draft():
        payload = request.get_json(silent=True)
        try:
            draft = normalize_character_payload(payload)
            summary = describe_character(draft, catalog, rules, max_level)
        except CharacterRulesError as exc:
            return _error(str(exc), 400)
        return jsonify({"success": True, "data": summary.to_dict()})

    @blueprint.route("/api/characters", methods=["POST"])
    def api_create_character():
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        payload = request.get_json(silent=True)
        try:
            data = normalize_character_payload(payload)
            result = _validate(data)
        except CharacterRulesError as exc:
            return _error(str(exc), 400)
        if not result.valid:
            return _violations_response(result)
        try:
            character = store.create(g.identity.owner_id, data)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to create character: {exc}")
            return _error("Failed to create character", 500)
        return jsonify({"success": True, "data": character.to_dict()}), 201

    @blueprint.route("/api/characters", methods=["GET"])
    def api_list_characters():
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized

        role = request.args.get("role") or None
        level_raw = request.args.get("level")
        sort_param = request.args.get("sortBy", "createdAt")
        order = request.args.get("order", "desc")
        level = None
        if level_raw:
            try:
                level = int(level_raw)
            except ValueError:
                return _error("level must be an integer", 400)
        sort_by = SORT_PARAMS.get(sort_param)
        if sort_by is None:
            return _error(f"Cannot sort by '{sort_param}'", 400)
        if order not in ("asc", "desc"):
            return _error("order must be 'asc' or 'desc'", 400)

        try:
            characters = store.list_by_owner(g.identity.owner_id, role=role, level=level, sort_by=sort_by, order=order)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to list characters: {exc}")
            return _error("Failed to fetch characters", 500)
        return jsonify(
            {
                "success": True,
                "count": len(characters),
                "data": [character.to_dict() for character in characters],
            }
        )

    @blueprint.route("/api/characters/stats", methods=["GET"])
    def api_character_stats():
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        try:
            stats = store.stats_for_owner(g.identity.owner_id)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to compute character statistics: {exc}")
            return _error("Failed to fetch character statistics", 500)
        return jsonify({"success": True, "data": stats})

    def _load_owned(character_id: str):
        if not is_valid_character_id(character_id):
            return None, _error("Invalid character ID format", 400)
        character = store.get_by_id(g.identity.owner_id, character_id)
        if character is None:
            return None, _error("Character not found", 404)
        return character, None

    @blueprint.route("/api/characters/<character_id>", methods=["GET"])
    def api_get_character(character_id):
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        character, failure = _load_owned(character_id)
        if failure:
            return failure
        return jsonify({"success": True, "data": character.to_dict()})

    @blueprint.route("/api/characters/<character_id>", methods=["PUT"])
    def api_update_character(character_id):
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        existing, failure = _load_owned(character_id)
        if failure:
            return failure

        payload = request.get_json(silent=True)
        try:
            changes = normalize_character_payload(payload, partial=True)
            result = _validate(existing.with_changes(changes))
        except CharacterRulesError as exc:
            return _error(str(exc), 400)
        if not result.valid:
            return _violations_response(result)

        try:
            updated = store.update(g.identity.owner_id, character_id, changes)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to update character {character_id}: {exc}")
            return _error("Failed to update character", 500)
        if updated is None:
            return _error("Character not found", 404)
        return jsonify({"success": True, "data": updated.to_dict()})

    @blueprint.route("/api/characters/<character_id>", methods=["DELETE"])
    def api_delete_character(character_id):
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        character, failure = _load_owned(character_id)
        if failure:
            return failure
        try:
            deleted = store.delete(g.identity.owner_id, character_id)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to delete character {character_id}: {exc}")
            return _error("Failed to delete character", 500)
        if not deleted:
            return _error("Character not found", 404)
        return jsonify(
            {
                "success": True,
                "message": "Character deleted successfully",
                "data": {"id": character.id, "name": character.name},
            }
        )

    @blueprint.route("/api/characters/<character_id>/summary", methods=["GET"])
    def api_character_summary(character_id):
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        character, failure = _load_owned(character_id)
        if failure:
            return failure
        summary = describe_character(character, catalog, rules, max_level)
        return jsonify({"success": True, "data": summary.to_dict()})

    @blueprint.route("/api/characters/<character_id>/sheet", methods=["GET"])
    def api_character_sheet(character_id):
        unauthorized = _require_identity()
        if unauthorized:
            return unauthorized
        character, failure = _load_owned(character_id)
        if failure:
            return failure

        summary = describe_character(character, catalog, rules, max_level)
        output_format = (request.args.get("format") or "html").lower()
        if output_format == "html":
            html = render_character_sheet_html(character, summary, catalog)
            return Response(html, mimetype="text/html")
        if output_format != "pdf":
            return _error("format must be 'html' or 'pdf'", 400)

        try:
            from primus.characters.exporters.pdf_exporter import render_character_pdf_bytes
        except ImportError:
            return _error("PDF export is unavailable: PyMuPDF is not installed", 501)
        try:
            pdf = render_character_pdf_bytes(character, summary, catalog)
        except Exception as exc:  # noqa: BLE001
            log_exception(f"Unable to render PDF for {character_id}: {exc}")
            return _error("Failed to export character sheet", 500)
        log_info(f"Exported PDF sheet for character {character_id}")
        filename = secure_filename(f"{character.name or 'character'}-character-sheet.pdf") or "character-sheet.pdf"
        return Response(
            pdf,
            mimetype="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{filename}"'},
        )

    app.register_blueprint(blueprint)
