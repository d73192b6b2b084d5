from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from primus.characters.catalog import GameCatalog, get_default_catalog
from primus.characters.points import PointBuyRules
from primus.characters.rules_engine import max_level_from_config
from primus.characters.storage import CharacterStore, create_character_store
from primus.helpers.config_helper import ConfigHelper
from primus.helpers.logging_helper import log_debug, log_exception, log_info, log_module_import
from primus.web.api_blueprint import register_character_api
from primus.web.auth import AuthVerifier, StaticTokenVerifier

log_module_import(__name__)

API_VERSION = "1.0.0"


def create_app(
    store: Optional[CharacterStore] = None,
    verifier: Optional[AuthVerifier] = None,
    catalog: Optional[GameCatalog] = None,
    rules: Optional[PointBuyRules] = None,
    max_level: Optional[int] = None,
) -> Flask:
    """Build the API application; missing collaborators come from config."""

    store = store or create_character_store()
    verifier = verifier or StaticTokenVerifier.from_config()
    catalog = catalog or get_default_catalog()
    rules = rules or PointBuyRules.from_config()
    max_level = max_level if max_level is not None else max_level_from_config()

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024
    app.extensions["primus.store"] = store

    @app.before_request
    def _log_request():
        log_debug(f"{request.method} {request.full_path.rstrip('?')}", func_name="request")

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify(
            {
                "success": True,
                "message": "Primus Character Creator API is running",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "storage": store.backend_name,
            }
        )

    @app.route("/", methods=["GET"])
    def index():
        return jsonify(
            {
                "success": True,
                "message": "Welcome to Primus Character Creator API",
                "version": API_VERSION,
                "endpoints": {
                    "health": "GET /health",
                    "catalog": "GET /api/catalog",
                    "validate draft": "POST /api/rules/validate",
                    "characters": {
                        "Create character": "POST /api/characters",
                        "Get all characters": "GET /api/characters",
                        "Get character by ID": "GET /api/characters/:id",
                        "Update character": "PUT /api/characters/:id",
                        "Delete character": "DELETE /api/characters/:id",
                        "Get statistics": "GET /api/characters/stats",
                        "Get summary": "GET /api/characters/:id/summary",
                        "Print sheet": "GET /api/characters/:id/sheet?format=html|pdf",
                    },
                },
            }
        )

    register_character_api(app, store, verifier, catalog, rules, max_level)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        if exc.code == 404:
            message = f"Route {request.path} not found"
        else:
            message = exc.description or exc.name
        return jsonify({"success": False, "error": message}), exc.code

    @app.errorhandler(Exception)
    def _unhandled_error(exc: Exception):
        log_exception(f"Unhandled error on {request.method} {request.path}: {exc}")
        return jsonify({"success": False, "error": "Server Error"}), 500

    log_info(
        f"API ready (storage={store.backend_name}, budget={rules.budget}, "
        f"range={rules.floor}-{rules.ceiling}, max_level={max_level})"
    )
    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: Optional[bool] = None) -> None:
    host = host or ConfigHelper.get("Server", "host", fallback="127.0.0.1") or "127.0.0.1"
    port = port or ConfigHelper.getint("Server", "port", fallback=5000)
    debug = ConfigHelper.getboolean("Server", "debug", fallback=False) if debug is None else debug

    app = create_app()
    log_info(f"Serving Primus API on http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)
