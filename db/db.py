# db.py
import os
import sqlite3

from primus.helpers.config_helper import ConfigHelper
from primus.helpers.logging_helper import log_info, log_module_import

log_module_import(__name__)

DEFAULT_DB_PATH = "data/primus.db"


def get_db_path():
    raw_db_path = (ConfigHelper.get("Database", "path", fallback=DEFAULT_DB_PATH) or DEFAULT_DB_PATH).strip()
    return raw_db_path if os.path.exists(raw_db_path) else os.path.abspath(os.path.normpath(raw_db_path))


def get_connection():
    db_path = get_db_path()
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return sqlite3.connect(db_path)


def _ensure_characters_table(cursor):
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS characters (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            name TEXT NOT NULL,
            level INTEGER NOT NULL DEFAULT 1,
            role TEXT NOT NULL,
            payload_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_characters_owner_created "
        "ON characters (owner_id, created_at DESC)"
    )


def initialize_db():
    conn = get_connection()
    try:
        cursor = conn.cursor()
        _ensure_characters_table(cursor)
        conn.commit()
    finally:
        conn.close()
    log_info(f"Database ready at {get_db_path()}")
