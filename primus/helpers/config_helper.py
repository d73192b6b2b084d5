import configparser
import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.ini"


class ConfigHelper:
    _config = None
    _config_mtime = None
    _config_path: Path = Path(os.environ.get("PRIMUS_CONFIG", DEFAULT_CONFIG_PATH))

    @classmethod
    def load_config(cls, file_path: Union[str, os.PathLike, None] = None):
        """Load the configuration from ``file_path``.

        The file is read only when it's not cached or when the file has
        changed on disk since the last load. This allows updating the
        configuration without restarting the server.
        """
        path = Path(file_path) if file_path is not None else cls.get_config_path()
        if path != cls._config_path:
            cls._config = None
        cls._config_path = path
        mtime = os.path.getmtime(path) if path.exists() else None

        if cls._config is None or mtime != cls._config_mtime:
            cls._config = configparser.ConfigParser()
            if mtime is not None:
                cls._config.read(str(path), encoding="utf-8")
                cls._config_mtime = mtime
            else:
                logger.warning("config file '%s' not found, using defaults", path)
                cls._config_mtime = None

        return cls._config

    @classmethod
    def get(cls, section, key, fallback=None):
        cls.load_config()
        try:
            return cls._config.get(section, key, fallback=fallback)
        except configparser.Error as e:
            logger.warning("Config error: [%s] %s: %s", section, key, e)
            return fallback

    @classmethod
    def getint(cls, section, key, fallback=0):
        raw = cls.get(section, key, fallback=None)
        if raw is None or str(raw).strip() == "":
            return fallback
        try:
            return int(str(raw).strip())
        except ValueError:
            logger.warning("Config error: [%s] %s is not an integer (%r)", section, key, raw)
            return fallback

    @classmethod
    def getboolean(cls, section, key, fallback=False):
        cls.load_config()
        try:
            return cls._config.getboolean(section, key, fallback=fallback)
        except (configparser.Error, ValueError) as e:
            logger.warning("Config error: [%s] %s: %s", section, key, e)
            return fallback

    @classmethod
    def set(cls, section, key, value, file_path: Union[str, os.PathLike, None] = None):
        if file_path is None:
            config_path = cls.get_config_path()
        else:
            config_path = Path(file_path)

        config = configparser.ConfigParser()
        if config_path.exists():
            config.read(str(config_path), encoding="utf-8")

        if not config.has_section(section):
            config.add_section(section)

        config.set(section, key, str(value))

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as configfile:
            config.write(configfile)

        # Refresh cached configuration so subsequent reads observe the new value.
        cls._config = None
        cls.load_config(config_path)

    @classmethod
    def get_config_path(cls) -> Path:
        if not isinstance(cls._config_path, Path):
            cls._config_path = Path(DEFAULT_CONFIG_PATH)
        return cls._config_path

    @classmethod
    def get_data_dir(cls):
        """Return the directory containing the configured database file."""
        db_path = cls.get("Database", "path", fallback="data/primus.db") or "data/primus.db"
        return os.path.abspath(os.path.dirname(db_path))
