import os

import pytest

from primus.helpers import logging_helper
from primus.helpers.config_helper import ConfigHelper


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[Server]\nport = 8080\ndebug = yes\n\n[Rules]\nbudget = lots\n\n[Database]\npath = {}\n".format(
            (tmp_path / "data" / "primus.db").as_posix()
        ),
        encoding="utf-8",
    )
    monkeypatch.setattr(ConfigHelper, "_config", None)
    monkeypatch.setattr(ConfigHelper, "_config_mtime", None)
    monkeypatch.setattr(ConfigHelper, "_config_path", path)
    return path


def test_typed_getters(isolated_config):
    assert ConfigHelper.getint("Server", "port", fallback=5000) == 8080
    assert ConfigHelper.getboolean("Server", "debug") is True
    assert ConfigHelper.getint("Rules", "budget", fallback=27) == 27
    assert ConfigHelper.getint("Rules", "missing", fallback=3) == 3
    assert ConfigHelper.get("Nope", "key", fallback="x") == "x"


def test_set_persists_and_refreshes_cache(isolated_config):
    ConfigHelper.set("Auth", "tokens", "t1:gm")

    assert ConfigHelper.get("Auth", "tokens") == "t1:gm"
    assert "tokens = t1:gm" in isolated_config.read_text(encoding="utf-8")


def test_data_dir_follows_database_path(isolated_config, tmp_path):
    assert ConfigHelper.get_data_dir() == os.path.abspath(str(tmp_path / "data"))


def test_logging_writes_to_configured_file(monkeypatch, tmp_path):
    values = {
        ("Logging", "directory"): str(tmp_path / "logs"),
        ("Logging", "filename"): "primus-test.log",
        ("Logging", "level"): "DEBUG",
    }

    def fake_get(cls, section, key, fallback=None):
        return values.get((section, key), fallback)

    def fake_getboolean(cls, section, key, fallback=False):
        return (section, key) == ("Logging", "enabled")

    monkeypatch.setattr(ConfigHelper, "get", classmethod(fake_get))
    monkeypatch.setattr(ConfigHelper, "getboolean", classmethod(fake_getboolean))
    monkeypatch.setattr(logging_helper, "_LAST_CONFIG", None)

    try:
        assert logging_helper.initialize_logging() is True
        logging_helper.log_info("hello from the test", func_name="tests.logging")
        log_path = logging_helper.get_active_log_path()
        assert log_path == os.path.join(str(tmp_path / "logs"), "primus-test.log")
        for handler in logging_helper.ensure_logger()[0].handlers:
            handler.flush()
        with open(log_path, encoding="utf-8") as handle:
            assert "tests.logging - hello from the test" in handle.read()
    finally:
        monkeypatch.undo()
        logging_helper._LAST_CONFIG = None
        logging_helper.ensure_logger()


def test_logging_helper_exports_only_live_helpers():
    assert set(logging_helper.__all__) == {
        "ensure_logger",
        "get_active_log_path",
        "initialize_logging",
        "log_debug",
        "log_exception",
        "log_function",
        "log_info",
        "log_methods",
        "log_module_import",
        "log_warning",
    }
    assert all(callable(getattr(logging_helper, name)) for name in logging_helper.__all__)
