"""Unit tests for the configuration loader."""

import json
from pathlib import Path

from daytally.core.config import (
    get_data_directory,
    get_default_config,
    get_default_config_path,
    load_config,
    save_config,
)


# ------------------------------------------------------------------
# get_data_directory
# ------------------------------------------------------------------

def test_get_data_directory_returns_path():
    result = get_data_directory()
    assert isinstance(result, Path)
    assert "DayTally" in str(result) or ".daytally" in str(result)


def test_get_data_directory_macos(monkeypatch):
    monkeypatch.setattr("daytally.core.config.sys.platform", "darwin")
    result = get_data_directory()
    assert result == Path.home() / "Library" / "Application Support" / "DayTally"


def test_get_data_directory_windows(monkeypatch):
    monkeypatch.setattr("daytally.core.config.sys.platform", "win32")
    monkeypatch.setenv("APPDATA", "/fake/appdata")
    result = get_data_directory()
    assert result == Path("/fake/appdata") / "DayTally"


def test_get_data_directory_windows_no_appdata(monkeypatch):
    monkeypatch.setattr("daytally.core.config.sys.platform", "win32")
    monkeypatch.delenv("APPDATA", raising=False)
    result = get_data_directory()
    assert result == Path.home() / "AppData" / "Roaming" / "DayTally"


def test_get_data_directory_linux(monkeypatch):
    monkeypatch.setattr("daytally.core.config.sys.platform", "linux")
    result = get_data_directory()
    assert result == Path.home() / ".daytally"


def test_default_config_path_in_data_directory():
    assert get_default_config_path() == get_data_directory() / "config.json"


# ------------------------------------------------------------------
# get_default_config
# ------------------------------------------------------------------

def test_default_config_has_required_keys():
    cfg = get_default_config()
    for key in (
        "database_path",
        "snap_interval_minutes",
        "quick_add_minutes",
        "theme",
        "dashboard_port",
        "default_categories",
        "report",
    ):
        assert key in cfg


def test_default_config_timeline_values():
    cfg = get_default_config()
    assert cfg["snap_interval_minutes"] == 15
    assert cfg["quick_add_minutes"] == 60
    assert cfg["theme"] == "light"


def test_default_categories_have_name_and_color():
    cats = get_default_config()["default_categories"]
    assert [c["name"] for c in cats] == ["Work", "Exercise", "Social", "Rest", "Learning"]
    for cat in cats:
        assert cat["color"].startswith("#")
        assert len(cat["color"]) == 7


# ------------------------------------------------------------------
# save_config / load_config
# ------------------------------------------------------------------

def test_save_and_load_round_trip(tmp_path):
    cfg_path = tmp_path / "config.json"
    defaults = get_default_config()
    save_config(defaults, cfg_path)
    assert load_config(cfg_path) == defaults


def test_save_creates_parent_directories(tmp_path):
    cfg_path = tmp_path / "nested" / "deep" / "config.json"
    save_config({"theme": "dark"}, cfg_path)
    assert cfg_path.exists()


def test_load_creates_default_when_missing(tmp_path):
    cfg_path = tmp_path / "config.json"
    assert not cfg_path.exists()
    loaded = load_config(cfg_path)
    assert cfg_path.exists()
    assert loaded == get_default_config()
    with open(cfg_path, "r", encoding="utf-8") as fh:
        assert isinstance(json.load(fh), dict)


def test_load_fills_missing_keys_from_defaults(tmp_path):
    cfg_path = tmp_path / "config.json"
    save_config({"theme": "dark", "custom_key": "hello"}, cfg_path)
    loaded = load_config(cfg_path)
    assert loaded["theme"] == "dark"
    assert loaded["custom_key"] == "hello"
    assert loaded["snap_interval_minutes"] == 15


# ------------------------------------------------------------------
# load_config error handling
# ------------------------------------------------------------------

def test_load_invalid_json_returns_defaults(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("not valid json {{{", encoding="utf-8")
    assert load_config(cfg_path) == get_default_config()


def test_load_json_array_returns_defaults(tmp_path):
    """Top-level JSON must be an object, not an array."""
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("[1, 2, 3]", encoding="utf-8")
    assert load_config(cfg_path) == get_default_config()


def test_load_invalid_json_leaves_file_untouched(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("", encoding="utf-8")
    load_config(cfg_path)
    assert cfg_path.read_text(encoding="utf-8") == ""
