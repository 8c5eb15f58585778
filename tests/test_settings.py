"""
Tests for the SettingsManager persistence behaviour.

These tests verify that settings are saved and loaded correctly and that the
global settings manager uses the persistent data directory when no custom
config_file is provided.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import qualkit.config.settings as settings_mod
from qualkit.config.settings import AppSettings, SettingsManager


def test_save_and_load(settings_file: Path):
    manager = SettingsManager(config_file=settings_file)
    assert not manager.config_exists()
    manager.load()

    # Update and add recent projects (auto-saves)
    manager.update(theme="light", default_coder="ana", log_level=logging.DEBUG)
    manager.add_recent_project("/path/to/study1.qual.json")
    manager.add_recent_project("/path/to/study2.qual.json")

    assert manager.config_exists()

    new_manager = SettingsManager(config_file=settings_file)
    settings = new_manager.load_config()

    assert settings.theme == "light"
    assert settings.default_coder == "ana"
    assert settings.log_level == logging.DEBUG
    assert settings.recent_projects == ["/path/to/study2.qual.json", "/path/to/study1.qual.json"]

    with open(settings_file, "r", encoding="utf-8") as f:
        data = json.load(f)
    assert data["theme"] == "light"


def test_recent_projects_are_deduplicated_and_trimmed(settings_file: Path):
    manager = SettingsManager(config_file=settings_file)
    manager.update(max_recent_items=2)

    manager.add_recent_project("/a.qual.json")
    manager.add_recent_project("/b.qual.json")
    manager.add_recent_project("/a.qual.json")
    manager.add_recent_project("/c.qual.json")

    assert manager.get().recent_projects == ["/c.qual.json", "/a.qual.json"]


def test_unknown_settings_are_ignored(settings_file: Path, caplog):
    manager = SettingsManager(config_file=settings_file)

    manager.update(window_width=1400)

    assert not hasattr(manager.get(), "window_width")
    assert "Ignoring unknown setting" in caplog.text


def test_corrupt_file_falls_back_to_defaults(settings_file: Path):
    settings_file.parent.mkdir(parents=True)
    settings_file.write_text("{broken", encoding="utf-8")

    settings = SettingsManager(config_file=settings_file).load()

    assert settings == AppSettings()


def test_log_file_path_round_trip(settings_file: Path, tmp_path: Path):
    manager = SettingsManager(config_file=settings_file)
    manager.save(AppSettings(log_file_path=tmp_path / "logs" / "qualkit.log"))

    loaded = SettingsManager(config_file=settings_file).load()

    assert loaded.log_file_path == tmp_path / "logs" / "qualkit.log"
    assert loaded.resolved_log_file() == tmp_path / "logs" / "qualkit.log"


def test_reset_to_defaults(settings_file: Path):
    manager = SettingsManager(config_file=settings_file)
    manager.update(theme="light")

    manager.reset_to_defaults()

    assert SettingsManager(config_file=settings_file).load().theme == "dark"


def test_get_settings_manager_uses_default_path(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(settings_mod, "get_persistent_data_directory", lambda: tmp_path)
    monkeypatch.setattr(settings_mod, "_settings_manager", None)

    manager = settings_mod.get_settings_manager()
    manager.save()

    assert manager.config_file == tmp_path / "settings.json"
    assert manager.config_file.exists()
    assert settings_mod.get_settings() is manager.get()
