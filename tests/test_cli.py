"""
Tests for the command-line interface.
"""

import json

import pytest

import qualkit.cli.main as cli
import qualkit.config.settings as settings_mod
from qualkit.config.settings import SettingsManager


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, settings_file):
    """Keep the CLI away from the user's settings and log files."""
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(settings_mod, "_settings_manager", SettingsManager(config_file=settings_file))


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "study.qual.json"
    assert cli.main(["new", str(path), "--name", "Study"]) == 0
    return path


def test_new_adds_suffix_and_default_name(tmp_path, capsys):
    assert cli.main(["new", str(tmp_path / "pilot")]) == 0

    assert (tmp_path / "pilot.qual.json").exists()
    assert "Created project 'pilot'" in capsys.readouterr().out


def test_new_refuses_existing_project(project):
    assert cli.main(["new", str(project)]) == 1


def test_info_on_empty_project(project, capsys):
    capsys.readouterr()

    assert cli.main(["info", str(project)]) == 0

    out = capsys.readouterr().out
    assert "Project: Study" in out
    assert "Files: 0" in out
    assert "Applied codes: 0" in out


def test_add_file_loads_and_saves(project, tmp_path, capsys):
    source = tmp_path / "p01.txt"
    source.write_text("First answer.\n\nSecond answer.", encoding="utf-8")

    assert cli.main(["add-file", str(project), str(source)]) == 0
    assert "Added p01.txt (2 blocks)" in capsys.readouterr().out

    assert cli.main(["info", str(project)]) == 0
    assert "Files: 1" in capsys.readouterr().out


def test_add_file_that_cannot_be_loaded(project, tmp_path, capsys):
    source = tmp_path / "scan.pdf"
    source.write_bytes(b"%PDF-1.4")

    assert cli.main(["add-file", str(project), str(source)]) == 1
    assert "Added scan.pdf (0 blocks)" in capsys.readouterr().out

    cli.main(["info", str(project)])
    assert "Files: 1" in capsys.readouterr().out


def test_add_missing_file(project, tmp_path):
    assert cli.main(["add-file", str(project), str(tmp_path / "missing.txt")]) == 1


def test_codes_lists_themes_and_top_level(project, capsys):
    session = cli.create_session()
    session.load_project(project)
    theme_id = session.create_theme("Barriers", 2)
    session.create_code("Cost", 7, theme_id)
    session.create_code("Other", 4)
    session.save_project()
    capsys.readouterr()

    assert cli.main(["codes", str(project)]) == 0

    assert capsys.readouterr().out.splitlines() == [
        "Barriers [color 2]",
        "  - Cost [color 7] (0 applied)",
        "(no theme)",
        "  - Other [color 4] (0 applied)",
    ]


def test_info_on_missing_project(tmp_path):
    assert cli.main(["info", str(tmp_path / "nothing")]) == 1


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_info_on_malformed_project(project):
    document = json.loads(project.read_text(encoding="utf-8"))
    document["file_list"] = ["x"]
    project.write_text(json.dumps(document), encoding="utf-8")

    assert cli.main(["info", str(project)]) == 1
