"""Tests for settings resolution."""

import json

import pytest

from opsh_lib.config import (
    DEFAULT_DAEMON_ADDRESS,
    DEFAULT_MODULES_DIR,
    get_daemon_address,
    get_history_file,
    get_modules_dir,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("OPSH_ADDRESS", "OPSH_MODULES_DIR", "OPSH_HISTORY_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPSH_CONFIG", str(tmp_path / "opsh.json"))


def write_settings(tmp_path, data):
    (tmp_path / "opsh.json").write_text(json.dumps(data))


def test_defaults():
    assert get_daemon_address() == DEFAULT_DAEMON_ADDRESS
    assert get_modules_dir() == DEFAULT_MODULES_DIR


def test_argument_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("OPSH_ADDRESS", "http://env:1")
    write_settings(tmp_path, {"daemon": {"address": "http://file:1"}})
    assert get_daemon_address("http://arg:1") == "http://arg:1"


def test_environment_beats_settings_file(monkeypatch, tmp_path):
    monkeypatch.setenv("OPSH_ADDRESS", "http://env:1")
    monkeypatch.setenv("OPSH_MODULES_DIR", str(tmp_path / "env-modules"))
    write_settings(tmp_path, {"daemon": {"address": "http://file:1"}, "modules_dir": "/srv"})
    assert get_daemon_address() == "http://env:1"
    assert get_modules_dir() == tmp_path / "env-modules"


def test_settings_file(tmp_path):
    write_settings(tmp_path, {
        "daemon": {"address": "http://file:1"},
        "modules_dir": "/srv/modules",
        "history_file": "/tmp/opsh-history",
    })
    assert get_daemon_address() == "http://file:1"
    assert str(get_modules_dir()) == "/srv/modules"
    assert str(get_history_file()) == "/tmp/opsh-history"


def test_unreadable_settings_file(tmp_path):
    (tmp_path / "opsh.json").write_text("{not json")
    assert load_settings() == {}
    assert get_daemon_address() == DEFAULT_DAEMON_ADDRESS


def test_history_file_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("OPSH_HISTORY_FILE", str(tmp_path / "hist"))
    assert get_history_file() == tmp_path / "hist"
