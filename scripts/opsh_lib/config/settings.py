"""
Settings resolution for opsh.

Each setting is taken from the command line, then the environment, then
the JSON settings file, then the built-in default.
"""

import json
import os
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_DAEMON_ADDRESS,
    DEFAULT_HISTORY_FILE,
    DEFAULT_MODULES_DIR,
    DEFAULT_SETTINGS_FILE,
)


def get_settings_file() -> Path:
    """Get the settings file path, honouring OPSH_CONFIG."""
    if os.environ.get("OPSH_CONFIG"):
        return Path(os.environ["OPSH_CONFIG"])
    return DEFAULT_SETTINGS_FILE


def load_settings(settings_file: Optional[Path] = None) -> dict:
    """Load opsh settings from the JSON settings file."""
    settings_file = settings_file or get_settings_file()
    if settings_file.exists():
        try:
            with open(settings_file) as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
        except (json.JSONDecodeError, IOError):
            pass
    return {}


def get_daemon_address(arg_address: Optional[str] = None) -> str:
    """Get the daemon address from args, env, settings, or default."""
    if arg_address:
        return arg_address
    if os.environ.get("OPSH_ADDRESS"):
        return os.environ["OPSH_ADDRESS"]
    settings = load_settings()
    if settings.get("daemon", {}).get("address"):
        return settings["daemon"]["address"]
    return DEFAULT_DAEMON_ADDRESS


def get_modules_dir(arg_dir: Optional[str] = None) -> Path:
    """Get the schema module cache directory."""
    if arg_dir:
        return Path(arg_dir)
    if os.environ.get("OPSH_MODULES_DIR"):
        return Path(os.environ["OPSH_MODULES_DIR"])
    settings = load_settings()
    if settings.get("modules_dir"):
        return Path(settings["modules_dir"])
    return DEFAULT_MODULES_DIR


def get_history_file() -> Path:
    """Get the interactive history file."""
    if os.environ.get("OPSH_HISTORY_FILE"):
        return Path(os.environ["OPSH_HISTORY_FILE"])
    settings = load_settings()
    if settings.get("history_file"):
        return Path(settings["history_file"]).expanduser()
    return DEFAULT_HISTORY_FILE
