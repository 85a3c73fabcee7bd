"""
Configuration constants for opsh.

Paths and default values used across the shell.
"""

from pathlib import Path


# Daemon and local paths
DEFAULT_DAEMON_ADDRESS = "http://[::1]:50051"
DEFAULT_MODULES_DIR = Path("/usr/local/share/opsh/modules")
DEFAULT_SETTINGS_FILE = Path("/etc/opsh/opsh.json")
DEFAULT_HISTORY_FILE = Path.home() / ".opsh_history"

# Hostname shown in the prompt until the daemon reports one
DEFAULT_HOSTNAME = "opsh"
HOSTNAME_PATH = "/system/hostname"
