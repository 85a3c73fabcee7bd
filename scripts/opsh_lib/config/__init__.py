"""
opsh_lib.config - Configuration trees, settings and constants for opsh.

This package contains:
- datatree: DataTree (candidate/running configuration), data paths and diffs
- serialization: JSON/YAML/CLI rendering of data trees
- settings: Settings resolution (args, environment, settings file)
- constants: Path constants and defaults
"""

from .constants import (
    DEFAULT_DAEMON_ADDRESS,
    DEFAULT_MODULES_DIR,
    DEFAULT_SETTINGS_FILE,
    DEFAULT_HISTORY_FILE,
    DEFAULT_HOSTNAME,
    HOSTNAME_PATH,
)

from .datatree import (
    CREATE,
    REPLACE,
    DELETE,
    PathSegment,
    Change,
    DataTree,
    format_path,
    parse_path,
    schema_path,
)

from .serialization import (
    to_json,
    from_json,
    to_yaml,
    to_cli_lines,
    change_to_json,
    pruned,
    render_config,
    render_changes,
)

from .settings import (
    load_settings,
    get_daemon_address,
    get_modules_dir,
    get_history_file,
)

__all__ = [
    # Constants
    'DEFAULT_DAEMON_ADDRESS',
    'DEFAULT_MODULES_DIR',
    'DEFAULT_SETTINGS_FILE',
    'DEFAULT_HISTORY_FILE',
    'DEFAULT_HOSTNAME',
    'HOSTNAME_PATH',
    # Data tree
    'CREATE',
    'REPLACE',
    'DELETE',
    'PathSegment',
    'Change',
    'DataTree',
    'format_path',
    'parse_path',
    'schema_path',
    # Serialization
    'to_json',
    'from_json',
    'to_yaml',
    'to_cli_lines',
    'change_to_json',
    'pruned',
    'render_config',
    'render_changes',
    # Settings
    'load_settings',
    'get_daemon_address',
    'get_modules_dir',
    'get_history_file',
]
