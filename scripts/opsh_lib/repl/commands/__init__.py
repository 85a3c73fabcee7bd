"""
opsh_lib.repl.commands - Command handlers for the REPL

This package contains command handler functions organized by feature area:
- config: Mode changes, commit, discard, validate, pwd, list
- show: Configuration, state and schema display
- rpc: Schema RPC invocation

CALLBACKS maps the callback names used in menu.py to their handlers.
"""

from .config import (
    get_arg,
    cmd_config,
    cmd_exit_exec,
    cmd_exit_config,
    cmd_end,
    cmd_commit,
    cmd_discard,
    cmd_validate,
    cmd_pwd,
    cmd_list,
)

from .show import (
    cmd_show_running,
    cmd_show_candidate,
    cmd_show_changes,
    cmd_show_state,
    cmd_show_modules,
)

from .rpc import cmd_rpc

CALLBACKS = {
    "cmd_config": cmd_config,
    "cmd_exit_exec": cmd_exit_exec,
    "cmd_exit_config": cmd_exit_config,
    "cmd_end": cmd_end,
    "cmd_commit": cmd_commit,
    "cmd_discard": cmd_discard,
    "cmd_validate": cmd_validate,
    "cmd_pwd": cmd_pwd,
    "cmd_list": cmd_list,
    "cmd_show_running": cmd_show_running,
    "cmd_show_candidate": cmd_show_candidate,
    "cmd_show_changes": cmd_show_changes,
    "cmd_show_state": cmd_show_state,
    "cmd_show_modules": cmd_show_modules,
}

__all__ = [
    'CALLBACKS',
    'get_arg',
    'cmd_config',
    'cmd_exit_exec',
    'cmd_exit_config',
    'cmd_end',
    'cmd_commit',
    'cmd_discard',
    'cmd_validate',
    'cmd_pwd',
    'cmd_list',
    'cmd_show_running',
    'cmd_show_candidate',
    'cmd_show_changes',
    'cmd_show_state',
    'cmd_show_modules',
    'cmd_rpc',
]
