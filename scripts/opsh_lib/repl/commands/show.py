"""
Show commands for the opsh REPL.
"""

import json

from rich.table import Table

from opsh_lib.common import console, info
from opsh_lib.config import render_changes, render_config

from ..display import display
from .config import get_arg


def cmd_show_running(commands, session, args: list) -> None:
    """Show the running configuration."""
    if session.running.is_empty():
        info("Running configuration is empty")
        return
    fmt = get_arg(args, "format", "cli")
    display(session, render_config(session.running, session.schema, fmt))


def cmd_show_candidate(commands, session, args: list) -> None:
    """Show the candidate configuration."""
    if session.candidate.is_empty():
        info("Candidate configuration is empty")
        return
    fmt = get_arg(args, "format", "cli")
    display(session, render_config(session.candidate, session.schema, fmt))


def cmd_show_changes(commands, session, args: list) -> None:
    """Show uncommitted changes."""
    changes = session.changes()
    if not changes:
        info("No uncommitted changes")
        return
    display(session, render_changes(changes, session.schema))


def cmd_show_state(commands, session, args: list) -> None:
    """Show operational state from the daemon."""
    path = get_arg(args, "path")
    state = session.client.get_state(path)
    display(session, json.dumps(state, indent=2))


def cmd_show_modules(commands, session, args: list) -> None:
    """Show the schema modules loaded from the daemon."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Module", style="cyan")
    table.add_column("Revision")
    table.add_column("Nodes", justify="right")
    table.add_column("RPCs", justify="right")

    for module in sorted(session.schema.modules, key=lambda m: m.name):
        table.add_row(module.name, module.revision or "-",
                      str(len(module.nodes)), str(len(module.rpcs)))
    console.print(table)
