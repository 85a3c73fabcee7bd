"""
Configuration mode commands for the opsh REPL.

Every handler takes (commands, session, args) where args is the list of
(name, value) pairs captured by the parser.
"""

from rich.table import Table

from opsh_lib.common import console, log, warn, info
from opsh_lib.config import format_path

from ..session import Configure


def get_arg(args: list, name: str, default=None):
    """Value of the named argument, or default."""
    for arg_name, value in args:
        if arg_name == name:
            return value
    return default


def cmd_config(commands, session, args: list) -> None:
    """Enter configuration mode."""
    session.enter_configure()


def cmd_exit_exec(commands, session, args: list) -> bool:
    """Exit the shell."""
    return True


def cmd_exit_config(commands, session, args: list) -> None:
    """Exit from the current configuration level."""
    if not session.mode.path and session.has_changes():
        warn("Uncommitted changes remain in the candidate configuration")
    session.exit_level()


def cmd_end(commands, session, args: list) -> None:
    """Return to operational mode."""
    if session.has_changes():
        warn("Uncommitted changes remain in the candidate configuration")
    session.end()


def cmd_commit(commands, session, args: list) -> None:
    """Commit the candidate configuration."""
    comment = get_arg(args, "comment")
    if not session.has_changes():
        info("No changes to commit")
        return

    transaction_id = session.candidate_commit(comment)
    if transaction_id is not None:
        log(f"Commit complete (transaction {transaction_id})")
    else:
        log("Commit complete")
    session.update_hostname()


def cmd_discard(commands, session, args: list) -> None:
    """Discard uncommitted changes."""
    if not session.has_changes():
        info("No changes to discard")
        return
    session.candidate_rollback()
    log("Changes discarded")


def cmd_validate(commands, session, args: list) -> None:
    """Validate the candidate configuration."""
    session.candidate_validate()
    log("Validation passed")


def cmd_pwd(commands, session, args: list) -> None:
    """Show the current configuration context."""
    print(format_path(session.mode.data_path()))


def _command_lines(token, words: list, lines: list) -> None:
    if token.action is not None:
        lines.append((" ".join(words), token.help))
    for child in token.children():
        _command_lines(child, words + [child.label], lines)


def cmd_list(commands, session, args: list) -> None:
    """List the commands available at the current level."""
    scope = commands.scope(session.mode)
    roots = dict(scope.keywords)
    if isinstance(session.mode, Configure):
        roots = {**commands.config_default.keywords, **scope.keywords}

    lines = []
    for name in sorted(roots):
        _command_lines(roots[name], [name], lines)
    for param in scope.params:
        _command_lines(param, [param.label], lines)

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Command", style="cyan")
    table.add_column("Description")
    for line, help in lines:
        table.add_row(line, help)
    console.print(table)
