"""
opsh - operator shell for a YANG-modeled routing daemon.

Startup connects to the daemon, loads its schema and running configuration
and then runs exactly one of three read loops: configuration file replay
(--file), one-shot commands (-c) or the interactive shell.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from opsh_lib import __version__
from opsh_lib.client import HttpClient
from opsh_lib.common import Colors, error, info, log, prompt_yes_no, set_colors
from opsh_lib.config import from_json, get_daemon_address, get_history_file, get_modules_dir
from opsh_lib.errors import ClientConnectionError, ClientError, CliError, SchemaError
from opsh_lib.repl import Cli, Terminal
from opsh_lib.schema import load_schema


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opsh", description="Routing daemon operator shell")
    parser.add_argument("--file", type=Path, metavar="PATH",
                        help="Read configuration commands from a file and commit them")
    parser.add_argument("--no-colors", action="store_true",
                        help="Disable colored output")
    parser.add_argument("--no-pager", action="store_true",
                        help="Print long output directly instead of through a pager")
    parser.add_argument("-c", "--command", action="append", default=[], metavar="CMD",
                        help="Execute a command and exit (may be repeated)")
    parser.add_argument("-a", "--address", metavar="URL",
                        help="Daemon address")
    parser.add_argument("--modules-dir", metavar="DIR",
                        help="Schema module cache directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def execute_line(cli: Cli, line: str) -> tuple[bool, bool]:
    """
    Run one line and report any error.

    Returns:
        (ok, exit_requested)
    """
    try:
        return True, cli.enter_command(line)
    except CliError as e:
        error(str(e))
        return False, False


def read_config_file(cli: Cli, path: Path) -> bool:
    """
    Replay a configuration file and commit the result.

    Every line runs through the same path as interactive input. Lines that
    fail are reported and skipped; the remaining changes are still committed.

    Returns:
        True if every line and the commit succeeded
    """
    try:
        lines = path.read_text().splitlines()
    except OSError as e:
        error(f"Failed to read {path}: {e}")
        return False

    cli.session.enter_configure()

    success = True
    for line in lines:
        ok, _ = execute_line(cli, line)
        success = success and ok

    try:
        transaction_id = cli.session.candidate_commit(f"Configuration read from {path}")
    except CliError as e:
        error(str(e))
        return False

    if transaction_id is not None:
        log(f"Configuration committed (transaction {transaction_id})")
    return success


def run_commands(cli: Cli, commands: list[str]) -> bool:
    """Run -c commands in order. Returns True if all succeeded."""
    success = True
    for line in commands:
        ok, exit_requested = execute_line(cli, line)
        success = success and ok
        if exit_requested:
            break
    return success


def confirm_exit(cli: Cli) -> bool:
    """Ask before leaving with uncommitted changes."""
    if not cli.session.has_changes():
        return True
    return bool(prompt_yes_no("Discard uncommitted changes?"))


def run_repl(cli: Cli, terminal: Terminal) -> None:
    """Interactive read loop."""
    while True:
        line = terminal.read_line(cli.session.prompt())
        if line is None:
            print()
            if confirm_exit(cli):
                break
            continue

        _, exit_requested = execute_line(cli, line)
        if exit_requested and confirm_exit(cli):
            break


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.no_colors:
        set_colors(False)

    address = get_daemon_address(args.address)
    try:
        client = HttpClient.connect(address)
    except ClientConnectionError as e:
        error(f"Failed to connect to daemon at {address}: {e}")
        return 1

    modules_dir = get_modules_dir(args.modules_dir)
    try:
        modules_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        error(f"Failed to create modules directory {modules_dir}: {e}")
        return 1

    try:
        schema = load_schema(client, modules_dir)
        running = from_json(client.get_running_config(), schema)
    except (ClientError, SchemaError) as e:
        error(f"Failed to load schema from daemon: {e}")
        return 1

    use_pager = not args.command and not args.no_pager
    cli = Cli.create(client, schema, running, use_pager=use_pager)

    if args.file:
        return 0 if read_config_file(cli, args.file) else 1

    cli.session.update_hostname()

    if args.command:
        return 0 if run_commands(cli, args.command) else 1

    print()
    print(f"{Colors.BOLD}opsh {__version__}{Colors.NC} connected to {address}")
    info("Type 'list' for commands, 'exit' to quit")
    print()

    terminal = Terminal(cli, get_history_file(), use_colors=not args.no_colors)
    run_repl(cli, terminal)
    return 0


if __name__ == "__main__":
    sys.exit(main())
