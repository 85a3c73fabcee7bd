"""
Command dispatch for the opsh REPL.

Cli ties the command tree to the session: every read loop (interactive,
-c commands, configuration file replay) feeds lines through enter_command.
"""

import threading

from opsh_lib.client import Client
from opsh_lib.config import DataTree
from opsh_lib.errors import CallbackError, CliError, EditConfigError
from opsh_lib.schema import SchemaContext

from .parser import normalize_input_line, parse_command
from .session import Session
from .tree import Callback, Commands, ConfigEdit


class Cli:
    """Command tree plus session, guarded by one lock."""

    def __init__(self, commands: Commands, session: Session):
        self.commands = commands
        self.session = session
        self.lock = threading.RLock()

    @classmethod
    def create(cls, client: Client, schema: SchemaContext, running: DataTree,
               use_pager: bool = True) -> "Cli":
        session = Session(client, schema, running, use_pager=use_pager)
        return cls(Commands.generate(schema), session)

    def load_schema(self, schema: SchemaContext) -> None:
        """Rebuild the command tree for a new schema and install it."""
        commands = Commands.generate(schema)
        with self.lock:
            self.commands = commands
            self.session.set_schema(schema)

    def enter_command(self, line: str) -> bool:
        """
        Execute one input line.

        Returns:
            True if the command asked the shell to exit

        Raises:
            ParserError: if the line doesn't resolve to a command
            EditConfigError: if a configuration edit is rejected
            CallbackError: if a command handler fails
        """
        with self.lock:
            line = normalize_input_line(line)
            if line is None:
                return False

            pcmd = parse_command(self.commands, self.session.mode, line)
            if pcmd.mode is not None and pcmd.mode != self.session.mode:
                self.session.mode_set(pcmd.mode)

            token = self.commands.lookup_token(pcmd.token_id)
            action = token.action

            if isinstance(action, ConfigEdit):
                try:
                    self.session.edit_candidate(pcmd.negate, action.snode, pcmd.args)
                except EditConfigError:
                    raise
                except CliError as e:
                    raise EditConfigError(str(e)) from e
                return False

            if isinstance(action, Callback):
                handler = self.commands.callback(action.name)
                try:
                    return bool(handler(self.commands, self.session, pcmd.args))
                except CallbackError:
                    raise
                except CliError as e:
                    raise CallbackError(str(e)) from e

            return False
