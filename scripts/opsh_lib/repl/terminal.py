"""
Line editing for the opsh REPL.

Wraps a prompt_toolkit PromptSession with history, completion and styling.
"""

from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.output import ColorDepth
from prompt_toolkit.styles import Style

from opsh_lib.common import warn

from .completer import CommandCompleter


OPSH_STYLE = Style.from_dict({
    'prompt': '#00aa00 bold',
    'completion-menu.completion': 'bg:#444444 #ffffff',
    'completion-menu.completion.current': 'bg:#00aa00 #000000',
    'completion-menu.meta.completion': 'bg:#333333 #aaaaaa',
})


def open_history(history_file: Path):
    """File history, or in-memory history if the file can't be used."""
    try:
        history_file.parent.mkdir(parents=True, exist_ok=True)
        history_file.touch(exist_ok=True)
        return FileHistory(str(history_file))
    except OSError as e:
        warn(f"Command history disabled: {e}")
        return InMemoryHistory()


class Terminal:
    """Interactive line reader for one Cli."""

    def __init__(self, cli, history_file: Path, use_colors: bool = True):
        self.cli = cli
        self.prompt_session = PromptSession(
            history=open_history(history_file),
            completer=CommandCompleter(cli),
            style=OPSH_STYLE if use_colors else None,
            color_depth=None if use_colors else ColorDepth.MONOCHROME,
        )

    def read_line(self, prompt: str) -> Optional[str]:
        """
        Read one line.

        Returns:
            The line, "" if the operator pressed Ctrl-C, None at end of input
        """
        try:
            return self.prompt_session.prompt(prompt)
        except KeyboardInterrupt:
            return ""
        except EOFError:
            return None
