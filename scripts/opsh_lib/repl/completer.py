"""
Tab completion for the opsh REPL.

This module provides mode-aware command completion using prompt_toolkit.
Completions come from the same command tree and matching rules the parser
uses, so anything offered here parses.
"""

import shlex

from prompt_toolkit.completion import Completer, Completion

from opsh_lib.errors import CliError

from .parser import NEGATE_KEYWORD, candidate_tokens, descend
from .session import Configure


def _param_values(param) -> list[str]:
    """Enumerable values accepted by a parameter."""
    if param.argtype is None:
        return []
    if param.argtype.base == "enumeration":
        return list(param.argtype.enums)
    if param.argtype.base == "boolean":
        return ["true", "false"]
    return []


class CommandCompleter(Completer):
    """Completes keywords and enumerated values for the current mode."""

    def __init__(self, cli):
        self.cli = cli

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        try:
            words = shlex.split(text)
        except ValueError:
            # Inside an open quote
            return

        if text and not text[-1].isspace() and words:
            word = words.pop()
        else:
            word = ""

        for name, meta in self._candidates(words):
            if name.startswith(word):
                yield Completion(name, start_position=-len(word), display_meta=meta)

    def _candidates(self, words: list[str]) -> list[tuple[str, str]]:
        with self.cli.lock:
            commands = self.cli.commands
            mode = self.cli.session.mode

            candidates = []
            if words and words[0] == NEGATE_KEYWORD:
                words = words[1:]
            elif not words and isinstance(mode, Configure):
                candidates.append((NEGATE_KEYWORD, "Negate a command or set its defaults"))

            try:
                node, _ = descend(commands, mode, words)
            except CliError:
                return []
            keywords, params = candidate_tokens(commands, mode, node, len(words))

        for name in sorted(keywords):
            candidates.append((name, keywords[name].help))
        for param in params:
            for value in _param_values(param):
                candidates.append((value, param.help))
        return candidates
