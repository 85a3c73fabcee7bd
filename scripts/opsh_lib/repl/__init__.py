"""
opsh_lib.repl - REPL components for opsh

This package contains the modular components for the opsh interactive shell:
- menu: Built-in command definitions
- tree: Command tree built from the menu and the daemon's schema
- parser: Line normalization, tokenizing and command matching
- session: Command modes, candidate/running configuration and commit
- dispatcher: Cli, which runs parsed commands against the session
- commands/: Command handlers
- completer: Tab completion
- terminal: Line editing and history
- display: Paged output
"""

from .session import ConfigContext, Operational, Configure, Session
from .tree import TokenKind, ConfigEdit, Callback, CommandNode, Commands
from .parser import (
    NEGATE_KEYWORD,
    ParsedCommand,
    normalize_input_line,
    tokenize,
    match_word,
    parse_command,
)
from .dispatcher import Cli
from .completer import CommandCompleter
from .terminal import Terminal

__all__ = [
    'ConfigContext',
    'Operational',
    'Configure',
    'Session',
    'TokenKind',
    'ConfigEdit',
    'Callback',
    'CommandNode',
    'Commands',
    'NEGATE_KEYWORD',
    'ParsedCommand',
    'normalize_input_line',
    'tokenize',
    'match_word',
    'parse_command',
    'Cli',
    'CommandCompleter',
    'Terminal',
]
