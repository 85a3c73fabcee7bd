"""
Input line parsing for the opsh REPL.

A line is normalized, split into words and matched word by word against the
command tree, starting at the scope of the current mode. Keywords may be
abbreviated to any unique prefix.
"""

import shlex
from dataclasses import dataclass, field
from typing import Optional

from opsh_lib.errors import (
    AmbiguousCommandError,
    IncompleteCommandError,
    InvalidArgumentError,
    NegationError,
    ParserError,
    SchemaValidationError,
    TrailingInputError,
    UnknownCommandError,
)

from .session import CommandMode, Configure
from .tree import CommandNode, Commands, ConfigEdit, TokenKind


NEGATE_KEYWORD = "no"
COMMENT_CHARS = "!#"


@dataclass
class ParsedCommand:
    """Result of matching one line."""
    token_id: int
    negate: bool = False
    args: list = field(default_factory=list)  # [(name, value), ...]
    mode: Optional[CommandMode] = None


def normalize_input_line(line: str) -> Optional[str]:
    """
    Strip comments and surrounding whitespace.

    A comment starts at '!' or '#' at the beginning of a word outside quotes.

    Returns:
        The normalized line, or None if nothing is left
    """
    quote = None
    word_start = True
    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch in COMMENT_CHARS and word_start:
            line = line[:i]
            break
        word_start = ch.isspace()

    line = line.strip()
    return line or None


def tokenize(line: str) -> list[str]:
    """Split a line into words, honouring single and double quotes."""
    try:
        return shlex.split(line)
    except ValueError as e:
        raise ParserError(f"invalid input: {str(e).lower()}") from e


def candidate_tokens(commands: Commands, mode: CommandMode, node: CommandNode,
                     position: int) -> tuple[dict, list]:
    """
    Keywords and parameters that may follow node.

    In configuration mode the first word may also be one of the commands
    available at every level; a schema keyword of the same name wins.
    """
    keywords = node.keywords
    if position == 0 and isinstance(mode, Configure):
        keywords = dict(commands.config_default.keywords)
        keywords.update(node.keywords)
    return keywords, node.params


def match_word(keywords: dict, params: list, word: str,
               position: int = 0) -> tuple[CommandNode, Optional[str]]:
    """
    Match one word against the keywords and parameters of a scope.

    Returns:
        (node, value): value is the canonical text for a parameter, None
        for a keyword

    Raises:
        AmbiguousCommandError: word is a prefix of several keywords
        InvalidArgumentError: only parameters remain and none accepts word
        UnknownCommandError: nothing matches
    """
    if word in keywords:
        return keywords[word], None

    matches = sorted(name for name in keywords if name.startswith(word))
    if len(matches) == 1:
        return keywords[matches[0]], None
    if matches:
        raise AmbiguousCommandError(word, matches, position)

    first_error = None
    for param in params:
        try:
            return param, param.argtype.canonicalize(word)
        except SchemaValidationError as e:
            if first_error is None:
                first_error = InvalidArgumentError(param.name, word, str(e))
    if first_error is not None:
        raise first_error

    raise UnknownCommandError(word, position)


def descend(commands: Commands, mode: CommandMode,
            words: list[str]) -> tuple[CommandNode, list]:
    """
    Walk the tree from the scope of mode along words.

    Returns:
        (node, args): the node reached and the captured parameters
    """
    node = commands.scope(mode)
    args = []
    for position, word in enumerate(words):
        keywords, params = candidate_tokens(commands, mode, node, position)
        if not keywords and not params:
            if position == 0:
                raise UnknownCommandError(word, position)
            raise TrailingInputError(word, position)
        node, value = match_word(keywords, params, word, position)
        if node.kind is TokenKind.PARAM:
            args.append((node.name, value))
    return node, args


def _resolve(node: CommandNode) -> CommandNode:
    """Follow a lone keyword child when it completes the command."""
    if node.action is None and not node.params and len(node.keywords) == 1:
        child = next(iter(node.keywords.values()))
        if child.action is not None:
            return child
    return node


def _parse_words(commands: Commands, mode: CommandMode, words: list[str],
                 negate: bool, line: str) -> ParsedCommand:
    node, args = descend(commands, mode, words)
    node = _resolve(node)

    if node.action is None:
        if node.children():
            raise IncompleteCommandError(line)
        return ParsedCommand(node.id, negate, args, mode)

    if negate and not isinstance(node.action, ConfigEdit):
        first, _ = descend(commands, mode, words[:1])
        raise NegationError(first.name)
    if node.negate_only and not negate:
        raise IncompleteCommandError(line)

    return ParsedCommand(node.id, negate, args, mode)


def parse_command(commands: Commands, mode: CommandMode, line: str) -> ParsedCommand:
    """
    Resolve a normalized line into a command.

    In a nested configuration context, a line whose first word is unknown
    there is retried at each enclosing level; the returned mode is the level
    that accepted it.

    Raises:
        ParserError: if the line can't be resolved
    """
    words = tokenize(line)
    negate = False
    if words and words[0] == NEGATE_KEYWORD:
        negate = True
        words = words[1:]
    if not words:
        raise IncompleteCommandError(line)

    try:
        return _parse_words(commands, mode, words, negate, line)
    except UnknownCommandError as e:
        if e.position != 0 or not isinstance(mode, Configure) or not mode.path:
            raise
        error = e

    parent = mode
    while parent.path:
        parent = parent.pop()
        try:
            return _parse_words(commands, parent, words, negate, line)
        except UnknownCommandError as e:
            if e.position != 0:
                raise
    raise error
