"""
Error taxonomy for opsh.

Every failure that reaches the operator is one of these exceptions. The
message of each exception is a single human-readable line naming the
offending token, argument or path.
"""


class CliError(Exception):
    """Base class for all opsh errors."""
    pass


# =============================================================================
# Parser Errors
# =============================================================================

class ParserError(CliError):
    """Raised when an input line cannot be resolved into a command."""
    pass


class UnknownCommandError(ParserError):
    """No keyword or parameter at this scope accepts the word."""

    def __init__(self, word: str, position: int = 0):
        self.word = word
        self.position = position
        super().__init__(f"unknown command: {word}")


class AmbiguousCommandError(ParserError):
    """The word is a prefix of more than one keyword."""

    def __init__(self, word: str, candidates: list[str], position: int = 0):
        self.word = word
        self.candidates = list(candidates)
        self.position = position
        super().__init__(
            f"ambiguous command: {word} (matches: {', '.join(self.candidates)})"
        )


class IncompleteCommandError(ParserError):
    """The line ended before reaching an actionable command."""

    def __init__(self, line: str = ""):
        self.line = line
        if line:
            super().__init__(f"incomplete command: {line}")
        else:
            super().__init__("incomplete command")


class TrailingInputError(ParserError):
    """Words remain after a command that takes no further input."""

    def __init__(self, word: str, position: int = 0):
        self.word = word
        self.position = position
        super().__init__(f"unexpected input: {word}")


class InvalidArgumentError(ParserError):
    """A positional parameter rejected the supplied text."""

    def __init__(self, name: str, value: str, reason: str):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"invalid value '{value}' for {name}: {reason}")


class NegationError(ParserError):
    """The negation keyword was used with a command that is not an edit."""

    def __init__(self, keyword: str):
        self.keyword = keyword
        super().__init__(f"command can't be negated: {keyword}")


# =============================================================================
# Execution Errors
# =============================================================================

class EditConfigError(CliError):
    """A candidate configuration edit was rejected."""
    pass


class CommitError(CliError):
    """The daemon rejected a commit or validation request."""
    pass


class CallbackError(CliError):
    """A command handler failed."""
    pass


# =============================================================================
# Schema Errors
# =============================================================================

class SchemaError(CliError):
    """A schema document or node is malformed."""
    pass


class SchemaValidationError(CliError):
    """A value does not satisfy its schema type."""
    pass


# =============================================================================
# Client Errors
# =============================================================================

class ClientError(CliError):
    """A request to the daemon failed."""
    pass


class ClientConnectionError(ClientError):
    """The daemon could not be reached."""
    pass


class DaemonValidationError(ClientError):
    """The daemon refused a request and returned a validation detail."""
    pass
