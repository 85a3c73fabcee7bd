"""
Command tree for the opsh REPL.

The tree holds every command the grammar accepts. The built-in part comes
from the declarative table in menu.py; the configuration part is generated
from the daemon's schema. A Commands object is never patched once built: a
schema change produces a new one (see Commands.generate).
"""

import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, Union

from opsh_lib.common import warn
from opsh_lib.errors import ParserError, SchemaError
from opsh_lib.schema import LeafType, SchemaContext, SchemaNode

from .commands import CALLBACKS, cmd_rpc
from .menu import build_command_tree
from .session import CommandMode, Operational


def argument_type(data) -> LeafType:
    """LeafType for a built-in command argument: "string" or {"base", "enums"}."""
    if isinstance(data, str):
        return LeafType(data)
    enums = tuple(data.get("enums", ()))
    return LeafType(data["base"], enums=enums, placeholder="|".join(enums) or "WORD")


class TokenKind(Enum):
    """Grammar symbol kinds."""
    WORD = "word"  # literal keyword
    PARAM = "param"  # typed positional parameter


@dataclass(frozen=True)
class ConfigEdit:
    """Edit the candidate configuration at a schema node."""
    snode: SchemaNode


@dataclass(frozen=True)
class Callback:
    """Run the handler registered under name."""
    name: str


Action = Union[ConfigEdit, Callback]


@dataclass(eq=False)
class CommandNode:
    """One grammar symbol."""
    kind: TokenKind
    name: str
    help: str = ""
    argtype: Optional[LeafType] = None
    action: Optional[Action] = None
    negate_only: bool = False  # action reachable here only when negated
    snode: Optional[SchemaNode] = None
    id: int = -1
    keywords: dict = field(default_factory=dict)
    params: list = field(default_factory=list)

    def add(self, child: "CommandNode") -> "CommandNode":
        if child.kind is TokenKind.WORD:
            if child.name in self.keywords:
                raise SchemaError(f"duplicate command '{child.name}'")
            self.keywords[child.name] = child
        else:
            self.params.append(child)
        return child

    def children(self) -> list["CommandNode"]:
        return list(self.keywords.values()) + self.params

    def walk(self) -> Iterator["CommandNode"]:
        yield self
        for child in self.children():
            yield from child.walk()

    @property
    def label(self) -> str:
        """Text shown in help: keyword, or the parameter's accepted values."""
        if self.kind is TokenKind.WORD:
            return self.name
        placeholder = self.argtype.placeholder if self.argtype else ""
        if placeholder in ("", "WORD"):
            return self.name.upper()
        return placeholder

    @property
    def enters_context(self) -> bool:
        return isinstance(self.action, ConfigEdit) and self.action.snode.is_context


class Commands:
    """The command tree plus the callback table."""

    def __init__(self):
        self.tokens: list[CommandNode] = []
        self.callbacks: dict[str, Callable] = {}
        self.schema_tokens: dict[SchemaNode, CommandNode] = {}
        self.schema: Optional[SchemaContext] = None

        self.exec_root = self._register(CommandNode(TokenKind.WORD, "exec"))
        self.config_root = self._register(CommandNode(TokenKind.WORD, "configure"))
        self.config_default = self._register(CommandNode(TokenKind.WORD, "config-default"))

    @classmethod
    def generate(cls, schema: Optional[SchemaContext] = None) -> "Commands":
        """Build a complete tree for a schema."""
        commands = cls()
        commands.build()
        if schema is not None:
            commands.extend_from_schema(schema)
        return commands

    def _register(self, token: CommandNode) -> CommandNode:
        for node in token.walk():
            node.id = len(self.tokens)
            self.tokens.append(node)
        return token

    def lookup_token(self, token_id: int) -> CommandNode:
        return self.tokens[token_id]

    def callback(self, name: str) -> Callable:
        return self.callbacks[name]

    def scope(self, mode: CommandMode) -> CommandNode:
        """Node whose children are legal in the given mode."""
        if isinstance(mode, Operational):
            return self.exec_root
        if not mode.path:
            return self.config_root
        token = self.schema_tokens.get(mode.path[-1].snode)
        if token is None:
            raise ParserError(f"unknown configuration context: {mode.path[-1].snode.path}")
        return token

    # =========================================================================
    # Built-in commands
    # =========================================================================

    def build(self) -> None:
        """Add the built-in commands."""
        tree = build_command_tree()
        for root, section in ((self.exec_root, "exec"), (self.config_default, "config")):
            for name, entry in tree[section]["children"].items():
                token = root.add(self._gen_builtin(name, entry))
                self._register(token)

    def _gen_builtin(self, name: str, entry: dict, kind: TokenKind = TokenKind.WORD,
                     argtype: Optional[LeafType] = None) -> CommandNode:
        token = CommandNode(kind, name, help=entry.get("help", ""), argtype=argtype)

        cmd = entry.get("cmd")
        if cmd:
            if cmd not in CALLBACKS:
                raise ValueError(f"no handler registered for '{cmd}'")
            self.callbacks[cmd] = CALLBACKS[cmd]
            token.action = Callback(cmd)

        for child_name, child in entry.get("children", {}).items():
            token.add(self._gen_builtin(child_name, child))
        for arg in entry.get("args", []):
            arg_type = argument_type(arg["type"])
            token.add(self._gen_builtin(arg["name"], arg, TokenKind.PARAM, arg_type))
        return token

    # =========================================================================
    # Schema-derived commands
    # =========================================================================

    def extend_from_schema(self, schema: SchemaContext) -> None:
        """Add configuration commands and RPC commands for a schema."""
        self.schema = schema

        for snode in schema.top_level():
            if snode.config:
                self._attach(self.config_root, snode, self._gen_config_token)

        rpcs = schema.rpcs()
        if rpcs:
            rpc_root = self.exec_root.keywords.get("rpc")
            if rpc_root is None:
                rpc_root = self._register(self.exec_root.add(
                    CommandNode(TokenKind.WORD, "rpc", help="Invoke an operational RPC")
                ))
            for rpc in rpcs:
                self._attach(rpc_root, rpc, self._gen_rpc_token)

    def _attach(self, parent: CommandNode, snode: SchemaNode, generate: Callable) -> None:
        """Generate the subtree for snode; on failure report it and skip it."""
        mapping: dict = {}
        callbacks: dict = {}
        try:
            token = generate(snode, mapping, callbacks)
            parent.add(token)
        except SchemaError as e:
            warn(f"Omitting commands for {snode.path}: {e}")
            return
        self._register(token)
        self.schema_tokens.update(mapping)
        self.callbacks.update(callbacks)

    def _gen_config_token(self, snode: SchemaNode, mapping: dict,
                          callbacks: dict) -> CommandNode:
        help = snode.description

        if snode.is_container:
            token = CommandNode(TokenKind.WORD, snode.name, help or f"Configure {snode.name}",
                                action=ConfigEdit(snode), snode=snode)
            self._gen_config_children(token, snode, mapping, callbacks)
            mapping[snode] = token
            return token

        if snode.is_list:
            token = CommandNode(TokenKind.WORD, snode.name, help or f"Configure {snode.name}",
                                snode=snode)
            last = token
            for key in snode.key_nodes():
                if key is None or key.type is None:
                    raise SchemaError(f"list {snode.name} has an invalid key")
                last = last.add(CommandNode(TokenKind.PARAM, key.name,
                                            key.description or key.type.placeholder,
                                            argtype=key.type, snode=key))
            if last is token:
                raise SchemaError(f"list {snode.name} has no keys")
            last.action = ConfigEdit(snode)
            self._gen_config_children(last, snode, mapping, callbacks)
            mapping[snode] = last
            return token

        if snode.is_leaf or snode.is_leaf_list:
            if snode.type is None:
                raise SchemaError(f"{snode.name} has no type")
            token = CommandNode(TokenKind.WORD, snode.name, help or f"Set {snode.name}",
                                action=ConfigEdit(snode), snode=snode)
            if not (snode.is_leaf and snode.type.base == "empty"):
                token.negate_only = True
                token.add(CommandNode(TokenKind.PARAM, snode.name, snode.type.placeholder,
                                      argtype=snode.type, action=ConfigEdit(snode),
                                      snode=snode))
            return token

        raise SchemaError(f"{snode.name} is not configurable")

    def _gen_config_children(self, token: CommandNode, snode: SchemaNode,
                             mapping: dict, callbacks: dict) -> None:
        for child in snode.children:
            if not child.config or snode.is_key(child):
                continue
            child_mapping: dict = {}
            try:
                token.add(self._gen_config_token(child, child_mapping, callbacks))
            except SchemaError as e:
                warn(f"Omitting commands for {child.path}: {e}")
                continue
            mapping.update(child_mapping)

    def _gen_rpc_token(self, rpc: SchemaNode, mapping: dict,
                       callbacks: dict) -> CommandNode:
        """
        rpc NAME [INPUT VALUE]...

        Input leaves are chained in schema order; the command is complete
        once every mandatory input has been given.
        """
        name = f"rpc:{rpc.path}"
        action = Callback(name)
        token = CommandNode(TokenKind.WORD, rpc.name, rpc.description or f"Invoke {rpc.name}",
                            snode=rpc)

        inputs = list(rpc.children)
        last_mandatory = max((i for i, leaf in enumerate(inputs) if leaf.mandatory), default=-1)
        if last_mandatory < 0:
            token.action = action

        last = token
        for i, leaf in enumerate(inputs):
            if leaf.type is None or leaf.type.base == "empty":
                raise SchemaError(f"unsupported input '{leaf.name}'")
            keyword = last.add(CommandNode(TokenKind.WORD, leaf.name,
                                           leaf.description or f"Set {leaf.name}", snode=leaf))
            last = keyword.add(CommandNode(TokenKind.PARAM, leaf.name, leaf.type.placeholder,
                                           argtype=leaf.type, snode=leaf))
            if i >= last_mandatory:
                last.action = action

        callbacks[name] = functools.partial(cmd_rpc, rpc)
        return token
