"""
Configuration session for the opsh REPL.

This module contains:
- Operational / Configure: the command modes
- ConfigContext: one entered container or list entry
- Session: mode, candidate and running configuration, commit
"""

from dataclasses import dataclass
from typing import Optional, Union

from opsh_lib.client import Client
from opsh_lib.config import (
    DEFAULT_HOSTNAME,
    HOSTNAME_PATH,
    DataTree,
    PathSegment,
    change_to_json,
    from_json,
    parse_path,
    pruned,
    to_json,
)
from opsh_lib.errors import ClientError, CommitError, EditConfigError, SchemaValidationError
from opsh_lib.schema import SchemaContext, SchemaNode


@dataclass(frozen=True)
class ConfigContext:
    """An entered container, or list entry with its key values."""
    snode: SchemaNode
    keys: tuple = ()  # ((key, value), ...)

    def segment(self) -> PathSegment:
        return PathSegment(self.snode.name, self.keys)


@dataclass(frozen=True)
class Operational:
    """Operational mode."""


@dataclass(frozen=True)
class Configure:
    """Configuration mode at a nested context path."""
    path: tuple = ()  # (ConfigContext, ...)

    def push(self, context: ConfigContext) -> "Configure":
        return Configure(self.path + (context,))

    def pop(self) -> "Configure":
        return Configure(self.path[:-1])

    @property
    def context(self) -> Optional[ConfigContext]:
        return self.path[-1] if self.path else None

    def data_path(self) -> tuple:
        return tuple(ctx.segment() for ctx in self.path)


CommandMode = Union[Operational, Configure]


class Session:
    """State of one operator session."""

    def __init__(self, client: Client, schema: SchemaContext, running: DataTree,
                 use_pager: bool = True):
        self.client = client
        self.schema = schema
        self.running = running
        self.candidate = running.copy()
        self.mode: CommandMode = Operational()
        self.hostname = DEFAULT_HOSTNAME
        self.use_pager = use_pager

    # =========================================================================
    # Modes
    # =========================================================================

    def mode_set(self, mode: CommandMode) -> None:
        self.mode = mode

    def enter_configure(self) -> None:
        self.mode = Configure()

    def exit_level(self) -> None:
        """Leave the innermost context, or configuration mode at its root."""
        if isinstance(self.mode, Configure) and self.mode.path:
            self.mode = self.mode.pop()
        else:
            self.mode = Operational()

    def end(self) -> None:
        self.mode = Operational()

    def set_schema(self, schema: SchemaContext) -> None:
        """Install a reloaded schema. Nested contexts don't survive it."""
        self.schema = schema
        if isinstance(self.mode, Configure) and self.mode.path:
            self.mode = Configure()

    def prompt(self) -> str:
        if isinstance(self.mode, Operational):
            return f"{self.hostname}# "
        context = self.mode.context
        if context is None:
            return f"{self.hostname}(config)# "
        name = "-".join([context.snode.name] + [value for _, value in context.keys])
        return f"{self.hostname}(config-{name})# "

    # =========================================================================
    # Candidate editing
    # =========================================================================

    @staticmethod
    def _take_value(snode: SchemaNode, args: list) -> str:
        if not args:
            raise EditConfigError(f"missing value for {snode.name}")
        _, text = args.pop(0)
        try:
            return snode.type.canonicalize(text)
        except SchemaValidationError as e:
            raise EditConfigError(f"invalid value '{text}' for {snode.name}: {e}") from e

    def edit_candidate(self, negate: bool, snode: SchemaNode, args: list) -> None:
        """
        Apply one configuration command to the candidate.

        Args:
            negate: True to delete instead of set
            snode: Schema node the command targets
            args: (name, value) pairs: list keys first, then the leaf value

        Raises:
            EditConfigError: if the edit is rejected (nothing is changed)
        """
        if not isinstance(self.mode, Configure):
            raise EditConfigError("not in configuration mode")
        if not snode.config:
            raise EditConfigError(f"{snode.name} is not a configuration node")

        context = self.mode.context
        chain = self.schema.ancestors(snode, context.snode if context else None)
        if not chain:
            raise EditConfigError(f"{snode.name} is not reachable from here")

        # Resolve the data path and every value before touching the tree
        args = list(args)
        base = self.mode.data_path()
        contexts = []
        segments = ()
        for node in chain:
            keys = ()
            if node.is_list:
                keys = tuple((key.name, self._take_value(key, args)) for key in node.key_nodes())
            if node.is_context:
                contexts.append(ConfigContext(node, keys))
            segments += (PathSegment(node.name, keys),)
        path = base + segments

        value = None
        if snode.is_leaf and snode.type.base == "empty":
            value = ""
        elif snode.is_leaf or snode.is_leaf_list:
            if args:
                value = self._take_value(snode, args)
            elif not negate:
                raise EditConfigError(f"missing value for {snode.name}")
        if args:
            raise EditConfigError(f"unexpected argument: {args[0][1]}")

        if negate:
            self._delete(snode, path, value)
            return

        self._check_cardinality(chain, base, segments, value)
        self._set(snode, chain, base, segments, value)
        if snode.is_context:
            for ctx in contexts:
                self.mode = self.mode.push(ctx)

    def _check_cardinality(self, chain: list, base: tuple, segments: tuple,
                           value: Optional[str]) -> None:
        for i, node in enumerate(chain):
            if node.max_elements is None:
                continue
            path = base + segments[:i + 1]
            if node.is_list:
                entries = self.candidate.find(path[:-1] + (PathSegment(node.name),)) or {}
                if path[-1].keys not in entries and len(entries) >= node.max_elements:
                    raise EditConfigError(
                        f"too many {node.name} entries (max-elements {node.max_elements})"
                    )
            elif node.is_leaf_list:
                values = self.candidate.find(path) or []
                if value not in values and len(values) >= node.max_elements:
                    raise EditConfigError(
                        f"too many {node.name} values (max-elements {node.max_elements})"
                    )

    def _clear_other_cases(self, node: SchemaNode, parent_path: tuple) -> None:
        """Remove data of the cases of node's choice that node is not in."""
        choice, case = node.choice
        for sibling in self.schema.children_of(self.schema.parent(node)).values():
            if sibling.choice and sibling.choice[0] == choice and sibling.choice[1] != case:
                self.candidate.remove(parent_path + (PathSegment(sibling.name),))

    def _set(self, snode: SchemaNode, chain: list, base: tuple, segments: tuple,
             value: Optional[str]) -> None:
        for i, node in enumerate(chain):
            if node.choice:
                self._clear_other_cases(node, base + segments[:i])

        path = base + segments
        if snode.is_context:
            self.candidate.ensure(path)
        elif snode.is_leaf:
            self.candidate.set_value(path, value)
        else:
            values = list(self.candidate.find(path) or [])
            if value not in values:
                values.append(value)
            self.candidate.set_value(path, values)

    def _delete(self, snode: SchemaNode, path: tuple, value: Optional[str]) -> None:
        if snode.is_leaf_list and value is not None:
            values = self.candidate.find(path)
            if not values or value not in values:
                return
            remaining = [v for v in values if v != value]
            if remaining:
                self.candidate.set_value(path, remaining)
            else:
                self.candidate.remove(path)
            return
        self.candidate.remove(path)

    # =========================================================================
    # Commit
    # =========================================================================

    def changes(self) -> list:
        """Differences between running and candidate."""
        return pruned(self.running, self.schema).diff(pruned(self.candidate, self.schema))

    def has_changes(self) -> bool:
        return bool(self.changes())

    def candidate_commit(self, comment: Optional[str] = None) -> Optional[int]:
        """
        Submit the candidate's changes to the daemon as one transaction.

        Returns:
            Transaction id reported by the daemon, or None

        Raises:
            CommitError: if the daemon rejects the changes (state is unchanged)
        """
        running = pruned(self.running, self.schema)
        changes = running.diff(pruned(self.candidate, self.schema))
        if not changes:
            return None

        try:
            transaction_id = self.client.commit(
                [change_to_json(change, self.schema) for change in changes], comment
            )
        except ClientError as e:
            raise CommitError(str(e)) from e

        running.apply(changes)
        self.running = running
        self.candidate = running.copy()
        return transaction_id

    def candidate_validate(self) -> None:
        try:
            self.client.validate(to_json(pruned(self.candidate, self.schema), self.schema))
        except ClientError as e:
            raise CommitError(str(e)) from e

    def candidate_rollback(self) -> None:
        self.candidate = self.running.copy()

    def update_hostname(self) -> None:
        """Read the hostname from the daemon; keep the old one on failure."""
        try:
            tree = from_json(self.client.get_running_config(), self.schema)
        except ClientError:
            return
        hostname = tree.find(parse_path(HOSTNAME_PATH))
        if isinstance(hostname, str) and hostname:
            self.hostname = hostname
