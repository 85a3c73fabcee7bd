"""
Schema node dataclasses for opsh.

These describe the data model advertised by the daemon. A SchemaNode is an
immutable handle: two references to the same node compare and hash equal by
schema path, so nodes can be used as dictionary keys and copied freely.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from opsh_lib.errors import SchemaValidationError

from .validation import ValueChecker, text_value


class NodeKind(Enum):
    """Kinds of schema nodes the shell understands."""
    CONTAINER = "container"
    LIST = "list"
    LEAF = "leaf"
    LEAF_LIST = "leaf-list"
    RPC = "rpc"


@dataclass(frozen=True)
class LeafType:
    """Type of a leaf, leaf-list or command parameter."""
    base: str
    enums: tuple = ()
    placeholder: str = "WORD"
    checker: Optional[ValueChecker] = field(default=None, compare=False, repr=False)

    def canonicalize(self, text: str) -> str:
        """
        Check operator input.

        Raises:
            SchemaValidationError: If the value does not satisfy the type
        """
        if self.checker is not None:
            return text_value(self.checker.check(text))
        if self.enums and text not in self.enums:
            raise SchemaValidationError(f"must be one of: {', '.join(self.enums)}")
        return text

    def to_json(self, text: str) -> Any:
        if self.base == "empty":
            return [None]
        if self.checker is not None:
            return self.checker.check(text)
        return text

    def from_json(self, value: Any) -> str:
        if self.base == "empty":
            return ""
        return self.canonicalize(text_value(value))


@dataclass(frozen=True)
class SchemaNode:
    """A named, typed element of the daemon's data model."""
    path: str
    name: str = field(compare=False)
    kind: NodeKind = field(compare=False)
    module: str = field(default="", compare=False)
    config: bool = field(default=True, compare=False)
    keys: tuple = field(default=(), compare=False)
    type: Optional[LeafType] = field(default=None, compare=False)
    mandatory: bool = field(default=False, compare=False)
    presence: bool = field(default=False, compare=False)
    max_elements: Optional[int] = field(default=None, compare=False)
    description: str = field(default="", compare=False, repr=False)
    choice: Optional[tuple] = field(default=None, compare=False)  # (choice, case)
    children: tuple = field(default=(), compare=False, repr=False)

    @property
    def is_container(self) -> bool:
        return self.kind is NodeKind.CONTAINER

    @property
    def is_list(self) -> bool:
        return self.kind is NodeKind.LIST

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def is_leaf_list(self) -> bool:
        return self.kind is NodeKind.LEAF_LIST

    @property
    def is_context(self) -> bool:
        """Containers and lists are entered as configuration contexts."""
        return self.kind in (NodeKind.CONTAINER, NodeKind.LIST)

    @property
    def parent_path(self) -> Optional[str]:
        parent = self.path.rsplit("/", 1)[0]
        return parent or None

    def child(self, name: str) -> Optional["SchemaNode"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def key_nodes(self) -> list["SchemaNode"]:
        return [self.child(name) for name in self.keys]

    def is_key(self, child: "SchemaNode") -> bool:
        return self.is_list and child.name in self.keys


@dataclass
class SchemaModule:
    """One module advertised by the daemon."""
    name: str
    revision: Optional[str] = None
    nodes: list[SchemaNode] = field(default_factory=list)
    rpcs: list[SchemaNode] = field(default_factory=list)


def iter_subtree(snode: SchemaNode) -> Iterator[SchemaNode]:
    """Iterate depth first for the subtree rooted at snode."""
    yield snode
    for child in snode.children:
        yield from iter_subtree(child)


class SchemaContext:
    """
    Loaded schema set.

    Built once at startup and shared read-only by the command tree, the
    session and the serializers.
    """

    def __init__(self, modules: list[SchemaModule]):
        self.modules = list(modules)
        self._top: dict[str, SchemaNode] = {}
        self._rpcs: dict[str, SchemaNode] = {}
        self._nodes: dict[str, SchemaNode] = {}

        for module in self.modules:
            for snode in module.nodes:
                self._top[snode.name] = snode
                for node in iter_subtree(snode):
                    self._nodes[node.path] = node
            for rpc in module.rpcs:
                self._rpcs[rpc.path] = rpc

    def __iter__(self) -> Iterator[SchemaNode]:
        return iter(self._nodes.values())

    def top_level(self) -> list[SchemaNode]:
        return list(self._top.values())

    def rpcs(self) -> list[SchemaNode]:
        return list(self._rpcs.values())

    def find_path(self, path: str) -> Optional[SchemaNode]:
        return self._nodes.get(path)

    def parent(self, snode: SchemaNode) -> Optional[SchemaNode]:
        parent_path = snode.parent_path
        if parent_path is None:
            return None
        return self._nodes.get(parent_path)

    def children_of(self, snode: Optional[SchemaNode]) -> dict[str, SchemaNode]:
        """Children by name; None stands for the schema root."""
        if snode is None:
            return dict(self._top)
        return {child.name: child for child in snode.children}

    def ancestors(self, snode: SchemaNode,
                  base: Optional[SchemaNode] = None) -> Optional[list[SchemaNode]]:
        """
        Schema nodes from just below base down to snode, inclusive.

        Returns None if snode is not a descendant of base.
        """
        chain = []
        node = snode
        while node is not None and node != base:
            chain.append(node)
            node = self.parent(node)
        if node != base:
            return None
        chain.reverse()
        return chain
