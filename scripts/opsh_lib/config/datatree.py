"""
Configuration data tree for opsh.

A DataTree holds configured values at schema positions. Containers are
dicts keyed by child name, lists are dicts keyed by the tuple of
(key, value) pairs of each entry, leaves hold canonical text and
leaf-lists hold lists of canonical text.
"""

import copy
import re
from dataclasses import dataclass
from typing import Any, Optional


CREATE = "create"
REPLACE = "replace"
DELETE = "delete"


@dataclass(frozen=True)
class PathSegment:
    """One step of a data path: a node name plus list key values."""
    name: str
    keys: tuple = ()  # ((key, value), ...)

    def __str__(self) -> str:
        preds = "".join(f"[{k}='{v}']" for k, v in self.keys)
        return f"{self.name}{preds}"


def format_path(path) -> str:
    """Render a data path as /a/b[k='v']/c."""
    if not path:
        return "/"
    return "".join(f"/{seg}" for seg in path)


_SEGMENT_RE = re.compile(r"([^/\[\]]+)((?:\[[^\]=]+=(?:'[^']*'|\"[^\"]*\")\])*)")
_PREDICATE_RE = re.compile(r"\[([^\]=]+)=(?:'([^']*)'|\"([^\"]*)\")\]")


def parse_path(text: str) -> tuple:
    """
    Parse /a/b[k='v']/c into a tuple of PathSegments.

    Raises:
        ValueError: if the text is not a valid data path
    """
    if not text.startswith("/"):
        raise ValueError(f"data path must start with '/': {text}")
    if text == "/":
        return ()

    segments = []
    pos = 1
    while pos <= len(text):
        match = _SEGMENT_RE.match(text, pos)
        if not match:
            raise ValueError(f"invalid data path: {text}")
        keys = tuple(
            (k, v1 if v1 != "" or v2 == "" else v2)
            for k, v1, v2 in _PREDICATE_RE.findall(match.group(2))
        )
        segments.append(PathSegment(match.group(1), keys))
        pos = match.end()
        if pos == len(text):
            break
        if text[pos] != "/":
            raise ValueError(f"invalid data path: {text}")
        pos += 1
    return tuple(segments)


def schema_path(path) -> str:
    """Schema path for a data path (key predicates dropped)."""
    return "".join(f"/{seg.name}" for seg in path)


@dataclass
class Change:
    """One difference between two trees."""
    op: str
    path: tuple
    value: Any = None


def _is_list(value) -> bool:
    return isinstance(value, dict) and bool(value) and all(
        isinstance(k, tuple) for k in value
    )


class DataTree:
    """A candidate or running configuration."""

    def __init__(self, root: Optional[dict] = None):
        self.root = root if root is not None else {}

    def __eq__(self, other) -> bool:
        if not isinstance(other, DataTree):
            return NotImplemented
        return self.root == other.root

    def __repr__(self) -> str:
        return f"DataTree({self.root!r})"

    def copy(self) -> "DataTree":
        return DataTree(copy.deepcopy(self.root))

    def is_empty(self) -> bool:
        return not self.root

    def find(self, path) -> Any:
        """Value at path, or None when absent."""
        node = self.root
        for seg in path:
            if not isinstance(node, dict) or _is_list(node):
                return None
            node = node.get(seg.name)
            if seg.keys:
                if not _is_list(node):
                    return None
                node = node.get(seg.keys)
            if node is None:
                return None
        return node

    def exists(self, path) -> bool:
        return self.find(path) is not None

    def ensure(self, path) -> dict:
        """Container or list entry at path, creating everything on the way."""
        node = self.root
        for seg in path:
            if seg.keys:
                entries = node.get(seg.name)
                if not _is_list(entries):
                    entries = {}
                    node[seg.name] = entries
                entry = entries.get(seg.keys)
                if entry is None:
                    entry = dict(seg.keys)
                    entries[seg.keys] = entry
                node = entry
            else:
                child = node.get(seg.name)
                if not isinstance(child, dict) or _is_list(child):
                    child = {}
                    node[seg.name] = child
                node = child
        return node

    def set_value(self, path, value) -> None:
        """Set a leaf (text) or leaf-list (list of text) at path."""
        if not path or path[-1].keys:
            raise ValueError(f"not a leaf path: {format_path(path)}")
        parent = self.ensure(path[:-1])
        parent[path[-1].name] = value

    def remove(self, path) -> bool:
        """Remove the node at path. Returns True if something was removed."""
        if not path:
            removed = bool(self.root)
            self.root = {}
            return removed

        parent = self.find(path[:-1]) if len(path) > 1 else self.root
        if not isinstance(parent, dict) or _is_list(parent):
            return False

        last = path[-1]
        if last.keys:
            entries = parent.get(last.name)
            if not _is_list(entries) or last.keys not in entries:
                return False
            del entries[last.keys]
            if not entries:
                del parent[last.name]
            return True

        if last.name not in parent:
            return False
        del parent[last.name]
        return True

    # =========================================================================
    # Diff
    # =========================================================================

    def diff(self, new: "DataTree") -> list[Change]:
        """Changes that turn this tree into new."""
        changes: list[Change] = []
        _diff_container(self.root, new.root, (), changes)
        return changes

    def apply(self, changes: list[Change]) -> None:
        for change in changes:
            if change.op == DELETE:
                self.remove(change.path)
                continue

            last = change.path[-1]
            parent = self.ensure(change.path[:-1])
            value = copy.deepcopy(change.value)
            if last.keys:
                entries = parent.get(last.name)
                if not _is_list(entries):
                    entries = {}
                    parent[last.name] = entries
                entries[last.keys] = value
            else:
                parent[last.name] = value


def _diff_container(old: dict, new: dict, path: tuple, changes: list) -> None:
    for name in sorted(set(old) | set(new)):
        _diff_node(old.get(name), new.get(name), path + (PathSegment(name),), changes)


def _diff_node(old, new, path: tuple, changes: list) -> None:
    if old == new:
        return

    if _is_list(old) or _is_list(new):
        if (old is not None and not _is_list(old)) or (new is not None and not _is_list(new)):
            changes.append(Change(DELETE, path))
            changes.append(Change(CREATE, path, copy.deepcopy(new)))
            return
        old = old or {}
        new = new or {}
        name = path[-1].name
        for keys in sorted(set(old) | set(new)):
            entry_path = path[:-1] + (PathSegment(name, keys),)
            _diff_node(old.get(keys), new.get(keys), entry_path, changes)
        return

    if old is None:
        changes.append(Change(CREATE, path, copy.deepcopy(new)))
    elif new is None:
        changes.append(Change(DELETE, path))
    elif isinstance(old, dict) and isinstance(new, dict):
        _diff_container(old, new, path, changes)
    else:
        changes.append(Change(REPLACE, path, copy.deepcopy(new)))
