"""
Configuration serialization for opsh.

Functions for converting data trees to and from the JSON encoding used by
the daemon, and for rendering them as YAML or as replayable CLI commands.
"""

import copy
import json
import shlex
from typing import Any, Optional

import yaml

from opsh_lib.common import warn
from opsh_lib.errors import SchemaValidationError
from opsh_lib.schema import SchemaContext, SchemaNode

from .datatree import CREATE, DELETE, Change, DataTree, format_path, schema_path


# =============================================================================
# JSON
# =============================================================================

def _value_to_json(value: Any, snode: Optional[SchemaNode], schema: SchemaContext) -> Any:
    if snode is None:
        return copy.deepcopy(value)
    if snode.is_leaf:
        return snode.type.to_json(value)
    if snode.is_leaf_list:
        return [snode.type.to_json(v) for v in value]
    if snode.is_list:
        if isinstance(value, dict) and all(isinstance(k, tuple) for k in value):
            return [_container_to_json(entry, snode, schema) for entry in value.values()]
        # a single entry
        return _container_to_json(value, snode, schema)
    return _container_to_json(value, snode, schema)


def _container_to_json(node: dict, snode: Optional[SchemaNode], schema: SchemaContext) -> dict:
    children = schema.children_of(snode)
    result = {}
    for name, value in node.items():
        result[name] = _value_to_json(value, children.get(name), schema)
    return result


def to_json(tree: DataTree, schema: SchemaContext) -> dict:
    """Encode a data tree as a JSON-ready dict."""
    return _container_to_json(tree.root, None, schema)


def _container_from_json(obj: dict, snode: Optional[SchemaNode],
                         schema: SchemaContext, path: str) -> dict:
    children = schema.children_of(snode)
    node = {}
    for name, value in obj.items():
        child = children.get(name)
        child_path = f"{path}/{name}"
        if child is None or not child.config:
            warn(f"Ignoring unknown configuration node {child_path}")
            continue
        try:
            if child.is_leaf:
                node[name] = child.type.from_json(value)
            elif child.is_leaf_list:
                node[name] = [child.type.from_json(v) for v in value]
            elif child.is_list:
                entries = {}
                for item in value:
                    entry = _container_from_json(item, child, schema, child_path)
                    keys = tuple((k, entry[k]) for k in child.keys)
                    entries[keys] = entry
                if entries:
                    node[name] = entries
            else:
                node[name] = _container_from_json(value, child, schema, child_path)
        except (SchemaValidationError, KeyError, TypeError, AttributeError) as e:
            warn(f"Ignoring invalid configuration node {child_path}: {e}")
    return node


def from_json(data: Optional[dict], schema: SchemaContext) -> DataTree:
    """Decode the daemon's JSON configuration into a data tree."""
    return DataTree(_container_from_json(data or {}, None, schema, ""))


def change_to_json(change: Change, schema: SchemaContext) -> dict:
    """Encode one change for a commit request."""
    encoded = {"operation": change.op, "path": format_path(change.path)}
    if change.op != DELETE:
        snode = schema.find_path(schema_path(change.path))
        encoded["value"] = _value_to_json(change.value, snode, schema)
    return encoded


# =============================================================================
# Pruning
# =============================================================================

def _prune(node: dict, snode: Optional[SchemaNode], schema: SchemaContext) -> None:
    children = schema.children_of(snode)
    for name in list(node):
        value = node[name]
        child = children.get(name)
        if child is None or not isinstance(value, dict):
            continue
        if child.is_list:
            for entry in value.values():
                _prune(entry, child, schema)
        elif child.is_container:
            _prune(value, child, schema)
            if not value and not child.presence:
                del node[name]


def pruned(tree: DataTree, schema: SchemaContext) -> DataTree:
    """Copy of tree without empty non-presence containers."""
    result = tree.copy()
    _prune(result.root, None, schema)
    return result


# =============================================================================
# Rendering
# =============================================================================

def _quote(text: str) -> str:
    return shlex.quote(text) if text else "''"


def _cli_lines(node: dict, snode: Optional[SchemaNode], schema: SchemaContext,
               words: list, lines: list) -> None:
    for child in schema.children_of(snode).values():
        if child.name not in node or (snode is not None and snode.is_key(child)):
            continue
        value = node[child.name]
        if child.is_leaf:
            if child.type.base == "empty":
                lines.append(" ".join(words + [child.name]))
            else:
                lines.append(" ".join(words + [child.name, _quote(value)]))
        elif child.is_leaf_list:
            for item in value:
                lines.append(" ".join(words + [child.name, _quote(item)]))
        elif child.is_list:
            for keys, entry in value.items():
                entry_words = words + [child.name] + [_quote(v) for _, v in keys]
                before = len(lines)
                _cli_lines(entry, child, schema, entry_words, lines)
                if len(lines) == before:
                    lines.append(" ".join(entry_words))
        else:
            before = len(lines)
            _cli_lines(value, child, schema, words + [child.name], lines)
            if len(lines) == before:
                lines.append(" ".join(words + [child.name]))


def to_cli_lines(tree: DataTree, schema: SchemaContext) -> list[str]:
    """Render a tree as configuration commands that recreate it."""
    lines: list[str] = []
    _cli_lines(tree.root, None, schema, [], lines)
    return lines


def to_yaml(tree: DataTree, schema: SchemaContext) -> str:
    return yaml.safe_dump(to_json(tree, schema), sort_keys=False, default_flow_style=False)


def render_config(tree: DataTree, schema: SchemaContext, fmt: str = "cli") -> str:
    """Render a configuration in the requested format (cli, json or yaml)."""
    if fmt == "json":
        return json.dumps(to_json(tree, schema), indent=2)
    if fmt == "yaml":
        return to_yaml(tree, schema).rstrip("\n")
    return "\n".join(to_cli_lines(tree, schema))


def render_changes(changes: list[Change], schema: SchemaContext) -> str:
    """Render a diff, one line per change."""
    markers = {CREATE: "+", DELETE: "-"}
    lines = []
    for change in changes:
        marker = markers.get(change.op, "~")
        line = f"{marker} {format_path(change.path)}"
        if change.op != DELETE:
            value = change_to_json(change, schema)["value"]
            line += f" {json.dumps(value)}"
        lines.append(line)
    return "\n".join(lines)
