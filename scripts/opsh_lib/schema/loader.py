"""
Schema loader for opsh.

Fetches the YANG modules advertised by the daemon, caches them in the modules
directory and compiles them with libyang into SchemaNode handles.
"""

from pathlib import Path
from typing import Optional

import libyang

from opsh_lib.common import warn
from opsh_lib.errors import SchemaError

from .dataclasses import LeafType, NodeKind, SchemaContext, SchemaModule, SchemaNode
from .validation import ValueChecker, ValueChecks, enum_names, placeholder


DATA_KINDS = {
    "container": NodeKind.CONTAINER,
    "list": NodeKind.LIST,
    "leaf": NodeKind.LEAF,
    "leaf-list": NodeKind.LEAF_LIST,
}

UNBOUNDED = 0xFFFFFFFF


def _strip_prefix(segment: str) -> str:
    return segment.split(":")[-1]


def leaf_type(ytype, checker: Optional[ValueChecker] = None) -> LeafType:
    """LeafType for a libyang type."""
    base = ytype.basename()
    enums = enum_names(ytype)
    return LeafType(base, enums=enums, placeholder=placeholder(ytype, enums),
                    checker=checker)


def _choice_of(snode, parent_log_path: str) -> Optional[tuple]:
    """
    (choice, case) for a node declared inside a choice, else None.

    Descriptive schema paths keep the choice and case segments that data
    paths skip. A shorthand case is named after its only node.
    """
    rest = snode.schema_path()[len(parent_log_path):]
    segments = [_strip_prefix(s) for s in rest.split("/") if s]
    between = segments[:-1]
    if len(between) >= 2:
        return between[-2], between[-1]
    if len(between) == 1:
        return between[0], segments[-1]
    return None


def _max_elements(snode) -> Optional[int]:
    value = snode.max_elements()
    if not value or value >= UNBOUNDED:
        return None
    return value


def _children(snode, path: str, lineage: tuple, checks: ValueChecks) -> list[SchemaNode]:
    children = []
    for child in snode:
        if child.keyword() not in DATA_KINDS:
            continue
        try:
            node = build_node(child, checks, path, snode.schema_path(), lineage)
        except SchemaError as e:
            warn(f"Omitting schema node {path}/{child.name()}: {e}")
            continue
        if any(node.name == other.name for other in children):
            warn(f"Omitting schema node {node.path}: name already defined")
            continue
        children.append(node)
    return children


def build_node(snode, checks: ValueChecks, parent_path: str = "",
               parent_log_path: str = "", lineage: tuple = ()) -> SchemaNode:
    """
    Convert a compiled libyang data node, and its subtree.

    Args:
        snode: libyang schema node
        checks: Registry creating the value checkers for leaves
        parent_path: Data path of the parent, "" at the top level
        parent_log_path: Descriptive schema path of the parent
        lineage: (module, name) pairs of the ancestors
    """
    kind = DATA_KINDS.get(snode.keyword())
    if kind is None:
        raise SchemaError(f"unsupported {snode.keyword()} statement")

    name = snode.name()
    module = snode.module().name()
    path = f"{parent_path}/{name}"
    lineage = lineage + ((module, name),)
    config = not snode.config_false()

    node_type = None
    if kind in (NodeKind.LEAF, NodeKind.LEAF_LIST):
        ytype = snode.type()
        checker = None
        if config and ytype.basename() != "empty":
            checker = checks.register(lineage)
        node_type = leaf_type(ytype, checker)

    keys = ()
    children = ()
    if kind in (NodeKind.CONTAINER, NodeKind.LIST):
        children = tuple(_children(snode, path, lineage, checks))
    if kind is NodeKind.LIST:
        keys = tuple(key.name() for key in snode.keys())
        if config and not keys:
            raise SchemaError("configuration list without keys")

    return SchemaNode(
        path=path,
        name=name,
        kind=kind,
        module=module,
        config=config,
        keys=keys,
        type=node_type,
        mandatory=kind is NodeKind.LEAF and snode.mandatory(),
        presence=kind is NodeKind.CONTAINER and bool(snode.presence()),
        max_elements=_max_elements(snode) if kind in (NodeKind.LIST, NodeKind.LEAF_LIST) else None,
        description=snode.description() or "",
        choice=_choice_of(snode, parent_log_path),
        children=children,
    )


def build_rpc(snode, checks: ValueChecks) -> SchemaNode:
    """Convert a libyang rpc. Only leaf inputs are supported."""
    module = snode.module().name()
    path = f"/{snode.name()}"
    inputs = []
    for leaf in snode.input() or ():
        if leaf.keyword() != "leaf":
            raise SchemaError(f"unsupported {leaf.keyword()} input '{leaf.name()}'")
        checker = checks.direct(f"/{module}:{snode.name()}/{leaf.name()}")
        inputs.append(SchemaNode(
            path=f"{path}/{leaf.name()}",
            name=leaf.name(),
            kind=NodeKind.LEAF,
            module=module,
            config=False,
            type=leaf_type(leaf.type(), checker),
            mandatory=leaf.mandatory(),
            description=leaf.description() or "",
        ))

    return SchemaNode(
        path=path,
        name=snode.name(),
        kind=NodeKind.RPC,
        module=module,
        config=False,
        description=snode.description() or "",
        children=tuple(inputs),
    )


def build_module(module, checks: ValueChecks) -> SchemaModule:
    """SchemaModule for a compiled libyang module."""
    name = module.name()
    nodes = []
    rpcs = []
    for snode in module:
        keyword = snode.keyword()
        if keyword == "rpc":
            try:
                rpcs.append(build_rpc(snode, checks))
            except SchemaError as e:
                warn(f"Omitting rpc {name}:{snode.name()}: {e}")
        elif keyword in DATA_KINDS:
            try:
                nodes.append(build_node(snode, checks))
            except SchemaError as e:
                warn(f"Omitting schema node /{snode.name()}: {e}")
    return SchemaModule(name=name, revision=module.revision(), nodes=nodes, rpcs=rpcs)


def build_context(modules: list[SchemaModule]) -> SchemaContext:
    """Combine modules, dropping top-level names already claimed."""
    seen = set()
    seen_rpcs = set()
    for module in modules:
        kept = []
        for node in module.nodes:
            if node.name in seen:
                warn(f"Omitting {module.name}:{node.name}: name already defined")
                continue
            seen.add(node.name)
            kept.append(node)
        module.nodes = kept

        kept_rpcs = []
        for rpc in module.rpcs:
            if rpc.name in seen_rpcs:
                warn(f"Omitting rpc {module.name}:{rpc.name}: name already defined")
                continue
            seen_rpcs.add(rpc.name)
            kept_rpcs.append(rpc)
        module.rpcs = kept_rpcs
    return SchemaContext(modules)


# =============================================================================
# Module Cache
# =============================================================================

def module_filename(name: str, revision: Optional[str]) -> str:
    if revision:
        return f"{name}@{revision}.yang"
    return f"{name}.yang"


def write_cached_module(cache_file: Path, text: str) -> bool:
    try:
        cache_file.write_text(text)
    except OSError as e:
        warn(f"Failed to cache schema module {cache_file.name}: {e}")
        return False
    return True


def _fetch_modules(client, cache_dir: Path) -> list[tuple]:
    """
    Make sure every advertised module is on disk.

    Returns:
        (name, text) pairs; text is None when the module can be loaded
        from cache_dir, or the YANG source when caching failed
    """
    pending = []
    for capability in client.get_capabilities():
        name = capability.get("name")
        revision = capability.get("revision")
        if not name:
            continue

        text = None
        cache_file = cache_dir / module_filename(name, revision)
        if not cache_file.exists():
            text = client.get_schema(name, revision)
            if write_cached_module(cache_file, text):
                text = None
        pending.append((name, text))
    return pending


def load_schema(client, cache_dir: Path) -> SchemaContext:
    """
    Load every module the daemon advertises.

    Modules already present in cache_dir are read from disk; the rest are
    fetched from the daemon and cached for the next run. A module libyang
    rejects is skipped with a warning.

    Args:
        client: Daemon client
        cache_dir: Schema module cache directory

    Returns:
        SchemaContext holding every module that compiled

    Raises:
        SchemaError: If no libyang context can be set up
    """
    pending = _fetch_modules(client, cache_dir)

    try:
        ly_ctx = libyang.Context(search_path=str(cache_dir) if cache_dir.is_dir() else None)
    except libyang.LibyangError as e:
        raise SchemaError(f"cannot create schema context: {e}") from e

    loaded = []
    for name, text in pending:
        try:
            if text is None:
                module = ly_ctx.load_module(name)
            else:
                module = ly_ctx.parse_module_str(text)
        except libyang.LibyangError as e:
            warn(f"Skipping schema module {name}: {e}")
            continue
        loaded.append(module)

    for module in loaded:
        for feature in module.features():
            module.feature_enable(feature.name())

    checks = ValueChecks(ly_ctx)
    modules = [build_module(module, checks) for module in loaded]
    checks.load()
    return build_context(modules)
