"""
opsh_lib.schema - Data model advertised by the daemon.

This package contains:
- dataclasses: SchemaNode, LeafType and the SchemaContext lookup object
- validation: libyang-backed value checks and JSON value encoding
- loader: YANG module cache and libyang compilation into SchemaNodes
"""

from .dataclasses import (
    NodeKind,
    LeafType,
    SchemaNode,
    SchemaModule,
    SchemaContext,
    iter_subtree,
)

from .loader import (
    leaf_type,
    build_node,
    build_rpc,
    build_module,
    build_context,
    load_schema,
)

__all__ = [
    'NodeKind',
    'LeafType',
    'SchemaNode',
    'SchemaModule',
    'SchemaContext',
    'iter_subtree',
    'leaf_type',
    'build_node',
    'build_rpc',
    'build_module',
    'build_context',
    'load_schema',
]
