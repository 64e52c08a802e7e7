"""Document tree model shared by the parser, schema builder and validator.

Key Components:
    Node: Element or ``#text`` run with attributes, text and owned children
    TEXT_NODE_NAME: Sentinel name marking synthetic text children
"""

from .node import (
    TEXT_NODE_NAME,
    Node,
    is_namespace_declaration,
    local_name,
    split_qualified_name,
)

__all__ = [
    "TEXT_NODE_NAME",
    "Node",
    "is_namespace_declaration",
    "local_name",
    "split_qualified_name",
]
