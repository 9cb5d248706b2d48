"""Name-extraction strategies for declaration-like grammar constructs.

A strategy takes a grammar node and the source bytes and returns
``(name, name_node)``. ``name_node`` is the child that supplied the name,
so the normalizer can leave it out of the node's children; it is None
when the name is synthesized or taken from the node's own text.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Node = Any  # tree_sitter.Node
Namer = Callable[[Node, bytes], tuple[str | None, Node | None]]

IDENTIFIER_KINDS = frozenset(
    {
        "identifier",
        "type_identifier",
        "field_identifier",
        "property_identifier",
        "package_identifier",
        "namespace_identifier",
        "private_property_identifier",
        "shorthand_property_identifier",
    }
)

# Fields that hold the declared entity, in lookup order
NAME_FIELDS = ("name", "declarator", "pattern", "left")

# Never look for a declaration's name inside its body or argument lists
STOP_KINDS = frozenset(
    {
        "block",
        "statement_block",
        "compound_statement",
        "class_body",
        "declaration_list",
        "field_declaration_list",
        "argument_list",
        "arguments",
        "parameter_list",
        "formal_parameters",
        "parameters",
    }
)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def find_identifier(
    node: Node, kinds: frozenset[str] = IDENTIFIER_KINDS, stop: frozenset[str] = STOP_KINDS
) -> Node | None:
    """Depth-first search for the identifier naming ``node``.

    Named fields are tried first, then immediate children, then nested
    children outside of bodies and parameter lists.
    """
    for field_name in NAME_FIELDS:
        child = node.child_by_field_name(field_name)
        if child is None:
            continue
        if child.type in kinds:
            return child
        if child.type not in stop:
            found = find_identifier(child, kinds, stop)
            if found is not None:
                return found

    for child in node.named_children:
        if child.type in kinds:
            return child

    for child in node.named_children:
        if child.type in stop:
            continue
        found = find_identifier(child, kinds, stop)
        if found is not None:
            return found
    return None


def declared_name(node: Node, source: bytes) -> tuple[str | None, Node | None]:
    """Name of a function, class, parameter or variable declaration."""
    ident = find_identifier(node)
    if ident is None:
        return None, None
    return node_text(ident, source), ident


def own_text(node: Node, source: bytes) -> tuple[str | None, Node | None]:
    return node_text(node, source), None


def fixed(value: str) -> Namer:
    def namer(node: Node, source: bytes) -> tuple[str | None, Node | None]:
        return value, None

    return namer


def prefixed(
    prefix: str,
    default: str | None = None,
    kinds: frozenset[str] = IDENTIFIER_KINDS,
    strip: str = "",
) -> Namer:
    """``prefix + identifier`` with ``strip`` characters replaced by ``_``."""

    def namer(node: Node, source: bytes) -> tuple[str | None, Node | None]:
        ident = find_identifier(node, kinds)
        if ident is None:
            return default, None
        text = node_text(ident, source)
        for ch in strip:
            text = text.replace(ch, "_")
        return f"{prefix}{text}", ident

    return namer
