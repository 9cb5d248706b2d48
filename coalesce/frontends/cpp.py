"""C++ front end: the C table plus classes, namespaces and templates."""

from __future__ import annotations

from coalesce.frontends.base import TRANSPARENT_KINDS, NodeMapping
from coalesce.frontends.c import C_NODE_MAP, CFrontend
from coalesce.frontends.naming import IDENTIFIER_KINDS, declared_name, fixed, prefixed
from coalesce.uir.models import ExpressionKind, Language, LoopKind, NodeType

NAMESPACE_KINDS = IDENTIFIER_KINDS | {"nested_namespace_specifier"}

CPP_NODE_MAP: dict[str, NodeMapping] = {
    **C_NODE_MAP,
    "class_specifier": NodeMapping(NodeType.klass(), declared_name),
    "namespace_definition": NodeMapping(
        NodeType.module(),
        prefixed("namespace_", "anonymous_namespace", NAMESPACE_KINDS, ":"),
    ),
    "lambda_expression": NodeMapping(NodeType.function(), fixed("lambda")),
    "for_range_loop": NodeMapping(NodeType.loop_of(LoopKind.FOR_EACH)),
    "new_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "qualified_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), None, True),
    "this": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), None, True),
    "nullptr": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "raw_string_literal": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
}


class CppFrontend(CFrontend):
    grammar = "cpp"
    language = Language.CPP
    root_name = "cpp_translation_unit"
    node_map = CPP_NODE_MAP
    transparent_kinds = TRANSPARENT_KINDS | {"template_declaration"}
