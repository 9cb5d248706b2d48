"""Rust front end over the tree-sitter ``rust`` grammar.

Rust is expression-oriented, so control flow arrives as ``*_expression``
kinds rather than statements.
"""

from __future__ import annotations

from coalesce.frontends.base import COMMON_NODE_MAP, NodeMapping, TreeSitterFrontend
from coalesce.frontends.naming import declared_name, fixed, own_text, prefixed
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LoopKind,
    NodeType,
    StatementKind,
)

LITERAL = NodeType.expression(ExpressionKind.LITERAL)

RUST_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "function_item": NodeMapping(NodeType.function(), declared_name),
    "function_signature_item": NodeMapping(NodeType.function(), declared_name),
    "closure_expression": NodeMapping(NodeType.function(), fixed("closure")),
    "struct_item": NodeMapping(NodeType.klass(), declared_name),
    "enum_item": NodeMapping(NodeType.klass(), declared_name),
    "union_item": NodeMapping(NodeType.klass(), declared_name),
    "impl_item": NodeMapping(NodeType.klass(), prefixed("impl_")),
    "trait_item": NodeMapping(NodeType.interface(), declared_name),
    "mod_item": NodeMapping(NodeType.module(), declared_name),
    "field_declaration": NodeMapping(NodeType.variable(), declared_name),
    "let_declaration": NodeMapping(NodeType.variable(), declared_name),
    "const_item": NodeMapping(NodeType.constant(), declared_name),
    "static_item": NodeMapping(NodeType.constant(), declared_name),
    "type_item": NodeMapping(NodeType.constant(), declared_name),
    "use_declaration": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("use"), True),
    "macro_invocation": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL), declared_name),
    "compound_assignment_expr": NodeMapping(NodeType.expression(ExpressionKind.ASSIGNMENT)),
    "if_expression": NodeMapping(NodeType.control_flow(ControlFlowKind.CONDITIONAL)),
    "match_expression": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "loop_expression": NodeMapping(NodeType.loop_of(LoopKind.WHILE)),
    "while_expression": NodeMapping(NodeType.loop_of(LoopKind.WHILE)),
    "for_expression": NodeMapping(NodeType.loop_of(LoopKind.FOR_EACH)),
    "return_expression": NodeMapping(NodeType.statement(StatementKind.RETURN)),
    "break_expression": NodeMapping(NodeType.statement(StatementKind.BREAK)),
    "continue_expression": NodeMapping(NodeType.statement(StatementKind.CONTINUE)),
    "field_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "scoped_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "field_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "self": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "integer_literal": NodeMapping(LITERAL, None, True),
    "float_literal": NodeMapping(LITERAL, None, True),
    "boolean_literal": NodeMapping(LITERAL, None, True),
    "char_literal": NodeMapping(LITERAL, None, True),
    "raw_string_literal": NodeMapping(LITERAL, None, True),
}


class RustFrontend(TreeSitterFrontend):
    grammar = "rust"
    language = Language.RUST
    root_name = "rust_source_file"
    node_map = RUST_NODE_MAP
    import_kinds = frozenset({"use_declaration"})
    import_fields = ("argument",)
    legacy_kinds = {}
