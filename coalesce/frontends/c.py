"""C front end over the tree-sitter ``c`` grammar.

Function-like macros are kept as ``Constant`` nodes with a legacy pattern
that asks emitters to preserve them verbatim.
"""

from __future__ import annotations

from coalesce.frontends.base import (
    COMMON_NODE_MAP,
    GOTO_LEGACY,
    LegacySpec,
    NodeMapping,
    TreeSitterFrontend,
)
from coalesce.frontends.naming import declared_name, fixed, own_text
from coalesce.uir.models import ExpressionKind, Language, NodeType, StatementKind

MACRO_LEGACY = LegacySpec("macro", "Replace the macro with an inline function", True)

C_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "function_definition": NodeMapping(NodeType.function(), declared_name),
    "struct_specifier": NodeMapping(NodeType.klass(), declared_name),
    "union_specifier": NodeMapping(NodeType.klass(), declared_name),
    "enum_specifier": NodeMapping(NodeType.klass(), declared_name),
    "field_declaration": NodeMapping(NodeType.variable(), declared_name),
    "declaration": NodeMapping(NodeType.variable(), declared_name),
    "init_declarator": NodeMapping(NodeType.variable(), declared_name),
    "type_definition": NodeMapping(NodeType.constant(), declared_name),
    "preproc_def": NodeMapping(NodeType.constant(), declared_name),
    "preproc_function_def": NodeMapping(NodeType.constant(), declared_name, True),
    "preproc_include": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("include"), True),
    "field_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "subscript_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE)),
    "pointer_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE)),
    "field_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "char_literal": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "concatenated_string": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "case_statement": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
    "labeled_statement": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
}


class CFrontend(TreeSitterFrontend):
    grammar = "c"
    language = Language.C
    root_name = "c_translation_unit"
    node_map = C_NODE_MAP
    import_kinds = frozenset({"preproc_include"})
    import_fields = ("path",)
    legacy_kinds = {"goto_statement": GOTO_LEGACY, "preproc_function_def": MACRO_LEGACY}
