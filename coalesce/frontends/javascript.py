"""JavaScript front end over the tree-sitter ``javascript`` grammar."""

from __future__ import annotations

from coalesce.frontends.base import COMMON_NODE_MAP, NodeMapping, TreeSitterFrontend
from coalesce.frontends.naming import declared_name, fixed, own_text
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LoopKind,
    NodeType,
    StatementKind,
)

LITERAL = NodeType.expression(ExpressionKind.LITERAL)

JAVASCRIPT_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "function_declaration": NodeMapping(NodeType.function(), declared_name),
    "generator_function_declaration": NodeMapping(NodeType.function(), declared_name),
    "function_expression": NodeMapping(NodeType.function(), declared_name),
    "function": NodeMapping(NodeType.function(), declared_name),
    "arrow_function": NodeMapping(NodeType.function(), fixed("arrow_function")),
    "method_definition": NodeMapping(NodeType.function(), declared_name),
    "class_declaration": NodeMapping(NodeType.klass(), declared_name),
    "class": NodeMapping(NodeType.klass(), declared_name),
    "field_definition": NodeMapping(NodeType.variable(), declared_name),
    "lexical_declaration": NodeMapping(
        NodeType.statement(StatementKind.EXPRESSION), fixed("variable_declaration")
    ),
    "variable_declaration": NodeMapping(
        NodeType.statement(StatementKind.EXPRESSION), fixed("variable_declaration")
    ),
    "variable_declarator": NodeMapping(NodeType.variable(), declared_name),
    "augmented_assignment_expression": NodeMapping(
        NodeType.expression(ExpressionKind.ASSIGNMENT)
    ),
    "new_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "await_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "member_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "property_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "shorthand_property_identifier": NodeMapping(
        NodeType.expression(ExpressionKind.VARIABLE), own_text, True
    ),
    "ternary_expression": NodeMapping(NodeType.control_flow(ControlFlowKind.CONDITIONAL)),
    "for_in_statement": NodeMapping(NodeType.loop_of(LoopKind.FOR_EACH)),
    "number": NodeMapping(LITERAL, None, True),
    "string": NodeMapping(LITERAL, None, True),
    "template_string": NodeMapping(LITERAL, None, True),
    "regex": NodeMapping(LITERAL, None, True),
    "undefined": NodeMapping(LITERAL, None, True),
    "import_statement": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("import")),
    "export_statement": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
}


class JavaScriptFrontend(TreeSitterFrontend):
    grammar = "javascript"
    language = Language.JAVASCRIPT
    root_name = "javascript_program"
    node_map = JAVASCRIPT_NODE_MAP
    import_kinds = frozenset({"import_statement"})
    import_fields = ("source",)
    legacy_kinds = {}
