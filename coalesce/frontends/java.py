"""Java front end over the tree-sitter ``java`` grammar."""

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

JAVA_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "package_declaration": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("package"), True),
    "import_declaration": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("import"), True),
    "class_declaration": NodeMapping(NodeType.klass(), declared_name),
    "enum_declaration": NodeMapping(NodeType.klass(), declared_name),
    "record_declaration": NodeMapping(NodeType.klass(), declared_name),
    "interface_declaration": NodeMapping(NodeType.interface(), declared_name),
    "method_declaration": NodeMapping(NodeType.function(), declared_name),
    "constructor_declaration": NodeMapping(NodeType.function(), declared_name),
    "lambda_expression": NodeMapping(NodeType.function(), fixed("lambda")),
    "field_declaration": NodeMapping(NodeType.variable(), declared_name),
    "constant_declaration": NodeMapping(NodeType.constant(), declared_name),
    "local_variable_declaration": NodeMapping(
        NodeType.statement(StatementKind.EXPRESSION), fixed("variable_declaration")
    ),
    "variable_declarator": NodeMapping(NodeType.variable(), declared_name),
    "method_invocation": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL), declared_name),
    "object_creation_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "field_access": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "enhanced_for_statement": NodeMapping(NodeType.loop_of(LoopKind.FOR_EACH)),
    "ternary_expression": NodeMapping(NodeType.control_flow(ControlFlowKind.CONDITIONAL)),
    "switch_expression": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "try_with_resources_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.TRY)),
    "this": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "decimal_integer_literal": NodeMapping(LITERAL, None, True),
    "hex_integer_literal": NodeMapping(LITERAL, None, True),
    "decimal_floating_point_literal": NodeMapping(LITERAL, None, True),
    "character_literal": NodeMapping(LITERAL, None, True),
    "null_literal": NodeMapping(LITERAL, None, True),
    "text_block": NodeMapping(LITERAL, None, True),
}


class JavaFrontend(TreeSitterFrontend):
    grammar = "java"
    language = Language.JAVA
    root_name = "java_program"
    node_map = JAVA_NODE_MAP
    import_kinds = frozenset({"import_declaration"})
    import_fields = ()
    legacy_kinds = {}
