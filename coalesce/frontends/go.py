"""Go front end over the tree-sitter ``go`` grammar.

Go has a single ``for`` keyword; loops are told apart by their clause
(range clause, plain condition, three-part header).
"""

from __future__ import annotations

from coalesce.frontends.base import (
    COMMON_NODE_MAP,
    TRANSPARENT_KINDS,
    Node,
    NodeMapping,
    TreeSitterFrontend,
)
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
FOR_LOOP = NodeType.loop_of(LoopKind.FOR)

GO_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "package_clause": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), declared_name, True),
    "import_declaration": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("import"), True),
    "function_declaration": NodeMapping(NodeType.function(), declared_name),
    "method_declaration": NodeMapping(NodeType.function(), declared_name),
    "func_literal": NodeMapping(NodeType.function(), fixed("func_literal")),
    "type_spec": NodeMapping(NodeType.klass(), declared_name),
    "field_declaration": NodeMapping(NodeType.variable(), declared_name),
    "method_elem": NodeMapping(NodeType.function(), declared_name),
    "var_declaration": NodeMapping(
        NodeType.statement(StatementKind.EXPRESSION), fixed("variable_declaration")
    ),
    "var_spec": NodeMapping(NodeType.variable(), declared_name),
    "short_var_declaration": NodeMapping(NodeType.variable(), declared_name),
    "const_spec": NodeMapping(NodeType.constant(), declared_name),
    "assignment_statement": NodeMapping(NodeType.expression(ExpressionKind.ASSIGNMENT)),
    "inc_statement": NodeMapping(NodeType.expression(ExpressionKind.ARITHMETIC)),
    "dec_statement": NodeMapping(NodeType.expression(ExpressionKind.ARITHMETIC)),
    "expression_switch_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "type_switch_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "select_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "selector_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "field_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "package_identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "int_literal": NodeMapping(LITERAL, None, True),
    "float_literal": NodeMapping(LITERAL, None, True),
    "imaginary_literal": NodeMapping(LITERAL, None, True),
    "rune_literal": NodeMapping(LITERAL, None, True),
    "interpreted_string_literal": NodeMapping(LITERAL, None, True),
    "raw_string_literal": NodeMapping(LITERAL, None, True),
    "nil": NodeMapping(LITERAL, None, True),
    "iota": NodeMapping(LITERAL, None, True),
}


class GoFrontend(TreeSitterFrontend):
    grammar = "go"
    language = Language.GO
    root_name = "go_source_file"
    node_map = GO_NODE_MAP
    transparent_kinds = TRANSPARENT_KINDS | {
        "type_declaration",
        "const_declaration",
        "expression_list",
        "struct_type",
        "interface_type",
    }
    import_kinds = frozenset({"import_spec"})
    import_fields = ("path",)

    def refine(self, node: Node, source: bytes, node_type: NodeType) -> NodeType:
        if node.type == "type_spec":
            spec = node.child_by_field_name("type")
            if spec is not None and spec.type == "interface_type":
                return NodeType.interface()
            return node_type
        if node_type == FOR_LOOP:
            clauses = {child.type for child in node.named_children}
            if "range_clause" in clauses:
                return NodeType.loop_of(LoopKind.FOR_EACH)
            if "for_clause" not in clauses:
                return NodeType.loop_of(LoopKind.WHILE)
            return node_type
        return super().refine(node, source, node_type)
