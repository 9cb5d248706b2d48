"""C# front end over the tree-sitter ``csharp`` grammar."""

from __future__ import annotations

from coalesce.frontends.base import COMMON_NODE_MAP, NodeMapping, TreeSitterFrontend
from coalesce.frontends.naming import IDENTIFIER_KINDS, declared_name, fixed, own_text, prefixed
from coalesce.uir.models import ExpressionKind, Language, LoopKind, NodeType, StatementKind

LITERAL = NodeType.expression(ExpressionKind.LITERAL)
NAMESPACE_KINDS = IDENTIFIER_KINDS | {"qualified_name"}

CSHARP_NODE_MAP: dict[str, NodeMapping] = {
    **COMMON_NODE_MAP,
    "namespace_declaration": NodeMapping(
        NodeType.module(), prefixed("namespace_", "anonymous_namespace", NAMESPACE_KINDS, ".")
    ),
    "file_scoped_namespace_declaration": NodeMapping(
        NodeType.module(), prefixed("namespace_", "anonymous_namespace", NAMESPACE_KINDS, ".")
    ),
    "class_declaration": NodeMapping(NodeType.klass(), declared_name),
    "struct_declaration": NodeMapping(NodeType.klass(), declared_name),
    "record_declaration": NodeMapping(NodeType.klass(), declared_name),
    "enum_declaration": NodeMapping(NodeType.klass(), declared_name),
    "interface_declaration": NodeMapping(NodeType.interface(), declared_name),
    "method_declaration": NodeMapping(NodeType.function(), declared_name),
    "constructor_declaration": NodeMapping(NodeType.function(), declared_name),
    "local_function_statement": NodeMapping(NodeType.function(), declared_name),
    "lambda_expression": NodeMapping(NodeType.function(), fixed("lambda")),
    "property_declaration": NodeMapping(NodeType.variable(), declared_name),
    "field_declaration": NodeMapping(NodeType.variable(), declared_name),
    "local_declaration_statement": NodeMapping(
        NodeType.statement(StatementKind.EXPRESSION), fixed("variable_declaration")
    ),
    "variable_declarator": NodeMapping(NodeType.variable(), declared_name),
    "arrow_expression_clause": NodeMapping(NodeType.statement(StatementKind.RETURN)),
    "invocation_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "object_creation_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "member_access_expression": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text),
    "foreach_statement": NodeMapping(NodeType.loop_of(LoopKind.FOR_EACH)),
    "using_directive": NodeMapping(NodeType.statement(StatementKind.EXPRESSION), fixed("using"), True),
    "integer_literal": NodeMapping(LITERAL, None, True),
    "real_literal": NodeMapping(LITERAL, None, True),
    "boolean_literal": NodeMapping(LITERAL, None, True),
    "character_literal": NodeMapping(LITERAL, None, True),
    "null_literal": NodeMapping(LITERAL, None, True),
    "verbatim_string_literal": NodeMapping(LITERAL, None, True),
    "interpolated_string_expression": NodeMapping(LITERAL, None, True),
}


class CSharpFrontend(TreeSitterFrontend):
    grammar = "csharp"
    language = Language.CSHARP
    root_name = "csharp_compilation_unit"
    node_map = CSHARP_NODE_MAP
    import_kinds = frozenset({"using_directive"})
    import_fields = ()
