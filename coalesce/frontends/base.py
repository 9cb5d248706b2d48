"""Turning concrete syntax trees into UIR.

Every front end implements ``Parser``. Most do it by subclassing
``TreeSitterFrontend`` and supplying a mapping table from grammar node
kinds to ``NodeMapping`` entries; the shared policies (node IDs, metadata,
error skipping, the generic fallback classification, transparent
containers, function layout) live here so front ends stay declarative.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, NamedTuple

from coalesce.errors import ParseError
from coalesce.frontends.naming import IDENTIFIER_KINDS, Namer, declared_name, node_text, own_text
from coalesce.uir import annotations as ann
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LegacyPattern,
    LoopKind,
    Metadata,
    NodeKind,
    NodeType,
    SourceLocation,
    StatementKind,
    UIRNode,
)

logger = logging.getLogger(__name__)

Node = Any  # tree_sitter.Node

ID_TEXT_PREFIX = 15
ORIGINAL_TEXT_LIMIT = 100


class NodeMapping(NamedTuple):
    """Row of a front end's mapping table."""

    node_type: NodeType
    namer: Namer | None = None
    leaf: bool = False


class LegacySpec(NamedTuple):
    pattern_type: str
    modernization_hint: str | None = None
    preserve_exactly: bool = False


# --- Shared policies ---


def make_node_id(kind: str, row: int, column: int, text: str) -> str:
    """Deterministic node ID from grammar kind, 0-based position and text prefix."""
    prefix = text[:ID_TEXT_PREFIX].replace(" ", "_")
    return f"{kind}_{row}_{column}_{prefix}"


def fallback_node_type(kind: str) -> NodeType:
    """Classification for grammar kinds missing from a mapping table."""
    if "statement" in kind:
        return NodeType.statement(StatementKind.EXPRESSION)
    if "expression" in kind:
        return NodeType.expression(ExpressionKind.VARIABLE)
    return NodeType.expression(ExpressionKind.LITERAL)


def make_metadata(language: Language, kind: str, text: str) -> Metadata:
    metadata = Metadata(source_language=language, semantic_tags=[kind])
    if len(text) < ORIGINAL_TEXT_LIMIT:
        metadata.annotations[ann.ORIGINAL_TEXT] = text
    return metadata


def function_complexity(node: UIRNode) -> float:
    """1 + the number of control-flow nodes below ``node``."""
    branches = sum(
        1 for n in node.walk() if n is not node and n.node_type.kind is NodeKind.CONTROL_FLOW
    )
    return float(1 + branches)


def stamp_file(root: UIRNode, file: str) -> None:
    for node in root.walk():
        if node.source_location is not None:
            node.source_location.file = file


# --- Operator refinement ---

COMPARISON_OPERATORS = frozenset(
    {"==", "!=", "===", "!==", "<", ">", "<=", ">=", "<=>", "is", "is not", "in", "not in"}
)
LOGICAL_OPERATORS = frozenset({"&&", "||", "!", "??", "and", "or", "not"})


def classify_operator(operator: str | None) -> ExpressionKind:
    if operator in COMPARISON_OPERATORS:
        return ExpressionKind.COMPARISON
    if operator in LOGICAL_OPERATORS:
        return ExpressionKind.LOGICAL
    return ExpressionKind.ARITHMETIC


# --- Mapping rows shared by the C-family grammars ---

ARITHMETIC = NodeType.expression(ExpressionKind.ARITHMETIC)
OPERATOR_KINDS = frozenset(
    {
        ExpressionKind.ARITHMETIC,
        ExpressionKind.COMPARISON,
        ExpressionKind.LOGICAL,
        ExpressionKind.ASSIGNMENT,
    }
)

COMMON_NODE_MAP: dict[str, NodeMapping] = {
    "identifier": NodeMapping(NodeType.expression(ExpressionKind.VARIABLE), own_text, True),
    "binary_expression": NodeMapping(ARITHMETIC),
    "unary_expression": NodeMapping(ARITHMETIC),
    "update_expression": NodeMapping(ARITHMETIC),
    "assignment_expression": NodeMapping(NodeType.expression(ExpressionKind.ASSIGNMENT)),
    "call_expression": NodeMapping(NodeType.expression(ExpressionKind.FUNCTION_CALL)),
    "expression_statement": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
    "return_statement": NodeMapping(NodeType.statement(StatementKind.RETURN)),
    "break_statement": NodeMapping(NodeType.statement(StatementKind.BREAK)),
    "continue_statement": NodeMapping(NodeType.statement(StatementKind.CONTINUE)),
    "throw_statement": NodeMapping(NodeType.statement(StatementKind.THROW)),
    "if_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.CONDITIONAL)),
    "else_clause": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
    "switch_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.SWITCH)),
    "try_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.TRY)),
    "for_statement": NodeMapping(NodeType.loop_of(LoopKind.FOR)),
    "while_statement": NodeMapping(NodeType.loop_of(LoopKind.WHILE)),
    "do_statement": NodeMapping(NodeType.loop_of(LoopKind.DO_WHILE)),
    "goto_statement": NodeMapping(NodeType.control_flow(ControlFlowKind.GOTO)),
    "block": NodeMapping(NodeType.statement(StatementKind.EXPRESSION)),
    "number_literal": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "string_literal": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "true": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "false": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
    "null": NodeMapping(NodeType.expression(ExpressionKind.LITERAL), None, True),
}

TRANSPARENT_KINDS = frozenset(
    {
        "parameter_list",
        "formal_parameters",
        "parameters",
        "argument_list",
        "arguments",
        "parenthesized_expression",
        "condition_clause",
        "class_body",
        "interface_body",
        "declaration_list",
        "field_declaration_list",
        "enum_body",
        "statement_list",
    }
)

BODY_KINDS = frozenset(
    {"block", "statement_block", "compound_statement", "statement_list", "constructor_body"}
)

PARAMETER_FIELDS = ("parameters", "parameter")

GOTO_LEGACY = LegacySpec("goto", "Replace goto with structured control flow", False)


class Parser(ABC):
    """Front-end capability: source text in, UIR tree out."""

    language: Language

    @abstractmethod
    def parse(self, source: str) -> UIRNode:
        """Normalize ``source`` into a UIR tree rooted at a ``Module`` node.

        Raises ParseError when no tree can be produced at all.
        """

    def parse_file(self, path: str | Path) -> UIRNode:
        path = Path(path)
        source = path.read_text(errors="replace")
        root = self.parse(source)
        stamp_file(root, str(path))
        return root


class TreeSitterFrontend(Parser):
    """Table-driven normalizer over a tree-sitter concrete syntax tree.

    Subclasses set ``grammar`` (a tree-sitter-language-pack name),
    ``language``, ``root_name`` and ``node_map``; the remaining class
    attributes have defaults suited to C-family grammars.
    """

    grammar: str = ""
    root_name: str | None = None
    node_map: dict[str, NodeMapping] = COMMON_NODE_MAP
    transparent_kinds: frozenset[str] = TRANSPARENT_KINDS
    import_kinds: frozenset[str] = frozenset()
    import_fields: tuple[str, ...] = ("source", "path", "argument", "name")
    legacy_kinds: dict[str, LegacySpec] = {"goto_statement": GOTO_LEGACY}

    def parse(self, source: str) -> UIRNode:
        from tree_sitter_language_pack import get_parser

        source_bytes = source.encode("utf-8")
        tree = get_parser(self.grammar).parse(source_bytes)
        root = tree.root_node

        if root.is_error:
            line, column = _position(root)
            raise ParseError("source could not be parsed", line, column)

        uir = self._convert(root, source_bytes)
        uir.node_type = NodeType.module()
        if self.root_name:
            uir.name = self.root_name

        if root.has_error:
            errors = _error_nodes(root)
            line, column = _position(errors[0]) if errors else (0, 0)
            if not uir.children and source.strip():
                raise ParseError("no recoverable syntax", line, column)
            uir.metadata.annotations[ann.PARSE_ERROR] = (
                f"Parse errors found: {len(errors)} error nodes. First error at line {line}"
            )
            logger.warning(
                "%s: skipped %d syntax error node(s), first at line %d",
                self.language.value,
                len(errors),
                line,
            )

        uir.metadata.annotations[ann.FIDELITY] = "full"
        uir.metadata.dependencies = self._collect_imports(root, source_bytes)
        return uir

    # --- Conversion ---

    def _convert(self, node: Node, source: bytes) -> UIRNode:
        mapping = self.node_map.get(node.type) or NodeMapping(fallback_node_type(node.type))
        node_type = self.refine(node, source, mapping.node_type)

        name, name_node = (None, None)
        if mapping.namer is not None:
            name, name_node = mapping.namer(node, source)

        uir = self._new_node(node, source, node_type, name)
        if node_type.sub_kind in OPERATOR_KINDS:
            operator = _operator(node, source)
            if operator is not None:
                uir.metadata.annotations[ann.OPERATOR] = operator

        legacy = self.legacy_kinds.get(node.type)
        if legacy is not None:
            uir.metadata.legacy_patterns.append(
                LegacyPattern(
                    pattern_type=legacy.pattern_type,
                    original_construct=node_text(node, source),
                    modernization_hint=legacy.modernization_hint,
                    preserve_exactly=legacy.preserve_exactly,
                )
            )

        if mapping.leaf:
            return uir
        if node_type.kind is NodeKind.FUNCTION:
            uir.children = self._function_children(node, source)
            uir.metadata.complexity_score = function_complexity(uir)
        else:
            uir.children = self._convert_children(node, source, skip=name_node)
        return uir

    def refine(self, node: Node, source: bytes, node_type: NodeType) -> NodeType:
        """Adjust a table entry using the node's content."""
        if node_type == ARITHMETIC:
            return NodeType.expression(classify_operator(_operator(node, source)))
        return node_type

    def _new_node(
        self, node: Node, source: bytes, node_type: NodeType, name: str | None
    ) -> UIRNode:
        text = node_text(node, source)
        row, column = node.start_point
        end_row, end_column = node.end_point
        return UIRNode(
            id=make_node_id(node.type, row, column, text),
            node_type=node_type,
            name=name,
            metadata=make_metadata(self.language, node.type, text),
            source_location=SourceLocation(
                start_line=row + 1,
                end_line=end_row + 1,
                start_column=column,
                end_column=end_column,
            ),
        )

    def _convert_children(
        self, node: Node, source: bytes, skip: Node | None = None
    ) -> list[UIRNode]:
        children: list[UIRNode] = []
        for child in node.children:
            if skip is not None and child == skip:
                continue
            if child.is_error or child.is_missing:
                logger.debug("skipping error node at %s", child.start_point)
                continue
            if not child.is_named or child.is_extra:
                continue
            if child.type in self.transparent_kinds:
                children.extend(self._convert_children(child, source))
                continue
            children.append(self._convert(child, source))
        return children

    def _function_children(self, node: Node, source: bytes) -> list[UIRNode]:
        """Parameters (as Variable nodes) followed by body statements."""
        children: list[UIRNode] = []
        for param in self._parameter_nodes(node):
            children.extend(self._convert_parameter(param, source))

        body = node.child_by_field_name("body")
        if body is None:
            return children
        if body.type in BODY_KINDS:
            children.extend(self._convert_children(body, source))
        else:
            # Expression-bodied functions
            children.append(self._convert(body, source))
        return children

    def _parameter_nodes(self, node: Node) -> list[Node]:
        params = _parameter_list(node)
        if params is None:
            return []
        if params.type in IDENTIFIER_KINDS:
            return [params]
        return [
            child
            for child in params.named_children
            if not (child.is_extra or child.is_error or child.is_missing)
        ]

    def _convert_parameter(self, node: Node, source: bytes) -> list[UIRNode]:
        names = node.children_by_field_name("name")
        if len(names) > 1:
            # Grouped declarations such as Go's ``a, b int``
            params = [
                self._new_node(name, source, NodeType.variable(), node_text(name, source))
                for name in names
            ]
        elif node.type in IDENTIFIER_KINDS:
            params = [self._new_node(node, source, NodeType.variable(), node_text(node, source))]
        else:
            name, _ = declared_name(node, source)
            params = [self._new_node(node, source, NodeType.variable(), name)]

        type_node = node.child_by_field_name("type")
        default = node.child_by_field_name("value") or node.child_by_field_name("right")
        for param in params:
            param.metadata.semantic_tags.append("parameter")
            if type_node is not None:
                declared = node_text(type_node, source).lstrip(":").strip()
                param.metadata.annotations[ann.DECLARED_TYPE] = declared
            if default is not None:
                param.children.append(self._convert(default, source))
        return params

    # --- Imports ---

    def _collect_imports(self, root: Node, source: bytes) -> list[str]:
        if not self.import_kinds:
            return []
        found: list[str] = []
        for node in _iter_nodes(root):
            if node.type not in self.import_kinds:
                continue
            target = self._import_target(node, source)
            if target and target not in found:
                found.append(target)
        return found

    def _import_target(self, node: Node, source: bytes) -> str | None:
        for field_name in self.import_fields:
            child = node.child_by_field_name(field_name)
            if child is not None:
                return node_text(child, source).strip("\"'<>`")
        named = [c for c in node.named_children if not c.is_extra]
        if not named:
            return None
        return node_text(named[-1], source).strip("\"'<>`")


# --- Tree helpers ---


def _iter_nodes(root: Node):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _error_nodes(root: Node) -> list[Node]:
    return [n for n in _iter_nodes(root) if n.is_error or n.is_missing]


def _position(node: Node) -> tuple[int, int]:
    """1-based line and column of a grammar node."""
    row, column = node.start_point
    return row + 1, column + 1


def _operator(node: Node, source: bytes) -> str | None:
    op = node.child_by_field_name("operator")
    if op is not None:
        return node_text(op, source)
    for child in node.children:
        if not child.is_named:
            return node_text(child, source)
    return None


def _parameter_list(node: Node) -> Node | None:
    for field_name in PARAMETER_FIELDS:
        params = node.child_by_field_name(field_name)
        if params is not None:
            return params
    # C and C++ keep the parameter list on the (possibly nested) declarator
    declarator = node.child_by_field_name("declarator")
    while declarator is not None:
        params = declarator.child_by_field_name("parameters")
        if params is not None:
            return params
        declarator = declarator.child_by_field_name("declarator")
    return None
