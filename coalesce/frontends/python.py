"""Python front end — builds UIR from Python source using the stdlib ast module.

No tree-sitter is needed for Python. The grammar kind of each node is its
ast class name in snake case, suffixed with ``_statement`` or
``_expression`` for ``ast.stmt`` and ``ast.expr`` subclasses (for example
``function_def_statement``, ``bin_op_expression``). Kinds missing from the
table go through the shared fallback classification.
"""

from __future__ import annotations

import ast
import re

from coalesce.errors import ParseError
from coalesce.frontends.base import (
    Parser,
    fallback_node_type,
    function_complexity,
    make_metadata,
    make_node_id,
)
from coalesce.uir import annotations as ann
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LoopKind,
    NodeKind,
    NodeType,
    SourceLocation,
    StatementKind,
    UIRNode,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Operator and context nodes carry no structure of their own
_SKIPPED = (ast.expr_context, ast.operator, ast.boolop, ast.unaryop, ast.cmpop)

NODE_TYPES: dict[type[ast.AST], NodeType] = {
    ast.FunctionDef: NodeType.function(),
    ast.AsyncFunctionDef: NodeType.function(),
    ast.Lambda: NodeType.function(),
    ast.ClassDef: NodeType.klass(),
    ast.Return: NodeType.statement(StatementKind.RETURN),
    ast.Break: NodeType.statement(StatementKind.BREAK),
    ast.Continue: NodeType.statement(StatementKind.CONTINUE),
    ast.Raise: NodeType.statement(StatementKind.THROW),
    ast.Expr: NodeType.statement(StatementKind.EXPRESSION),
    ast.Import: NodeType.statement(StatementKind.EXPRESSION),
    ast.ImportFrom: NodeType.statement(StatementKind.EXPRESSION),
    ast.If: NodeType.control_flow(ControlFlowKind.CONDITIONAL),
    ast.IfExp: NodeType.control_flow(ControlFlowKind.CONDITIONAL),
    ast.For: NodeType.loop_of(LoopKind.FOR_EACH),
    ast.AsyncFor: NodeType.loop_of(LoopKind.FOR_EACH),
    ast.While: NodeType.loop_of(LoopKind.WHILE),
    ast.Try: NodeType.control_flow(ControlFlowKind.TRY),
    ast.Match: NodeType.control_flow(ControlFlowKind.SWITCH),
    ast.Assign: NodeType.expression(ExpressionKind.ASSIGNMENT),
    ast.AugAssign: NodeType.expression(ExpressionKind.ASSIGNMENT),
    ast.AnnAssign: NodeType.expression(ExpressionKind.ASSIGNMENT),
    ast.NamedExpr: NodeType.expression(ExpressionKind.ASSIGNMENT),
    ast.Name: NodeType.expression(ExpressionKind.VARIABLE),
    ast.Attribute: NodeType.expression(ExpressionKind.VARIABLE),
    ast.Subscript: NodeType.expression(ExpressionKind.VARIABLE),
    ast.Constant: NodeType.expression(ExpressionKind.LITERAL),
    ast.Call: NodeType.expression(ExpressionKind.FUNCTION_CALL),
    ast.Await: NodeType.expression(ExpressionKind.FUNCTION_CALL),
    ast.BinOp: NodeType.expression(ExpressionKind.ARITHMETIC),
    ast.Compare: NodeType.expression(ExpressionKind.COMPARISON),
    ast.BoolOp: NodeType.expression(ExpressionKind.LOGICAL),
}

if hasattr(ast, "TryStar"):
    NODE_TYPES[ast.TryStar] = NodeType.control_flow(ControlFlowKind.TRY)

_LEAVES = (ast.Name, ast.Attribute, ast.Constant)

OPERATORS: dict[type[ast.AST], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
    ast.Pow: "**",
    ast.MatMult: "@",
    ast.LShift: "<<",
    ast.RShift: ">>",
    ast.BitOr: "|",
    ast.BitXor: "^",
    ast.BitAnd: "&",
    ast.And: "and",
    ast.Or: "or",
    ast.Not: "not",
    ast.Invert: "~",
    ast.UAdd: "+",
    ast.USub: "-",
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.Is: "is",
    ast.IsNot: "is not",
    ast.In: "in",
    ast.NotIn: "not in",
}


def grammar_kind(node: ast.AST) -> str:
    """Snake-case kind of an ast node, e.g. ``bin_op_expression``."""
    kind = _CAMEL_BOUNDARY.sub("_", type(node).__name__).lower()
    if isinstance(node, ast.stmt):
        return f"{kind}_statement"
    if isinstance(node, ast.expr):
        return f"{kind}_expression"
    return kind


def dotted_name(node: ast.AST) -> str | None:
    """``a.b.c`` for Name/Attribute chains, None otherwise."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = dotted_name(node.value)
        return f"{base}.{node.attr}" if base else node.attr
    return None


class PythonFrontend(Parser):
    language = Language.PYTHON

    def parse(self, source: str) -> UIRNode:
        try:
            tree = ast.parse(source)
        except SyntaxError as exc:
            raise ParseError(exc.msg, exc.lineno or 0, exc.offset or 0) from exc

        lines = source.splitlines()
        root = UIRNode(
            id=make_node_id("module", 0, 0, source),
            node_type=NodeType.module(),
            name="python_module",
            metadata=make_metadata(self.language, "module", source),
            source_location=SourceLocation(
                start_line=1,
                end_line=max(len(lines), 1),
                end_column=len(lines[-1]) if lines else 0,
            ),
        )
        for stmt in tree.body:
            root.children.append(self._convert(stmt, source, top_level=True))

        root.metadata.annotations[ann.FIDELITY] = "full"
        root.metadata.dependencies = _imports(tree)
        return root

    # --- Conversion ---

    def _convert(self, node: ast.AST, source: str, top_level: bool = False) -> UIRNode:
        kind = grammar_kind(node)
        node_type = NODE_TYPES.get(type(node)) or fallback_node_type(kind)
        name = _name_of(node)

        if top_level and isinstance(node, ast.Assign) and name and name.isupper():
            node_type = NodeType.constant()
        elif isinstance(node, ast.UnaryOp):
            logical = isinstance(node.op, ast.Not)
            node_type = NodeType.expression(
                ExpressionKind.LOGICAL if logical else ExpressionKind.ARITHMETIC
            )

        uir = self._new_node(node, source, kind, node_type, name)
        operator = _operator(node)
        if operator is not None:
            uir.metadata.annotations[ann.OPERATOR] = operator
        if isinstance(node, _LEAVES):
            return uir

        if node_type.kind is NodeKind.FUNCTION:
            uir.children = self._parameters(node, source) + [
                self._convert(stmt, source) for stmt in _body(node)
            ]
            uir.metadata.complexity_score = function_complexity(uir)
        elif isinstance(node, ast.ClassDef):
            uir.children = [self._convert(stmt, source) for stmt in node.body]
        elif isinstance(node, ast.Call):
            args = list(node.args)
            if name is None:
                args.insert(0, node.func)
            uir.children = [self._convert(arg, source) for arg in args]
            for keyword in node.keywords:
                value = self._convert(keyword.value, source)
                value.metadata.annotations[ann.KEYWORD] = keyword.arg or "**"
                uir.children.append(value)
        elif isinstance(node, ast.If):
            orelse = [self._convert(stmt, source) for stmt in node.orelse]
            for branch in orelse:
                branch.metadata.semantic_tags.append("else_branch")
            uir.children = (
                [self._convert(node.test, source)]
                + [self._convert(stmt, source) for stmt in node.body]
                + orelse
            )
        else:
            uir.children = [
                self._convert(child, source)
                for child in ast.iter_child_nodes(node)
                if not isinstance(child, _SKIPPED)
            ]
        return uir

    def _parameters(self, node: ast.AST, source: str) -> list[UIRNode]:
        args = node.args
        positional = list(args.posonlyargs) + list(args.args)
        params = positional + ([args.vararg] if args.vararg else [])
        params += list(args.kwonlyargs) + ([args.kwarg] if args.kwarg else [])

        with_defaults = positional[len(positional) - len(args.defaults) :]
        defaults = {a.arg: d for a, d in zip(with_defaults, args.defaults)}
        defaults.update(
            {a.arg: d for a, d in zip(args.kwonlyargs, args.kw_defaults) if d is not None}
        )

        result = []
        for arg in params:
            param = self._new_node(arg, source, "arg", NodeType.variable(), arg.arg)
            param.metadata.semantic_tags.append("parameter")
            if arg.annotation is not None:
                param.metadata.annotations[ann.DECLARED_TYPE] = ast.unparse(arg.annotation)
            if arg.arg in defaults:
                param.children.append(self._convert(defaults[arg.arg], source))
            result.append(param)
        return result

    def _new_node(
        self, node: ast.AST, source: str, kind: str, node_type: NodeType, name: str | None
    ) -> UIRNode:
        text = ast.get_source_segment(source, node) or ""
        lineno = getattr(node, "lineno", None)
        location = None
        row = col = 0
        if lineno is not None:
            row, col = lineno - 1, node.col_offset
            location = SourceLocation(
                start_line=lineno,
                end_line=node.end_lineno or lineno,
                start_column=node.col_offset,
                end_column=node.end_col_offset or 0,
            )
        return UIRNode(
            id=make_node_id(kind, row, col, text),
            node_type=node_type,
            name=name,
            metadata=make_metadata(self.language, kind, text),
            source_location=location,
        )


# --- Helpers ---


def _name_of(node: ast.AST) -> str | None:
    if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef):
        return node.name
    if isinstance(node, ast.Lambda):
        return "lambda"
    if isinstance(node, ast.Name | ast.Attribute):
        return dotted_name(node)
    if isinstance(node, ast.Call):
        return dotted_name(node.func)
    if isinstance(node, ast.Assign) and len(node.targets) == 1:
        return dotted_name(node.targets[0])
    if isinstance(node, ast.AugAssign | ast.AnnAssign | ast.NamedExpr):
        return dotted_name(node.target)
    if isinstance(node, ast.Import | ast.ImportFrom):
        return "import"
    return None


def _operator(node: ast.AST) -> str | None:
    if isinstance(node, ast.BinOp | ast.BoolOp | ast.UnaryOp):
        return OPERATORS.get(type(node.op))
    if isinstance(node, ast.Compare):
        return OPERATORS.get(type(node.ops[0]))
    if isinstance(node, ast.AugAssign):
        return OPERATORS.get(type(node.op), "") + "="
    if isinstance(node, ast.Assign | ast.AnnAssign):
        return "="
    return None


def _body(node: ast.AST) -> list[ast.AST]:
    if isinstance(node, ast.Lambda):
        return [node.body]
    return list(node.body)


def _imports(tree: ast.Module) -> list[str]:
    found: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names = [alias.name for alias in node.names]
        elif isinstance(node, ast.ImportFrom):
            names = [("." * node.level) + (node.module or "")]
        else:
            continue
        for name in names:
            if name and name not in found:
                found.append(name)
    return found
