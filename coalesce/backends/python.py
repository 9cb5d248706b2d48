"""Python emitter — the reference back end for the annotation protocol.

Structure is rendered best-effort from the UIR: functions, classes,
returns, assignments, calls, operator expressions, conditionals and simple
loops. Constructs with no rendering are kept as ``#`` comments holding the
original text, so nothing is silently dropped.

Annotated nodes take precedence over structure:

- ``generated_code`` (with ``setup_code`` / ``cleanup_code``) replaces the node
- ``required_imports`` of every node are collected at the top of the file
- ``fallback_implementation`` is emitted as comments above the node
- legacy patterns become ``# LEGACY`` comments
"""

from __future__ import annotations

import logging

from coalesce.backends.base import Generator
from coalesce.errors import GenerationError, LegacyPatternError, TransformationError
from coalesce.uir import annotations as ann
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LoopKind,
    NodeKind,
    StatementKind,
    UIRNode,
)

logger = logging.getLogger(__name__)

INDENT = "    "

# Source-language operators spelled differently in Python
OPERATOR_MAP = {
    "&&": "and",
    "||": "or",
    "!": "not",
    "===": "==",
    "!==": "!=",
    "??": "or",
    "&&=": "and=",
}

LITERAL_MAP = {
    "true": "True",
    "false": "False",
    "null": "None",
    "undefined": "None",
    "nil": "None",
    "nullptr": "None",
    "NULL": "None",
}

CALLEE_MAP = {
    "console.log": "print",
    "printf": "print",
    "fmt.Println": "print",
    "System.out.println": "print",
    "Console.WriteLine": "print",
}

ELSE_TAGS = frozenset({"else_clause", "else_branch"})


class PythonGenerator(Generator):
    """Renders a UIR tree as Python source."""

    target_language = Language.PYTHON

    def __init__(self, preserve_legacy: bool = True, strict_legacy: bool = False):
        self.preserve_legacy = preserve_legacy
        self.strict_legacy = strict_legacy
        self._source_language = Language.JAVASCRIPT

    def generate(self, uir: UIRNode) -> str:
        if uir.node_type.kind is not NodeKind.MODULE:
            raise GenerationError(f"Expected a Module root, got {uir.node_type}")

        try:
            imports = collect_imports(uir)
        except TransformationError as exc:
            raise GenerationError(str(exc)) from exc

        self._source_language = uir.metadata.source_language
        # Module-level rewrites follow the leading import statements
        rewrites = _module_rewrites(uir)
        body: list[str] = []
        for child in uir.children:
            if rewrites and child.name != "import":
                body.extend(rewrites)
                rewrites = []
            lines = self._emit(child, 0)
            if child.node_type.kind in (NodeKind.FUNCTION, NodeKind.CLASS) and body:
                body.extend(["", ""])
            body.extend(lines)
        body.extend(rewrites)

        header = [f"# Generated by Coalesce from {self._source_language.value}"]
        if imports:
            header.append("")
            header.extend(imports)
        output = header + ([""] + body if body else [])
        logger.debug("generated %d line(s) of Python", len(output))
        return "\n".join(output) + "\n"

    # --- Statements ---

    def _emit(self, node: UIRNode, indent: int, in_class: bool = False) -> list[str]:
        pad = INDENT * indent
        annotations = node.metadata.annotations
        if self.preserve_legacy:
            lines = _legacy_comments(node, pad)
        else:
            lines = []
            self._drop_legacy(node)

        if ann.requires_manual_implementation(annotations):
            fallback = annotations.get(ann.FALLBACK_IMPLEMENTATION, "")
            lines.extend(_comment_lines(fallback, pad))

        if annotations.get(ann.GENERATED_CODE):
            for key in (ann.SETUP_CODE, ann.GENERATED_CODE, ann.CLEANUP_CODE):
                code = annotations.get(key)
                if code:
                    lines.extend(pad + line for line in code.splitlines())
            # Rewritten headers such as ``class X(Base):`` keep their body
            if node.node_type.kind in (NodeKind.CLASS, NodeKind.FUNCTION) and _opens_block(
                annotations[ann.GENERATED_CODE]
            ):
                body = [c for c in node.children if "parameter" not in c.metadata.semantic_tags]
                in_body = node.node_type.kind is NodeKind.CLASS
                lines.extend(self._emit_block(body, indent + 1, in_class=in_body))
            return lines

        return lines + self._emit_structure(node, indent, in_class)

    def _drop_legacy(self, node: UIRNode) -> None:
        """Verbatim-preserve patterns are lost when legacy comments are off."""
        for pattern in node.metadata.legacy_patterns:
            if not pattern.preserve_exactly:
                continue
            if self.strict_legacy:
                raise LegacyPatternError(pattern.original_construct)
            logger.warning("node %s: dropping preserved %s", node.id, pattern.pattern_type)

    def _emit_structure(self, node: UIRNode, indent: int, in_class: bool) -> list[str]:
        pad = INDENT * indent
        kind = node.node_type.kind

        if kind is NodeKind.FUNCTION:
            return self._emit_function(node, indent, in_class)
        if kind in (NodeKind.CLASS, NodeKind.INTERFACE):
            header = f"{pad}class {node.name or 'Anonymous'}:"
            body = self._emit_block(node.children, indent + 1, in_class=True)
            return [header] + body
        if kind is NodeKind.MODULE:
            lines = [f"{pad}# namespace {node.name}"] if node.name else []
            for child in node.children:
                lines.extend(self._emit(child, indent))
            return lines
        if kind in (NodeKind.VARIABLE, NodeKind.CONSTANT):
            return self._emit_binding(node, pad)
        if kind is NodeKind.STATEMENT:
            return self._emit_statement(node, indent)
        if kind is NodeKind.CONTROL_FLOW:
            return self._emit_control_flow(node, indent)

        # Expressions in statement position
        if node.node_type.sub_kind is ExpressionKind.LITERAL:
            return _comment_lines(_text(node), pad)
        return [pad + self._expr(node)]

    def _emit_block(self, nodes: list[UIRNode], indent: int, in_class: bool = False) -> list[str]:
        lines: list[str] = []
        for node in nodes:
            lines.extend(self._emit(node, indent, in_class))
        if not any(line.strip() and not line.strip().startswith("#") for line in lines):
            lines.append(INDENT * indent + "pass")
        return lines

    def _emit_function(self, node: UIRNode, indent: int, in_class: bool) -> list[str]:
        pad = INDENT * indent
        params = [c for c in node.children if "parameter" in c.metadata.semantic_tags]
        body = [c for c in node.children if "parameter" not in c.metadata.semantic_tags]

        rendered = [self._parameter(p) for p in params]
        if in_class and self._source_language is not Language.PYTHON:
            rendered.insert(0, "self")
        header = f"{pad}def {node.name or 'anonymous'}({', '.join(rendered)}):"

        # Expression-bodied functions return their expression
        if len(body) == 1 and body[0].node_type.kind is NodeKind.EXPRESSION:
            return [header, f"{pad}{INDENT}return {self._expr(body[0])}"]
        return [header] + self._emit_block(body, indent + 1)

    def _parameter(self, param: UIRNode) -> str:
        text = param.name or "_"
        declared = param.metadata.annotations.get(ann.DECLARED_TYPE)
        if declared and self._source_language is Language.PYTHON:
            text = f"{text}: {declared}"
        if param.children:
            text = f"{text}={self._expr(param.children[0])}"
        return text

    def _emit_binding(self, node: UIRNode, pad: str) -> list[str]:
        legacy = node.metadata.legacy_patterns
        if any(p.preserve_exactly for p in legacy):
            return []
        if _is_assignment_like(node):
            return [pad + self._assignment(node)]

        # Declarations holding several declarators (C, Go, Java)
        declarators = [c for c in node.children if c.node_type.kind is NodeKind.VARIABLE]
        if declarators:
            lines = []
            for declarator in declarators:
                lines.extend(self._emit_binding(declarator, pad))
            return lines

        values = [c for c in node.children if not _is_type(c)]
        rendered = self._expr(values[-1]) if values else "None"
        return [f"{pad}{node.name or '_'} = {rendered}"]

    def _emit_statement(self, node: UIRNode, indent: int) -> list[str]:
        pad = INDENT * indent
        sub_kind = node.node_type.sub_kind

        if sub_kind is StatementKind.RETURN:
            if node.children:
                return [f"{pad}return {self._expr(node.children[0])}"]
            return [f"{pad}return"]
        if sub_kind is StatementKind.BREAK:
            return [f"{pad}break"]
        if sub_kind is StatementKind.CONTINUE:
            return [f"{pad}continue"]
        if sub_kind is StatementKind.THROW:
            if node.children:
                return [f"{pad}raise {self._expr(node.children[0])}"]
            return [f"{pad}raise"]

        if node.name == "import":
            # Source-language imports only carry over between Python trees
            if self._source_language is Language.PYTHON:
                return [pad + _text(node)]
            return []

        lines: list[str] = []
        for child in node.children:
            if child.node_type.kind is NodeKind.EXPRESSION and not _has_annotations(child):
                lines.append(pad + self._expr(child))
            else:
                lines.extend(self._emit(child, indent))
        return lines

    def _emit_control_flow(self, node: UIRNode, indent: int) -> list[str]:
        pad = INDENT * indent
        sub_kind = node.node_type.sub_kind

        if sub_kind is ControlFlowKind.CONDITIONAL and node.children:
            return self._emit_conditional(node, indent, "if")
        if sub_kind is ControlFlowKind.LOOP:
            loop = self._emit_loop(node, indent)
            if loop is not None:
                return loop
        if sub_kind is ControlFlowKind.GOTO and node.metadata.legacy_patterns:
            return []

        logger.debug("no Python rendering for %s (%s)", node.node_type, node.id)
        return [f"{pad}# {node.node_type}:"] + _comment_lines(_text(node), pad)

    def _emit_conditional(self, node: UIRNode, indent: int, keyword: str) -> list[str]:
        pad = INDENT * indent
        condition, rest = node.children[0], node.children[1:]
        then = [c for c in rest if not ELSE_TAGS & set(c.metadata.semantic_tags)]
        otherwise = [c for c in rest if ELSE_TAGS & set(c.metadata.semantic_tags)]

        lines = [f"{pad}{keyword} {self._expr(condition)}:"]
        lines.extend(self._emit_block(then, indent + 1))
        if not otherwise:
            return lines

        branch = _unwrap_else(otherwise)
        if len(branch) == 1 and branch[0].node_type.sub_kind is ControlFlowKind.CONDITIONAL:
            return lines + self._emit_conditional(branch[0], indent, "elif")
        return lines + [f"{pad}else:"] + self._emit_block(branch, indent + 1)

    def _emit_loop(self, node: UIRNode, indent: int) -> list[str] | None:
        pad = INDENT * indent
        loop = node.node_type.loop
        children = node.children

        if loop is LoopKind.WHILE and children:
            return [f"{pad}while {self._expr(children[0])}:"] + self._emit_block(
                children[1:], indent + 1
            )
        if loop is LoopKind.FOR_EACH and len(children) >= 2:
            target, iterable = children[0], children[1]
            header = f"{pad}for {self._expr(target)} in {self._expr(iterable)}:"
            return [header] + self._emit_block(children[2:], indent + 1)
        if loop is LoopKind.DO_WHILE and len(children) == 2:
            body, condition = children
            lines = [f"{pad}while True:"] + self._emit_block([body], indent + 1)
            lines.append(f"{pad}{INDENT}if not ({self._expr(condition)}):")
            return lines + [f"{pad}{INDENT * 2}break"]
        if loop is LoopKind.FOR and len(children) == 4:
            init, condition, update, body = children
            lines = self._emit(init, indent)
            lines.append(f"{pad}while {self._expr(condition)}:")
            lines.extend(self._emit_block([body], indent + 1))
            return lines + self._emit(update, indent + 1)
        return None

    def _assignment(self, node: UIRNode) -> str:
        op = _operator(node) or "="
        if len(node.children) < 2:
            return self._expr(node.children[0]) if node.children else "pass"
        if "ann_assign_statement" in node.metadata.semantic_tags:
            target, annotation = node.children[0], node.children[1]
            declared = f"{self._expr(target)}: {_text(annotation)}"
            if len(node.children) == 3:
                return f"{declared} = {self._expr(node.children[2])}"
            return declared
        targets = " = ".join(self._expr(c) for c in node.children[:-1])
        return f"{targets} {op} {self._expr(node.children[-1])}"

    # --- Expressions ---

    def _expr(self, node: UIRNode) -> str:
        node_type = node.node_type
        kind, sub_kind = node_type.kind, node_type.sub_kind

        if kind is NodeKind.STATEMENT and len(node.children) == 1:
            return self._expr(node.children[0])
        if kind is NodeKind.VARIABLE:
            return node.name or _text(node)
        if kind is NodeKind.FUNCTION:
            return self._lambda(node)
        if sub_kind is ControlFlowKind.CONDITIONAL and len(node.children) == 3:
            condition, then, otherwise = (self._expr(c) for c in node.children)
            return f"{then} if {condition} else {otherwise}"
        if sub_kind is ExpressionKind.LITERAL:
            return _literal(node)
        if sub_kind is ExpressionKind.VARIABLE:
            text = node.name or _text(node)
            return text.replace("this.", "self.")
        if sub_kind is ExpressionKind.FUNCTION_CALL:
            return self._call(node)
        if sub_kind is ExpressionKind.ASSIGNMENT:
            return self._assignment(node)
        if sub_kind in (
            ExpressionKind.ARITHMETIC,
            ExpressionKind.COMPARISON,
            ExpressionKind.LOGICAL,
        ):
            return self._operation(node)
        return _text(node) or node.name or "None"

    def _call(self, node: UIRNode) -> str:
        children = node.children
        if node.name is not None:
            callee, args = node.name, children
        elif len(children) == 1 and children[0].node_type.sub_kind is ExpressionKind.FUNCTION_CALL:
            # await / new wrappers
            return self._call(children[0])
        elif children:
            callee, args = self._expr(children[0]), children[1:]
        else:
            return _text(node) or "None"
        callee = CALLEE_MAP.get(callee, callee)
        return f"{callee}({', '.join(self._argument(a) for a in args)})"

    def _argument(self, node: UIRNode) -> str:
        keyword = node.metadata.annotations.get(ann.KEYWORD)
        if keyword is None:
            return self._expr(node)
        if keyword == "**":
            return f"**{self._expr(node)}"
        return f"{keyword}={self._expr(node)}"

    def _operation(self, node: UIRNode) -> str:
        op = _operator(node)
        operands = [self._operand(c) for c in node.children]
        if op in ("++", "--") and len(operands) == 1:
            return f"{operands[0]} {op[0]}= 1"
        if len(operands) == 1:
            spacer = " " if op and op.isalpha() else ""
            return f"{op or ''}{spacer}{operands[0]}"
        if op is None:
            return _text(node) or "None"
        return f" {op} ".join(operands)

    def _operand(self, node: UIRNode) -> str:
        rendered = self._expr(node)
        if node.node_type.sub_kind in (
            ExpressionKind.ARITHMETIC,
            ExpressionKind.COMPARISON,
            ExpressionKind.LOGICAL,
        ) and len(node.children) > 1:
            return f"({rendered})"
        return rendered

    def _lambda(self, node: UIRNode) -> str:
        params = [c for c in node.children if "parameter" in c.metadata.semantic_tags]
        body = [c for c in node.children if "parameter" not in c.metadata.semantic_tags]
        if len(body) == 1:
            only = body[0]
            if only.node_type.sub_kind is StatementKind.RETURN and only.children:
                only = only.children[0]
            if only.node_type.kind is NodeKind.EXPRESSION:
                args = ", ".join(self._parameter(p) for p in params)
                prefix = f"lambda {args}" if args else "lambda"
                return f"{prefix}: {self._expr(only)}"
        return node.name or "None"


def collect_imports(uir: UIRNode) -> list[str]:
    """Ordered union of every node's ``required_imports``."""
    imports: list[str] = []
    for node in uir.walk():
        for line in ann.required_imports(node.metadata.annotations):
            if line not in imports:
                imports.append(line)
    return imports


def _text(node: UIRNode) -> str:
    return node.metadata.annotations.get(ann.ORIGINAL_TEXT, "")


def _literal(node: UIRNode) -> str:
    text = (_text(node) or node.name or "None").strip()
    return LITERAL_MAP.get(text, text)


def _operator(node: UIRNode) -> str | None:
    op = node.metadata.annotations.get(ann.OPERATOR)
    if op is None:
        return None
    return OPERATOR_MAP.get(op, op)


def _opens_block(code: str) -> bool:
    lines = code.splitlines()
    return bool(lines) and lines[0].rstrip().endswith(":")


def _is_type(node: UIRNode) -> bool:
    tags = node.metadata.semantic_tags
    return bool(tags) and "type" in tags[0]


def _is_assignment_like(node: UIRNode) -> bool:
    return ann.OPERATOR in node.metadata.annotations and len(node.children) > 1


def _has_annotations(node: UIRNode) -> bool:
    annotations = node.metadata.annotations
    return bool(annotations.get(ann.GENERATED_CODE)) or bool(node.metadata.legacy_patterns) or (
        ann.requires_manual_implementation(annotations)
    )


def _unwrap_else(branches: list[UIRNode]) -> list[UIRNode]:
    """Statements of an else branch, without the grammar's clause wrapper."""
    statements: list[UIRNode] = []
    for branch in branches:
        if "else_clause" in branch.metadata.semantic_tags:
            statements.extend(branch.children)
        else:
            statements.append(branch)
    if len(statements) == 1 and statements[0].node_type.sub_kind is StatementKind.EXPRESSION:
        inner = statements[0]
        if inner.children and all(c.node_type.kind is not NodeKind.EXPRESSION for c in inner.children):
            return list(inner.children)
    return statements


def _module_rewrites(uir: UIRNode) -> list[str]:
    """Rewrites anchored on the module itself, such as usages in comments."""
    annotations = uir.metadata.annotations
    lines: list[str] = []
    if ann.requires_manual_implementation(annotations):
        lines.extend(_comment_lines(annotations.get(ann.FALLBACK_IMPLEMENTATION, ""), ""))
    for key in (ann.SETUP_CODE, ann.GENERATED_CODE, ann.CLEANUP_CODE):
        code = annotations.get(key)
        if code:
            lines.extend(code.splitlines())
    return lines


def _comment_lines(text: str, pad: str) -> list[str]:
    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("//"):
            stripped = stripped[2:].lstrip()
        lines.append(f"{pad}# {stripped}".rstrip())
    return lines


def _legacy_comments(node: UIRNode, pad: str) -> list[str]:
    lines = []
    for pattern in node.metadata.legacy_patterns:
        if pattern.preserve_exactly:
            lines.append(f"{pad}# LEGACY {pattern.pattern_type} (preserved):")
            lines.extend(f"{pad}#   {line}" for line in pattern.original_construct.splitlines())
        else:
            hint = f": {pattern.modernization_hint}" if pattern.modernization_hint else ""
            lines.append(f"{pad}# LEGACY {pattern.pattern_type}{hint}")
            lines.extend(f"{pad}#   {line}" for line in pattern.original_construct.splitlines())
    return lines
