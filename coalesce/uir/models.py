"""UIR data models — the language-agnostic tree shared by front ends and back ends.

These models are pure data. Front ends are responsible for building trees
whose node types agree with their children (a ``Function`` node holds its
parameters followed by its body statements); nothing here validates that.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from coalesce.errors import UnsupportedLanguage


class Language(Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    JAVA = "java"
    CSHARP = "csharp"
    FSHARP = "fsharp"
    VISUAL_BASIC = "visual_basic"
    COBOL = "cobol"
    FORTRAN = "fortran"
    C = "c"
    CPP = "cpp"

    @classmethod
    def from_name(cls, name: str) -> Language:
        """Resolve a language tag or one of its common aliases."""
        key = name.strip().lower()
        if key in _LANGUAGE_ALIASES:
            return _LANGUAGE_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedLanguage(name) from None


_LANGUAGE_ALIASES = {
    "js": Language.JAVASCRIPT,
    "ts": Language.TYPESCRIPT,
    "py": Language.PYTHON,
    "rs": Language.RUST,
    "golang": Language.GO,
    "cs": Language.CSHARP,
    "c#": Language.CSHARP,
    "fs": Language.FSHARP,
    "f#": Language.FSHARP,
    "vb": Language.VISUAL_BASIC,
    "visualbasic": Language.VISUAL_BASIC,
    "visual-basic": Language.VISUAL_BASIC,
    "c++": Language.CPP,
    "cxx": Language.CPP,
}


class NodeKind(Enum):
    MODULE = "Module"
    FUNCTION = "Function"
    CLASS = "Class"
    INTERFACE = "Interface"
    VARIABLE = "Variable"
    CONSTANT = "Constant"
    CONTROL_FLOW = "ControlFlow"
    EXPRESSION = "Expression"
    STATEMENT = "Statement"


class ControlFlowKind(Enum):
    CONDITIONAL = "Conditional"
    LOOP = "Loop"
    SWITCH = "Switch"
    TRY = "Try"
    GOTO = "Goto"  # Kept for legacy pattern preservation


class LoopKind(Enum):
    FOR = "For"
    WHILE = "While"
    DO_WHILE = "DoWhile"
    FOR_EACH = "ForEach"


class ExpressionKind(Enum):
    LITERAL = "Literal"
    VARIABLE = "Variable"
    FUNCTION_CALL = "FunctionCall"
    ARITHMETIC = "Arithmetic"
    COMPARISON = "Comparison"
    LOGICAL = "Logical"
    ASSIGNMENT = "Assignment"


class StatementKind(Enum):
    EXPRESSION = "Expression"
    RETURN = "Return"
    BREAK = "Break"
    CONTINUE = "Continue"
    THROW = "Throw"


_SUB_KINDS: dict[NodeKind, type[Enum]] = {
    NodeKind.CONTROL_FLOW: ControlFlowKind,
    NodeKind.EXPRESSION: ExpressionKind,
    NodeKind.STATEMENT: StatementKind,
}


@dataclass(frozen=True)
class NodeType:
    """Closed tagged union over UIR node categories.

    ``sub_kind`` is set only for ControlFlow, Expression and Statement;
    ``loop`` only when ``sub_kind`` is ``ControlFlowKind.LOOP``.
    """

    kind: NodeKind
    sub_kind: ControlFlowKind | ExpressionKind | StatementKind | None = None
    loop: LoopKind | None = None

    @staticmethod
    def module() -> NodeType:
        return NodeType(NodeKind.MODULE)

    @staticmethod
    def function() -> NodeType:
        return NodeType(NodeKind.FUNCTION)

    @staticmethod
    def klass() -> NodeType:
        return NodeType(NodeKind.CLASS)

    @staticmethod
    def interface() -> NodeType:
        return NodeType(NodeKind.INTERFACE)

    @staticmethod
    def variable() -> NodeType:
        return NodeType(NodeKind.VARIABLE)

    @staticmethod
    def constant() -> NodeType:
        return NodeType(NodeKind.CONSTANT)

    @staticmethod
    def control_flow(kind: ControlFlowKind, loop: LoopKind | None = None) -> NodeType:
        return NodeType(NodeKind.CONTROL_FLOW, kind, loop)

    @staticmethod
    def loop_of(kind: LoopKind) -> NodeType:
        return NodeType(NodeKind.CONTROL_FLOW, ControlFlowKind.LOOP, kind)

    @staticmethod
    def expression(kind: ExpressionKind) -> NodeType:
        return NodeType(NodeKind.EXPRESSION, kind)

    @staticmethod
    def statement(kind: StatementKind) -> NodeType:
        return NodeType(NodeKind.STATEMENT, kind)

    def __str__(self) -> str:
        if self.sub_kind is None:
            return self.kind.value
        inner = self.sub_kind.value
        if self.loop is not None:
            inner = f"{inner}({self.loop.value})"
        return f"{self.kind.value}({inner})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sub_kind": self.sub_kind.value if self.sub_kind else None,
            "loop": self.loop.value if self.loop else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> NodeType:
        kind = NodeKind(data["kind"])
        sub_kind = None
        if data.get("sub_kind"):
            sub_kind = _SUB_KINDS[kind](data["sub_kind"])
        loop = LoopKind(data["loop"]) if data.get("loop") else None
        return cls(kind, sub_kind, loop)


@dataclass
class LegacyPattern:
    """A source construct to preserve verbatim or flag for modernization."""

    pattern_type: str
    original_construct: str
    modernization_hint: str | None = None
    preserve_exactly: bool = False


@dataclass
class SourceLocation:
    """Span in the original source. Lines are 1-based, columns 0-based."""

    file: str = ""
    start_line: int = 0
    end_line: int = 0
    start_column: int = 0
    end_column: int = 0

    def encloses(self, start: tuple[int, int], end: tuple[int, int]) -> bool:
        """Whether the (line, column) span ``start``..``end`` lies inside this one."""
        return (self.start_line, self.start_column) <= start and end <= (
            self.end_line,
            self.end_column,
        )


@dataclass
class Metadata:
    source_language: Language = Language.JAVASCRIPT
    semantic_tags: list[str] = field(default_factory=list)
    complexity_score: float | None = None
    dependencies: list[str] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    legacy_patterns: list[LegacyPattern] = field(default_factory=list)


@dataclass
class UIRNode:
    """A node of the universal tree.

    Children are ordered; order carries meaning (argument order,
    statement sequence).
    """

    id: str
    node_type: NodeType
    name: str | None = None
    children: list[UIRNode] = field(default_factory=list)
    metadata: Metadata = field(default_factory=Metadata)
    source_location: SourceLocation | None = None

    def with_metadata(self, metadata: Metadata) -> UIRNode:
        self.metadata = metadata
        return self

    def add_child(self, child: UIRNode) -> UIRNode:
        self.children.append(child)
        return self

    def walk(self) -> Iterator[UIRNode]:
        """Pre-order traversal including this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, predicate: Callable[[UIRNode], bool]) -> list[UIRNode]:
        return [n for n in self.walk() if predicate(n)]

    def count_nodes(self) -> int:
        return sum(1 for _ in self.walk())

    def to_dict(self) -> dict[str, Any]:
        meta = self.metadata
        return {
            "id": self.id,
            "node_type": self.node_type.to_dict(),
            "name": self.name,
            "children": [c.to_dict() for c in self.children],
            "metadata": {
                "source_language": meta.source_language.value,
                "semantic_tags": list(meta.semantic_tags),
                "complexity_score": meta.complexity_score,
                "dependencies": list(meta.dependencies),
                "annotations": dict(meta.annotations),
                "legacy_patterns": [
                    {
                        "pattern_type": p.pattern_type,
                        "original_construct": p.original_construct,
                        "modernization_hint": p.modernization_hint,
                        "preserve_exactly": p.preserve_exactly,
                    }
                    for p in meta.legacy_patterns
                ],
            },
            "source_location": (
                {
                    "file": self.source_location.file,
                    "start_line": self.source_location.start_line,
                    "end_line": self.source_location.end_line,
                    "start_column": self.source_location.start_column,
                    "end_column": self.source_location.end_column,
                }
                if self.source_location
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> UIRNode:
        meta_data = data.get("metadata", {})
        metadata = Metadata(
            source_language=Language(meta_data.get("source_language", "javascript")),
            semantic_tags=meta_data.get("semantic_tags", []),
            complexity_score=meta_data.get("complexity_score"),
            dependencies=meta_data.get("dependencies", []),
            annotations=meta_data.get("annotations", {}),
            legacy_patterns=[
                LegacyPattern(**p) for p in meta_data.get("legacy_patterns", [])
            ],
        )
        location = data.get("source_location")
        return cls(
            id=data["id"],
            node_type=NodeType.from_dict(data["node_type"]),
            name=data.get("name"),
            children=[cls.from_dict(c) for c in data.get("children", [])],
            metadata=metadata,
            source_location=SourceLocation(**location) if location else None,
        )
