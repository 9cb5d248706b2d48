"""Universal Intermediate Representation (UIR) for cross-language translation.

The UIR is the typed tree every front end produces and every back end
consumes. It sits between language-specific concrete syntax trees (from
tree-sitter, the stdlib ``ast`` module, or regex extraction) and the
target-language emitters.

The UIR carries:
- Structure (modules, functions, classes, control flow, expressions)
- Provenance (source language, grammar kind, source location)
- Annotations exchanged between the library abstraction layer and emitters
- Legacy constructs that must be preserved or flagged for modernization
"""

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

__all__ = [
    "ControlFlowKind",
    "ExpressionKind",
    "Language",
    "LegacyPattern",
    "LoopKind",
    "Metadata",
    "NodeKind",
    "NodeType",
    "SourceLocation",
    "StatementKind",
    "UIRNode",
]
