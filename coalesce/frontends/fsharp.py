"""F# front end (shallow, regex based)."""

from __future__ import annotations

import re

from coalesce.frontends.pattern_based import Construct, PatternFrontend
from coalesce.uir.models import Language, NodeType, UIRNode

_FLAGS = re.MULTILINE

_PARAMETER = re.compile(r"\(\s*(\w+)\s*:\s*([^)]+?)\s*\)|(\w+)")

FSHARP_CONSTRUCTS = (
    Construct(
        "namespace",
        re.compile(r"^[ \t]*namespace\s+(?P<name>\w+(?:\.\w+)*)[ \t]*$", _FLAGS),
        NodeType.module(),
    ),
    Construct(
        "module",
        re.compile(r"^[ \t]*module\s+(?P<name>\w+(?:\.\w+)*)[ \t]*=?[ \t]*$", _FLAGS),
        NodeType.module(),
    ),
    Construct(
        "type",
        re.compile(r"^[ \t]*type\s+(?P<name>\w+)", _FLAGS),
        NodeType.klass(),
    ),
    Construct(
        "function",
        re.compile(
            r"^[ \t]*let\s+(?!mutable\b)(?:rec\s+|inline\s+)?(?P<name>\w+)[ \t]+(?P<params>[^=\n]+?)[ \t]*=",
            _FLAGS,
        ),
        NodeType.function(),
    ),
    Construct(
        "variable",
        re.compile(
            r"^[ \t]*let\s+(?:mutable\s+)?(?P<name>\w+)[ \t]*=[ \t]*(?P<value>[^\n]+)", _FLAGS
        ),
        NodeType.variable(),
    ),
)


class FSharpFrontend(PatternFrontend):
    language = Language.FSHARP
    root_name = "fsharp_program"
    constructs = FSHARP_CONSTRUCTS
    import_regex = re.compile(r"^[ \t]*open\s+(?P<name>[\w.]+)", _FLAGS)

    def build(self, construct: Construct, match: re.Match, source: str) -> UIRNode | None:
        if construct.kind == "function":
            params = match.group("params").strip()
            # ``let x : int = 1`` is a typed binding, not a function
            if params.startswith(":") or not any(ch.isalpha() for ch in params):
                return None
        return super().build(construct, match, source)

    def parameters(self, text: str) -> list[tuple[str, str | None]]:
        params = []
        for typed_name, declared_type, bare_name in _PARAMETER.findall(text):
            if typed_name:
                params.append((typed_name, declared_type))
            elif bare_name:
                params.append((bare_name, None))
        return params
