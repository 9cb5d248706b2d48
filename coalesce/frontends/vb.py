"""Visual Basic front end (shallow, regex based).

Besides declarations it flags the classic unstructured jumps (``GoTo``,
``On Error GoTo``, ``GoSub``) as legacy patterns.
"""

from __future__ import annotations

import re

from coalesce.frontends.base import LegacySpec
from coalesce.frontends.pattern_based import Construct, PatternFrontend
from coalesce.uir.models import ControlFlowKind, Language, NodeType

_FLAGS = re.MULTILINE | re.IGNORECASE

_MODIFIERS = r"(?:(?:Public|Private|Protected|Friend|Shared|Overridable|Overrides|MustOverride|Async)\s+)*"

_PARAMETER = re.compile(
    r"^(?:(?:ByVal|ByRef|Optional|ParamArray)\s+)*(?P<name>\w+)(?:\(\))?(?:\s+As\s+(?P<type>[\w.()]+))?",
    re.IGNORECASE,
)

GOTO = NodeType.control_flow(ControlFlowKind.GOTO)

VB_CONSTRUCTS = (
    Construct(
        "namespace",
        re.compile(r"^[ \t]*Namespace\s+(?P<name>\w+(?:\.\w+)*)[ \t]*$", _FLAGS),
        NodeType.module(),
    ),
    Construct(
        "module",
        re.compile(rf"^[ \t]*{_MODIFIERS}Module\s+(?P<name>\w+)[ \t]*$", _FLAGS),
        NodeType.module(),
    ),
    Construct(
        "class",
        re.compile(
            rf"^[ \t]*{_MODIFIERS}(?:(?:MustInherit|NotInheritable|Partial)\s+)?Class\s+(?P<name>\w+)[ \t]*$",
            _FLAGS,
        ),
        NodeType.klass(),
    ),
    Construct(
        "interface",
        re.compile(rf"^[ \t]*{_MODIFIERS}Interface\s+(?P<name>\w+)[ \t]*$", _FLAGS),
        NodeType.interface(),
    ),
    Construct(
        "function",
        re.compile(
            rf"^[ \t]*{_MODIFIERS}Function\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)(?:\s+As\s+(?P<type>[\w.]+))?",
            _FLAGS,
        ),
        NodeType.function(),
    ),
    Construct(
        "sub",
        re.compile(rf"^[ \t]*{_MODIFIERS}Sub\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)", _FLAGS),
        NodeType.function(),
    ),
    Construct(
        "property",
        re.compile(
            rf"^[ \t]*{_MODIFIERS}(?:ReadOnly\s+|WriteOnly\s+)?Property\s+(?P<name>\w+)\s*(?:\([^)]*\))?\s*As\s+(?P<type>[\w.]+)",
            _FLAGS,
        ),
        NodeType.variable(),
    ),
    Construct(
        "dim",
        re.compile(
            r"^[ \t]*Dim\s+(?P<name>\w+)(?:\s+As\s+(?:New\s+)?(?P<type>[\w.]+))?(?:[ \t]*=[ \t]*(?P<value>[^\n]+))?",
            _FLAGS,
        ),
        NodeType.variable(),
    ),
    Construct(
        "const",
        re.compile(
            rf"^[ \t]*{_MODIFIERS}Const\s+(?P<name>\w+)(?:\s+As\s+(?P<type>[\w.]+))?[ \t]*=[ \t]*(?P<value>[^\n]+)",
            _FLAGS,
        ),
        NodeType.constant(),
    ),
    Construct(
        "goto",
        re.compile(r"^[ \t]*GoTo\s+(?P<name>\w+)", _FLAGS),
        GOTO,
        LegacySpec("goto", "Replace GoTo with structured control flow"),
    ),
    Construct(
        "on_error_goto",
        re.compile(r"^[ \t]*On\s+Error\s+GoTo\s+(?P<name>-?\w+)", _FLAGS),
        GOTO,
        LegacySpec("on_error_goto", "Replace On Error GoTo with Try/Catch"),
    ),
    Construct(
        "gosub",
        re.compile(r"^[ \t]*GoSub\s+(?P<name>\w+)", _FLAGS),
        GOTO,
        LegacySpec("gosub", "Replace GoSub with a Sub call"),
    ),
)


class VisualBasicFrontend(PatternFrontend):
    language = Language.VISUAL_BASIC
    root_name = "vb_program"
    constructs = VB_CONSTRUCTS
    import_regex = re.compile(r"^[ \t]*Imports\s+(?P<name>[\w.]+)", _FLAGS)

    def parameters(self, text: str) -> list[tuple[str, str | None]]:
        params = []
        for part in text.split(","):
            match = _PARAMETER.match(part.strip())
            if match:
                params.append((match.group("name"), match.group("type")))
        return params
