"""Library pattern models and the built-in pattern tables.

A ``LibraryPattern`` describes one library idiom: its signature, what it
means (``PatternSemantics``, used for cross-ecosystem equivalence) and how
to rewrite it for other ecosystems (``TransformRule`` per target
ecosystem). Rule templates use ``{{param}}`` placeholders filled from the
detected usage's parameters.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from coalesce.errors import TransformationError


@dataclass
class PatternSemantics:
    intent: str
    category: str = ""
    behavior: str = ""
    side_effects: list[str] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    mutability: bool = False
    reactivity: bool = False


@dataclass
class PatternParameter:
    name: str
    param_type: str = "any"
    required: bool = False
    default_value: str | None = None
    description: str = ""


@dataclass
class TransformRule:
    target_library: str
    target_pattern: str
    template: str
    imports: list[str] = field(default_factory=list)
    setup_code: str | None = None
    cleanup_code: str | None = None
    parameter_mappings: dict[str, str] = field(default_factory=dict)


@dataclass
class LibraryPattern:
    name: str
    library: str
    ecosystem: str
    semantics: PatternSemantics
    signature: str = ""
    parameters: list[PatternParameter] = field(default_factory=list)
    transformations: dict[str, TransformRule] = field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        return f"{self.library}:{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> LibraryPattern:
        """Build a pattern from a plain mapping (as loaded from YAML).

        Raises TransformationError when required fields are missing or
        have the wrong shape.
        """
        if not isinstance(data, dict):
            raise TransformationError(f"Pattern must be a mapping, got {type(data).__name__}")
        try:
            semantics = data["semantics"]
            if not isinstance(semantics, dict):
                raise TypeError("'semantics' must be a mapping")
            return cls(
                name=str(data["name"]),
                library=str(data["library"]),
                ecosystem=str(data["ecosystem"]),
                signature=str(data.get("signature", "")),
                semantics=PatternSemantics(**semantics),
                parameters=[PatternParameter(**p) for p in data.get("parameters") or []],
                transformations={
                    str(eco): TransformRule(**rule)
                    for eco, rule in (data.get("transformations") or {}).items()
                },
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise TransformationError(f"Invalid pattern definition: {exc}") from exc


# --- Built-in pattern tables ---


def react_patterns() -> list[LibraryPattern]:
    return [
        LibraryPattern(
            name="useState",
            library="react",
            ecosystem="javascript",
            signature="const [state, setState] = useState(initialValue)",
            semantics=PatternSemantics(
                intent="reactive_state_management",
                category="state",
                behavior="Creates reactive state that triggers re-renders",
                side_effects=["component_rerender"],
                requirements=["react_component_context"],
                mutability=True,
                reactivity=True,
            ),
            parameters=[
                PatternParameter("initial", "any", True, "undefined", "Initial state value"),
            ],
            transformations={
                "vue": TransformRule(
                    target_library="vue",
                    target_pattern="ref",
                    template="const {{state}} = ref({{initial}})",
                    imports=["import { ref } from 'vue'"],
                    parameter_mappings={"setter": "{{state}}.value = "},
                ),
                "svelte": TransformRule(
                    target_library="svelte",
                    target_pattern="writable",
                    template="const {{state}} = writable({{initial}})",
                    imports=["import { writable } from 'svelte/store'"],
                    parameter_mappings={"setter": "{{state}}.set"},
                ),
            },
        ),
        LibraryPattern(
            name="useEffect",
            library="react",
            ecosystem="javascript",
            signature="useEffect(callback, dependencies)",
            semantics=PatternSemantics(
                intent="side_effect_lifecycle",
                category="lifecycle",
                behavior="Executes side effects after render",
                side_effects=["dom_mutation", "api_calls", "subscriptions"],
                requirements=["react_component_context"],
                mutability=False,
                reactivity=True,
            ),
            parameters=[
                PatternParameter("callback", "function", True, None, "Effect callback function"),
                PatternParameter("deps", "array", False, "[]", "Dependency array"),
            ],
            transformations={
                "vue": TransformRule(
                    target_library="vue",
                    target_pattern="watchEffect",
                    template="watchEffect(() => { {{callback}} })",
                    imports=["import { watchEffect } from 'vue'"],
                ),
            },
        ),
    ]


def django_patterns() -> list[LibraryPattern]:
    return [
        LibraryPattern(
            name="Model",
            library="django",
            ecosystem="python",
            signature="class MyModel(models.Model)",
            semantics=PatternSemantics(
                intent="orm_model",
                category="database",
                behavior="Defines a database table structure",
                side_effects=["database_table_creation"],
                requirements=["django_orm"],
                mutability=True,
            ),
            transformations={
                "sqlalchemy": TransformRule(
                    target_library="sqlalchemy",
                    target_pattern="declarative_base",
                    template="class {{name}}(Base):\n    __tablename__ = '{{table_name}}'",
                    imports=[
                        "from sqlalchemy.orm import declarative_base",
                        "Base = declarative_base()",
                    ],
                ),
            },
        ),
        LibraryPattern(
            name="CharField",
            library="django",
            ecosystem="python",
            signature="field = models.CharField(max_length=100)",
            semantics=PatternSemantics(
                intent="text_field",
                category="database_field",
                behavior="Defines a text field in database",
                side_effects=["database_column_creation"],
                requirements=["django_model"],
                mutability=True,
            ),
            parameters=[
                PatternParameter("length", "integer", True, None, "Maximum character length"),
            ],
            transformations={
                "sqlalchemy": TransformRule(
                    target_library="sqlalchemy",
                    target_pattern="String",
                    template="{{field}} = Column(String({{length}}))",
                    imports=["from sqlalchemy import Column, String"],
                ),
            },
        ),
    ]


def networking_patterns() -> list[LibraryPattern]:
    return [
        LibraryPattern(
            name="tcp_socket",
            library="socket",
            ecosystem="c",
            signature="int sock = socket(AF_INET, SOCK_STREAM, 0)",
            semantics=PatternSemantics(
                intent="tcp_socket_creation",
                category="networking",
                behavior="Creates a TCP socket for network communication",
                side_effects=["system_resource_allocation"],
                requirements=["socket_library"],
            ),
            transformations={
                "rust": TransformRule(
                    target_library="std",
                    target_pattern="TcpStream",
                    template='let stream = TcpStream::connect("{{address}}:{{port}}")',
                    imports=["use std::net::TcpStream"],
                ),
                "go": TransformRule(
                    target_library="net",
                    target_pattern="Dial",
                    template='conn, err := net.Dial("tcp", "{{address}}:{{port}}")',
                    imports=['import "net"'],
                    cleanup_code="defer conn.Close()",
                ),
                "python": TransformRule(
                    target_library="socket",
                    target_pattern="socket",
                    template="{{var}} = socket.socket(socket.AF_INET, socket.SOCK_STREAM)",
                    imports=["import socket"],
                    cleanup_code="{{var}}.close()",
                ),
            },
        ),
    ]


def http_patterns() -> list[LibraryPattern]:
    return [
        LibraryPattern(
            name="get",
            library="requests",
            ecosystem="python",
            signature="response = requests.get(url)",
            semantics=PatternSemantics(
                intent="http_get_request",
                category="networking",
                behavior="Performs a blocking HTTP GET request",
                side_effects=["network_io"],
                requirements=["requests_library"],
            ),
            parameters=[PatternParameter("url", "string", True, None, "Request URL")],
            transformations={
                "httpx": TransformRule(
                    target_library="httpx",
                    target_pattern="get",
                    template="{{target}} = httpx.get({{url}})",
                    imports=["import httpx"],
                ),
                "vanilla": TransformRule(
                    target_library="fetch",
                    target_pattern="fetch",
                    template="const {{target}} = await fetch({{url}})",
                ),
            },
        ),
        LibraryPattern(
            name="post",
            library="requests",
            ecosystem="python",
            signature="response = requests.post(url, data)",
            semantics=PatternSemantics(
                intent="http_post_request",
                category="networking",
                behavior="Performs a blocking HTTP POST request",
                side_effects=["network_io"],
                requirements=["requests_library"],
            ),
            parameters=[PatternParameter("url", "string", True, None, "Request URL")],
            transformations={
                "httpx": TransformRule(
                    target_library="httpx",
                    target_pattern="post",
                    template="{{target}} = httpx.post({{url}})",
                    imports=["import httpx"],
                ),
            },
        ),
    ]


def target_ecosystem_patterns() -> list[LibraryPattern]:
    """Idioms native to target ecosystems, found through semantic equivalence."""
    return [
        LibraryPattern(
            name="ref",
            library="vue",
            ecosystem="vue",
            signature="const state = ref(initialValue)",
            semantics=PatternSemantics(
                intent="reactive_state_management",
                category="state",
                behavior="Creates a reactive reference",
                requirements=["vue_setup_context"],
                mutability=True,
                reactivity=True,
            ),
            transformations={
                "react": TransformRule(
                    target_library="react",
                    target_pattern="useState",
                    template="const [{{state}}, {{setter}}] = useState({{initial}})",
                    imports=["import { useState } from 'react'"],
                ),
            },
        ),
        LibraryPattern(
            name="writable",
            library="svelte",
            ecosystem="svelte",
            signature="const state = writable(initialValue)",
            semantics=PatternSemantics(
                intent="reactive_state_management",
                category="state",
                behavior="Creates a writable store",
                mutability=True,
                reactivity=True,
            ),
        ),
        LibraryPattern(
            name="declarative_model",
            library="sqlalchemy",
            ecosystem="sqlalchemy",
            signature="class MyModel(Base)",
            semantics=PatternSemantics(
                intent="orm_model",
                category="database",
                behavior="Maps a class to a database table",
                side_effects=["database_table_creation"],
                requirements=["sqlalchemy_orm"],
                mutability=True,
            ),
        ),
        LibraryPattern(
            name="Dial",
            library="net",
            ecosystem="go",
            signature='conn, err := net.Dial("tcp", address)',
            semantics=PatternSemantics(
                intent="tcp_socket_creation",
                category="networking",
                behavior="Opens a TCP connection",
                side_effects=["system_resource_allocation"],
            ),
        ),
        LibraryPattern(
            name="TcpStream",
            library="std",
            ecosystem="rust",
            signature="let stream = TcpStream::connect(address)",
            semantics=PatternSemantics(
                intent="tcp_socket_creation",
                category="networking",
                behavior="Opens a TCP connection",
                side_effects=["system_resource_allocation"],
            ),
        ),
        LibraryPattern(
            name="fetch",
            library="fetch",
            ecosystem="vanilla",
            signature="const response = await fetch(url)",
            semantics=PatternSemantics(
                intent="http_get_request",
                category="networking",
                behavior="Performs an HTTP request with the Fetch API",
                side_effects=["network_io"],
            ),
        ),
    ]


def default_patterns() -> list[LibraryPattern]:
    return (
        react_patterns()
        + django_patterns()
        + networking_patterns()
        + http_patterns()
        + target_ecosystem_patterns()
    )


# Ecosystems each source library's idioms are known to port to
ECOSYSTEM_MAPPINGS: dict[str, list[str]] = {
    "react": ["vue", "svelte", "angular", "vanilla"],
    "django": ["sqlalchemy", "fastapi", "flask"],
    "socket": ["rust", "go", "python", "javascript"],
    "requests": ["httpx", "vanilla"],
}
