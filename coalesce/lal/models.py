"""Detection records for library dependencies and the usages found for them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from coalesce.errors import TransformationError
from coalesce.uir import annotations as ann


@dataclass
class LibraryUsage:
    """One match of a usage signature in the source text."""

    pattern_name: str
    method_name: str  # Full matched text
    parameters: dict[str, str] = field(default_factory=dict)
    semantic_intent: str = ""
    source_location: tuple[int, int] = (0, 0)  # UTF-8 byte offsets (start, end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern_name": self.pattern_name,
            "method_name": self.method_name,
            "parameters": dict(self.parameters),
            "semantic_intent": self.semantic_intent,
            "source_location": list(self.source_location),
        }

    @classmethod
    def from_dict(cls, data: dict) -> LibraryUsage:
        if not isinstance(data, dict):
            raise TransformationError(f"Usage must be a mapping, got {type(data).__name__}")
        parameters = data.get("parameters", {})
        if not isinstance(parameters, dict):
            raise TransformationError(
                f"Usage parameters must be a mapping, got {type(parameters).__name__}"
            )
        try:
            start, end = data.get("source_location", (0, 0))
            return cls(
                pattern_name=data["pattern_name"],
                method_name=data.get("method_name", ""),
                parameters={str(k): str(v) for k, v in parameters.items()},
                semantic_intent=data.get("semantic_intent", ""),
                source_location=(int(start), int(end)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TransformationError(f"Malformed library usage: {exc}") from exc


@dataclass
class LibraryDependency:
    """A library imported and used by a source unit."""

    name: str
    ecosystem: str
    version: str | None = None
    import_path: str | None = None
    usage_patterns: list[LibraryUsage] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "ecosystem": self.ecosystem,
            "import_path": self.import_path,
            "usage_patterns": [u.to_dict() for u in self.usage_patterns],
        }

    @classmethod
    def from_dict(cls, data: dict) -> LibraryDependency:
        if not isinstance(data, dict):
            raise TransformationError(
                f"Library dependency must be a mapping, got {type(data).__name__}"
            )
        usages = data.get("usage_patterns", [])
        if not isinstance(usages, list):
            raise TransformationError(
                f"'usage_patterns' must be a list, got {type(usages).__name__}"
            )
        try:
            name = data["name"]
        except KeyError as exc:
            raise TransformationError(f"Library dependency has no {exc}") from exc
        return cls(
            name=name,
            ecosystem=data.get("ecosystem", ""),
            version=data.get("version"),
            import_path=data.get("import_path"),
            usage_patterns=[LibraryUsage.from_dict(u) for u in usages],
        )

    def to_annotation(self) -> str:
        """JSON string stored under the ``library_dependency`` annotation."""
        return ann.encode_json(self.to_dict())

    @classmethod
    def from_annotation(cls, annotations: dict[str, Any]) -> LibraryDependency | None:
        """First dependency stored on a node, or None when absent."""
        deps = cls.list_from_annotation(annotations)
        return deps[0] if deps else None

    @classmethod
    def list_from_annotation(cls, annotations: dict[str, Any]) -> list[LibraryDependency]:
        """Decode the ``library_dependency`` annotation.

        The value is one serialized dependency, or a list of them when
        several libraries share a node. Raises TransformationError when the
        stored value is malformed.
        """
        data = ann.decode_json(annotations, ann.LIBRARY_DEPENDENCY)
        if data is None:
            return []
        items = data if isinstance(data, list) else [data]
        try:
            return [cls.from_dict(item) for item in items]
        except (AttributeError, TypeError) as exc:
            raise TransformationError(f"Malformed library dependency annotation: {exc}") from exc


def encode_dependencies(deps: list[LibraryDependency]) -> str:
    """Annotation value for ``deps``: a single object when there is only one."""
    if len(deps) == 1:
        return deps[0].to_annotation()
    return ann.encode_json([d.to_dict() for d in deps])
