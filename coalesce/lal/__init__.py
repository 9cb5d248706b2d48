"""Library Abstraction Layer (LAL).

Detects ecosystem idioms in source text, attaches them to the UIR as
annotations, and rewrites them for a target ecosystem:

    lal = LibraryAbstractionLayer()
    deps = lal.analyze_dependencies(source, Language.JAVASCRIPT)
    lal.enhance_uir(uir, deps, source)
    rewritten = lal.transform_library_calls(uir, Language.JAVASCRIPT, "vue")
"""

from __future__ import annotations

import logging

from coalesce.lal.detector import DependencyDetector
from coalesce.lal.models import LibraryDependency, LibraryUsage, encode_dependencies
from coalesce.lal.registry import PatternRegistry, default_registry
from coalesce.lal.transformer import LibraryTransformer
from coalesce.uir import annotations as ann
from coalesce.uir.models import Language, UIRNode

logger = logging.getLogger(__name__)


class LibraryAbstractionLayer:
    """Detector, registry and transformer wired together."""

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        detector: DependencyDetector | None = None,
        isolate_errors: bool = False,
        default_ecosystems: dict[str, str] | None = None,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.detector = detector if detector is not None else DependencyDetector()
        self.transformer = LibraryTransformer(
            self.registry, isolate_errors=isolate_errors, default_ecosystems=default_ecosystems
        )

    def analyze_dependencies(self, code: str, language: Language) -> list[LibraryDependency]:
        return self.detector.detect(code, language)

    def enhance_uir(
        self, root: UIRNode, deps: list[LibraryDependency], source: str | None = None
    ) -> UIRNode:
        """Attach detected dependencies to the tree as annotations, in place.

        Without ``source`` every dependency is attached to ``root`` (a later
        one replaces an earlier one). With the source text each usage is
        anchored on the deepest node spanning it that carries no other
        dependency yet; when every enclosing node already carries one, the
        usage is merged into the deepest enclosing node's annotation.
        """
        if source is None:
            for dep in deps:
                if ann.LIBRARY_DEPENDENCY in root.metadata.annotations:
                    logger.warning("replacing library dependency on root with %s", dep.name)
                _annotate(root, dep, [u for u in dep.usage_patterns if u.method_name == root.name])
            return root

        encoded = source.encode("utf-8")
        for dep in deps:
            for usage in dep.usage_patterns:
                start = _point(encoded, usage.source_location[0])
                end = _point(encoded, usage.source_location[1])
                path = _enclosing(root, start, end)
                anchor = _free(path)
                if anchor is None:
                    _merge(path[-1], dep, usage)
                    continue
                _annotate(anchor, _single(dep, usage), [usage])
        return root

    def transform_library_calls(
        self,
        uir: UIRNode,
        target_language: Language | str,
        target_ecosystem: str | None = None,
    ) -> UIRNode:
        return self.transformer.transform(uir, target_language, target_ecosystem)

    def get_target_ecosystems(self, library: str) -> list[str]:
        return self.registry.target_ecosystems(library)


def _annotate(node: UIRNode, dep: LibraryDependency, matched: list[LibraryUsage]) -> None:
    annotations = node.metadata.annotations
    annotations[ann.LIBRARY_DEPENDENCY] = dep.to_annotation()
    for usage in matched:
        annotations[ann.LIBRARY_PATTERN] = usage.pattern_name
        annotations[ann.SEMANTIC_INTENT] = usage.semantic_intent


def _point(encoded: bytes, offset: int) -> tuple[int, int]:
    """(1-based line, 0-based byte column) of a byte offset."""
    line = encoded.count(b"\n", 0, offset) + 1
    column = offset - (encoded.rfind(b"\n", 0, offset) + 1)
    return line, column


def _enclosing(root: UIRNode, start: tuple[int, int], end: tuple[int, int]) -> list[UIRNode]:
    """Nodes spanning start..end, from the root down to the deepest one."""
    path = [root]
    node = root
    while True:
        inner = next(
            (
                child
                for child in node.children
                if child.source_location is not None and child.source_location.encloses(start, end)
            ),
            None,
        )
        if inner is None:
            return path
        path.append(inner)
        node = inner


def _free(path: list[UIRNode]) -> UIRNode | None:
    """Deepest node of ``path`` without a dependency annotation."""
    for candidate in reversed(path):
        if ann.LIBRARY_DEPENDENCY not in candidate.metadata.annotations:
            return candidate
    return None


def _single(dep: LibraryDependency, usage: LibraryUsage) -> LibraryDependency:
    return LibraryDependency(
        name=dep.name,
        ecosystem=dep.ecosystem,
        version=dep.version,
        import_path=dep.import_path,
        usage_patterns=[usage],
    )


def _merge(node: UIRNode, dep: LibraryDependency, usage: LibraryUsage) -> None:
    """Add ``usage`` to the dependencies already stored on ``node``."""
    stored = LibraryDependency.list_from_annotation(node.metadata.annotations)
    same = next((d for d in stored if d.name == dep.name), None)
    if same is not None:
        same.usage_patterns.append(usage)
    else:
        stored.append(_single(dep, usage))
    node.metadata.annotations[ann.LIBRARY_DEPENDENCY] = encode_dependencies(stored)
    logger.debug("node %s: merged %s:%s", node.id, dep.name, usage.pattern_name)


__all__ = [
    "DependencyDetector",
    "LibraryAbstractionLayer",
    "LibraryDependency",
    "LibraryTransformer",
    "LibraryUsage",
    "PatternRegistry",
    "default_registry",
]
