"""Regex-driven front ends for languages without a grammar in the pack.

These front ends scan raw text for declaration-shaped lines and emit a
flat tree: a ``Module`` root whose children are the matched constructs in
source order. They do not nest declarations, do not see expressions and
mark their root ``fidelity = "shallow"``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from coalesce.frontends.base import LegacySpec, Parser, make_metadata, make_node_id
from coalesce.uir import annotations as ann
from coalesce.uir.models import LegacyPattern, NodeType, SourceLocation, UIRNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Construct:
    """One recognizable line shape.

    ``regex`` must define a ``name`` group. Optional groups: ``params``
    (parameter nodes), ``value`` and ``type`` (annotations).
    """

    kind: str
    regex: re.Pattern
    node_type: NodeType
    legacy: LegacySpec | None = None


class PatternFrontend(Parser):
    root_name: str = "program"
    constructs: tuple[Construct, ...] = ()
    import_regex: re.Pattern | None = None

    def parse(self, source: str) -> UIRNode:
        lines = source.splitlines()
        root = UIRNode(
            id=make_node_id("source_file", 0, 0, source),
            node_type=NodeType.module(),
            name=self.root_name,
            metadata=make_metadata(self.language, "source_file", source),
            source_location=SourceLocation(
                start_line=1,
                end_line=max(len(lines), 1),
                end_column=len(lines[-1]) if lines else 0,
            ),
        )

        nodes: list[UIRNode] = []
        for construct in self.constructs:
            for match in construct.regex.finditer(source):
                node = self.build(construct, match, source)
                if node is not None:
                    nodes.append(node)
        nodes.sort(key=lambda n: (n.source_location.start_line, n.source_location.start_column))
        root.children = nodes

        root.metadata.annotations[ann.FIDELITY] = "shallow"
        if self.import_regex is not None:
            for match in self.import_regex.finditer(source):
                target = match.group("name")
                if target not in root.metadata.dependencies:
                    root.metadata.dependencies.append(target)
        logger.debug("%s: extracted %d constructs", self.language.value, len(nodes))
        return root

    def build(self, construct: Construct, match: re.Match, source: str) -> UIRNode | None:
        """Turn one match into a node; returning None drops the match."""
        node = self._node(construct.kind, construct.node_type, match.group("name"), match, source)
        groups = match.re.groupindex
        if "value" in groups and match.group("value") is not None:
            node.metadata.annotations[ann.VALUE] = match.group("value").strip()
        if "type" in groups and match.group("type") is not None:
            node.metadata.annotations[ann.DECLARED_TYPE] = match.group("type")
        if "params" in groups and match.group("params"):
            params = match.group("params")
            for name, declared_type in self.parameters(params):
                offset = match.start("params") + max(params.find(name), 0)
                param = self._node("parameter", NodeType.variable(), name, match, source, offset)
                if declared_type:
                    param.metadata.annotations[ann.DECLARED_TYPE] = declared_type
                node.children.append(param)
        if construct.legacy is not None:
            node.metadata.legacy_patterns.append(
                LegacyPattern(
                    pattern_type=construct.legacy.pattern_type,
                    original_construct=match.group(0).strip(),
                    modernization_hint=construct.legacy.modernization_hint,
                    preserve_exactly=construct.legacy.preserve_exactly,
                )
            )
        return node

    def parameters(self, text: str) -> list[tuple[str, str | None]]:
        """``(name, declared_type)`` pairs from a parameter list."""
        return []

    def _node(
        self,
        kind: str,
        node_type: NodeType,
        name: str | None,
        match: re.Match,
        source: str,
        offset: int | None = None,
    ) -> UIRNode:
        whole = match.group(0)
        if offset is None:
            start = match.start() + len(whole) - len(whole.lstrip())
            text = whole.strip()
        else:
            start, text = offset, name or ""
        row = source.count("\n", 0, start)
        column = start - (source.rfind("\n", 0, start) + 1)
        return UIRNode(
            id=make_node_id(kind, row, column, text),
            node_type=node_type,
            name=name,
            metadata=make_metadata(self.language, kind, text),
            source_location=SourceLocation(
                start_line=row + 1,
                end_line=row + 1 + text.count("\n"),
                start_column=column,
                end_column=column + len(text.rsplit("\n", 1)[-1]),
            ),
        )
