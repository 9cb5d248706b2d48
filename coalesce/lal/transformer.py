"""Library transformer — rewrites annotated library usages for a target ecosystem.

The transformer walks a UIR tree looking for ``library_dependency``
annotations. For each usage it either renders the registry's rule for the
target ecosystem into ``generated_code`` (plus imports, setup and cleanup
code) or attaches a fallback marker asking for manual work. A missing rule
is never an error.
"""

from __future__ import annotations

import copy
import logging
import re

from coalesce.errors import TransformationError
from coalesce.lal.models import LibraryDependency, LibraryUsage
from coalesce.lal.patterns import LibraryPattern, TransformRule
from coalesce.lal.registry import PatternRegistry
from coalesce.uir import annotations as ann
from coalesce.uir.models import Language, UIRNode

logger = logging.getLogger(__name__)

# Ecosystem used when the caller names none
DEFAULT_ECOSYSTEMS: dict[Language, str] = {
    Language.JAVASCRIPT: "vanilla",
    Language.PYTHON: "stdlib",
    Language.RUST: "std",
    Language.GO: "stdlib",
    Language.C: "stdlib",
    Language.CPP: "std",
    Language.CSHARP: "dotnet",
    Language.FSHARP: "dotnet",
    Language.VISUAL_BASIC: "dotnet",
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def default_ecosystem(language: Language, overrides: dict[str, str] | None = None) -> str:
    if overrides and language.value in overrides:
        return overrides[language.value]
    return DEFAULT_ECOSYSTEMS.get(language, "stdlib")


def render_template(template: str, parameters: dict[str, str]) -> str:
    """Fill ``{{name}}`` placeholders; unknown placeholders stay verbatim."""
    return _PLACEHOLDER.sub(lambda m: parameters.get(m.group(1), m.group(0)), template)


def fallback_comment(library: str, pattern_name: str, behavior: str) -> str:
    return (
        f"// TODO: Implement equivalent of {library}:{pattern_name}\n"
        f"// Original behavior: {behavior}"
    )


class LibraryTransformer:
    """Applies registry rules to every annotated node of a UIR tree.

    With ``isolate_errors`` a node whose ``library_dependency`` annotation
    cannot be decoded gets a ``transformation_error`` annotation and the
    walk continues; otherwise the TransformationError aborts the pass.
    """

    def __init__(
        self,
        registry: PatternRegistry,
        isolate_errors: bool = False,
        default_ecosystems: dict[str, str] | None = None,
    ):
        self.registry = registry
        self.isolate_errors = isolate_errors
        self.default_ecosystems = dict(default_ecosystems or {})

    def transform(
        self,
        uir: UIRNode,
        target_language: Language | str,
        target_ecosystem: str | None = None,
    ) -> UIRNode:
        """Rewritten copy of ``uir``; the input tree is left untouched."""
        if isinstance(target_language, str):
            target_language = Language.from_name(target_language)
        ecosystem = target_ecosystem or default_ecosystem(target_language, self.default_ecosystems)
        logger.info("transforming library usages for %s/%s", target_language.value, ecosystem)

        result = copy.deepcopy(uir)
        for node in result.walk():
            self._transform_node(node, ecosystem)
        return result

    def _transform_node(self, node: UIRNode, ecosystem: str) -> None:
        try:
            dependencies = LibraryDependency.list_from_annotation(node.metadata.annotations)
        except TransformationError as exc:
            if not self.isolate_errors:
                raise
            logger.warning("node %s: %s", node.id, exc)
            node.metadata.annotations[ann.TRANSFORMATION_ERROR] = str(exc)
            return

        for dependency in dependencies:
            for usage in dependency.usage_patterns:
                pattern = self.registry.get(dependency.name, usage.pattern_name)
                rule = pattern.transformations.get(ecosystem) if pattern is not None else None
                if rule is not None:
                    _apply_rule(node, pattern, rule, usage)
                else:
                    _apply_fallback(node, dependency, pattern, usage)


def _apply_rule(
    node: UIRNode, pattern: LibraryPattern, rule: TransformRule, usage: LibraryUsage
) -> None:
    annotations = node.metadata.annotations
    annotations[ann.TRANSFORMED_FROM] = pattern.qualified_name
    annotations[ann.TRANSFORMED_TO] = f"{rule.target_library}:{rule.target_pattern}"
    _append(annotations, ann.GENERATED_CODE, render_template(rule.template, usage.parameters))

    if rule.imports:
        imports = ann.required_imports(annotations)
        imports.extend(i for i in rule.imports if i not in imports)
        annotations[ann.REQUIRED_IMPORTS] = ann.encode_json(imports)
    if rule.setup_code is not None:
        _append(annotations, ann.SETUP_CODE, render_template(rule.setup_code, usage.parameters))
    if rule.cleanup_code is not None:
        _append(annotations, ann.CLEANUP_CODE, render_template(rule.cleanup_code, usage.parameters))
    logger.debug("node %s: %s -> %s", node.id, pattern.qualified_name, annotations[ann.TRANSFORMED_TO])


def _apply_fallback(
    node: UIRNode,
    dependency: LibraryDependency,
    pattern: LibraryPattern | None,
    usage: LibraryUsage,
) -> None:
    if pattern is not None:
        comment = fallback_comment(pattern.library, pattern.name, pattern.semantics.behavior)
    else:
        comment = fallback_comment(dependency.name, usage.pattern_name, usage.semantic_intent)
    annotations = node.metadata.annotations
    _append(annotations, ann.FALLBACK_IMPLEMENTATION, comment)
    annotations[ann.REQUIRES_MANUAL_IMPLEMENTATION] = ann.MANUAL_FLAG
    logger.debug("node %s: no rule for %s:%s", node.id, dependency.name, usage.pattern_name)


def _append(annotations: dict, key: str, text: str) -> None:
    """Set ``key``, joining with a newline when several usages share a node."""
    existing = annotations.get(key)
    annotations[key] = f"{existing}\n{text}" if existing else text
