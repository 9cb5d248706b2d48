"""Pattern registry — library idioms, their meaning and their rewrite rules.

Patterns are keyed by ``(library, pattern_name)``. The registry answers
two questions: which idioms share a meaning (``find_equivalents``), and
what the best rewrites of an idiom for a target ecosystem are
(``suggest``). An author-declared rule always outranks an idiom found
through semantic equivalence.

Build the registry once, ``freeze()`` it, then share it read-only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml

from coalesce.errors import RegistryFrozen, TransformationError
from coalesce.lal.patterns import ECOSYSTEM_MAPPINGS, LibraryPattern, default_patterns

logger = logging.getLogger(__name__)

DIRECT_CONFIDENCE = 1.0
SEMANTIC_CONFIDENCE = 0.8


class SuggestionType(str, Enum):
    DIRECT_TRANSFORM = "direct_transform"
    SEMANTIC_EQUIVALENT = "semantic_equivalent"


@dataclass
class Suggestion:
    """A ranked rewrite candidate for one idiom."""

    confidence: float
    suggestion_type: SuggestionType
    target_library: str
    target_pattern: str
    description: str


class PatternRegistry:
    """In-memory registry of library patterns."""

    def __init__(self):
        self._patterns: dict[str, dict[str, LibraryPattern]] = {}
        self._ecosystems: dict[str, list[str]] = {}
        self._frozen = False

    @classmethod
    def with_defaults(cls) -> PatternRegistry:
        """Registry holding the built-in patterns and ecosystem table (not frozen)."""
        registry = cls()
        registry.register_defaults()
        return registry

    def register_defaults(self) -> None:
        for pattern in default_patterns():
            self.register(pattern)
        for library, ecosystems in ECOSYSTEM_MAPPINGS.items():
            self.register_ecosystems(library, ecosystems)

    # --- Writes ---

    def register(self, pattern: LibraryPattern) -> None:
        """Store ``pattern``; a pattern with the same key is replaced."""
        self._check_writable()
        self._patterns.setdefault(pattern.library, {})[pattern.name] = pattern
        logger.debug("registered pattern %s", pattern.qualified_name)

    def register_ecosystems(self, library: str, ecosystems: list[str]) -> None:
        self._check_writable()
        self._ecosystems[library] = list(ecosystems)

    def register_from_yaml(self, text: str) -> list[LibraryPattern]:
        """Register patterns from YAML: a mapping, a list, or a multi-document stream.

        Raises TransformationError on malformed YAML or pattern shape.
        """
        self._check_writable()
        try:
            documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
        except yaml.YAMLError as exc:
            raise TransformationError(f"YAML parse error: {exc}") from exc

        entries = []
        for doc in documents:
            entries.extend(doc if isinstance(doc, list) else [doc])
        patterns = [LibraryPattern.from_dict(entry) for entry in entries]
        for pattern in patterns:
            self.register(pattern)
        return patterns

    def register_from_file(self, path: str | Path) -> list[LibraryPattern]:
        path = Path(path)
        try:
            text = path.read_text()
        except OSError as exc:
            raise TransformationError(f"Cannot read pattern file {path}: {exc}") from exc
        patterns = self.register_from_yaml(text)
        logger.info("loaded %d pattern(s) from %s", len(patterns), path)
        return patterns

    def freeze(self) -> PatternRegistry:
        """Make the registry read-only; returns self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self) -> None:
        if self._frozen:
            raise RegistryFrozen("Pattern registry is frozen")

    # --- Reads ---

    def get(self, library: str, pattern_name: str) -> LibraryPattern | None:
        return self._patterns.get(library, {}).get(pattern_name)

    def library_patterns(self, library: str) -> dict[str, LibraryPattern]:
        return dict(self._patterns.get(library, {}))

    def libraries(self) -> list[str]:
        return list(self._patterns)

    def all_patterns(self) -> list[LibraryPattern]:
        return [p for by_name in self._patterns.values() for p in by_name.values()]

    def find_equivalents(self, semantic_intent: str) -> list[LibraryPattern]:
        """Every pattern whose semantics share ``semantic_intent``."""
        return [p for p in self.all_patterns() if p.semantics.intent == semantic_intent]

    def suggest(self, library: str, pattern_name: str, target_ecosystem: str) -> list[Suggestion]:
        """Rewrite candidates for an idiom, best first.

        A direct rule for ``target_ecosystem`` scores 1.0; an idiom from a
        different library native to ``target_ecosystem`` with the same
        intent scores 0.8. Unknown idioms get no suggestions.
        """
        pattern = self.get(library, pattern_name)
        if pattern is None:
            return []

        suggestions = []
        rule = pattern.transformations.get(target_ecosystem)
        if rule is not None:
            suggestions.append(
                Suggestion(
                    confidence=DIRECT_CONFIDENCE,
                    suggestion_type=SuggestionType.DIRECT_TRANSFORM,
                    target_library=rule.target_library,
                    target_pattern=rule.target_pattern,
                    description=f"Direct transformation to {target_ecosystem}",
                )
            )

        for equivalent in self.find_equivalents(pattern.semantics.intent):
            if equivalent.ecosystem == target_ecosystem and equivalent.library != library:
                suggestions.append(
                    Suggestion(
                        confidence=SEMANTIC_CONFIDENCE,
                        suggestion_type=SuggestionType.SEMANTIC_EQUIVALENT,
                        target_library=equivalent.library,
                        target_pattern=equivalent.name,
                        description=f"Semantic equivalent: {equivalent.name}",
                    )
                )

        # Stable sort keeps registration order among equal confidences
        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions

    def target_ecosystems(self, library: str) -> list[str]:
        return list(self._ecosystems.get(library, []))

    def __len__(self) -> int:
        return sum(len(by_name) for by_name in self._patterns.values())


@lru_cache(maxsize=1)
def default_registry() -> PatternRegistry:
    """Process-wide frozen registry with the built-in patterns, built on first use."""
    return PatternRegistry.with_defaults().freeze()
