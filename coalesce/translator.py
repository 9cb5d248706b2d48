"""Translator — the end-to-end pipeline.

    source --front end--> UIR --detector/enhance--> annotated UIR
           --transformer--> rewritten UIR --back end--> target code

Each run ends in one of three outcomes: ``complete`` (everything was
rewritten automatically), ``complete_with_markers`` (code was produced but
some library usages need manual work), or ``failed`` (a parse, annotation
or generation error stopped the pipeline).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from coalesce.backends import GENERATORS, create_generator
from coalesce.errors import CoalesceError, UnsupportedLanguage
from coalesce.frontends import create_parser, detect_language
from coalesce.lal import LibraryAbstractionLayer
from coalesce.lal.models import LibraryDependency
from coalesce.lal.registry import PatternRegistry
from coalesce.uir import annotations as ann
from coalesce.uir.models import Language, UIRNode

logger = logging.getLogger(__name__)


class TranslationOutcome(str, Enum):
    COMPLETE = "complete"
    COMPLETE_WITH_MARKERS = "complete_with_markers"
    FAILED = "failed"


@dataclass
class ManualMarker:
    """A node the transformer could not rewrite automatically."""

    node_id: str
    line: int
    comment: str


@dataclass
class TranslationResult:
    outcome: TranslationOutcome
    source_language: Language | None = None
    target_language: Language | None = None
    uir: UIRNode | None = None
    dependencies: list[LibraryDependency] = field(default_factory=list)
    code: str | None = None
    manual_markers: list[ManualMarker] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not TranslationOutcome.FAILED

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "source_language": self.source_language.value if self.source_language else None,
            "target_language": self.target_language.value if self.target_language else None,
            "uir": self.uir.to_dict() if self.uir else None,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "code": self.code,
            "manual_markers": [
                {"node_id": m.node_id, "line": m.line, "comment": m.comment}
                for m in self.manual_markers
            ],
            "error": self.error,
        }


class Translator:
    """Runs source text through the whole pipeline."""

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        isolate_errors: bool = False,
        default_ecosystems: dict[str, str] | None = None,
        preserve_legacy_patterns: bool = True,
    ):
        self.preserve_legacy_patterns = preserve_legacy_patterns
        self.lal = LibraryAbstractionLayer(
            registry=registry,
            isolate_errors=isolate_errors,
            default_ecosystems=default_ecosystems,
        )

    def translate(
        self,
        source: str,
        source_language: Language | str | None = None,
        target_language: Language | str = Language.PYTHON,
        target_ecosystem: str | None = None,
        filename: str | Path | None = None,
    ) -> TranslationResult:
        """Translate ``source``; errors are reported in the result, not raised.

        ``source_language`` is detected from ``filename`` and the content
        when omitted.
        """
        try:
            source_lang = _resolve(source_language) or detect_language(source, filename)
            target_lang = _resolve(target_language)
        except UnsupportedLanguage as exc:
            return TranslationResult(TranslationOutcome.FAILED, error=str(exc))

        result = TranslationResult(
            TranslationOutcome.FAILED,
            source_language=source_lang,
            target_language=target_lang,
        )
        logger.info("translating %s -> %s", source_lang.value, target_lang.value)

        try:
            uir = create_parser(source_lang).parse(source)
            result.dependencies = self._detect(source, source_lang)
            self.lal.enhance_uir(uir, result.dependencies, source)
            result.uir = self.lal.transform_library_calls(uir, target_lang, target_ecosystem)
            result.manual_markers = manual_markers(result.uir)
            if target_lang.value in GENERATORS:
                generator = create_generator(target_lang)
                generator.preserve_legacy = self.preserve_legacy_patterns
                result.code = generator.generate(result.uir)
            else:
                logger.warning("no back end for %s; returning the rewritten UIR only", target_lang.value)
        except CoalesceError as exc:
            logger.warning("translation failed: %s", exc)
            result.error = str(exc)
            return result

        result.outcome = (
            TranslationOutcome.COMPLETE_WITH_MARKERS
            if result.manual_markers
            else TranslationOutcome.COMPLETE
        )
        logger.info(
            "translation %s (%d manual marker(s))", result.outcome.value, len(result.manual_markers)
        )
        return result

    def translate_file(
        self,
        path: str | Path,
        target_language: Language | str = Language.PYTHON,
        target_ecosystem: str | None = None,
        source_language: Language | str | None = None,
    ) -> TranslationResult:
        path = Path(path)
        source = path.read_text(errors="replace")
        return self.translate(
            source,
            source_language=source_language,
            target_language=target_language,
            target_ecosystem=target_ecosystem,
            filename=path,
        )

    def _detect(self, source: str, language: Language) -> list[LibraryDependency]:
        try:
            return self.lal.analyze_dependencies(source, language)
        except UnsupportedLanguage:
            logger.debug("no detection patterns for %s", language.value)
            return []


def manual_markers(uir: UIRNode) -> list[ManualMarker]:
    """Nodes flagged ``requires_manual_implementation``, in tree order."""
    markers = []
    for node in uir.walk():
        annotations = node.metadata.annotations
        if not ann.requires_manual_implementation(annotations):
            continue
        line = node.source_location.start_line if node.source_location else 0
        markers.append(
            ManualMarker(node.id, line, annotations.get(ann.FALLBACK_IMPLEMENTATION, ""))
        )
    return markers


def _resolve(language: Language | str | None) -> Language | None:
    if language is None or isinstance(language, Language):
        return language
    return Language.from_name(language)
