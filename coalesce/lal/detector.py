"""Dependency detector — finds library imports and idiom usages in raw source text.

Detection works on text rather than on the UIR: a library counts only when
its import signature is present, and each non-overlapping match of one of
its usage signatures becomes a ``LibraryUsage``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from coalesce.errors import UnsupportedLanguage
from coalesce.lal.models import LibraryDependency, LibraryUsage
from coalesce.uir.models import Language

logger = logging.getLogger(__name__)


@dataclass
class UsageSignature:
    pattern_name: str
    regex: re.Pattern
    semantic_intent: str


@dataclass
class DetectionPattern:
    """Import signature gating one or more usage signatures of a library."""

    library: str
    ecosystem: str
    import_regex: re.Pattern
    usages: list[UsageSignature] = field(default_factory=list)


# --- Built-in detection sets ---

REACT_PATTERNS = [
    DetectionPattern(
        library="react",
        ecosystem="javascript",
        import_regex=re.compile(r"""import.*\{[^}]*useState[^}]*\}.*from.*['"]react['"]"""),
        usages=[
            UsageSignature(
                "useState",
                re.compile(
                    r"const\s*\[\s*(?P<state>\w+)\s*,\s*(?P<setter>\w+)\s*\]\s*=\s*"
                    r"useState\s*\(\s*(?P<initial>[^)]*)\s*\)"
                ),
                "reactive_state_management",
            ),
        ],
    ),
    DetectionPattern(
        library="react",
        ecosystem="javascript",
        import_regex=re.compile(r"""import.*\{[^}]*useEffect[^}]*\}.*from.*['"]react['"]"""),
        usages=[
            UsageSignature(
                "useEffect",
                re.compile(
                    r"useEffect\s*\(\s*(?P<callback>[^,]+)\s*,\s*(?P<deps>\[[^\]]*\])\s*\)"
                ),
                "side_effect_lifecycle",
            ),
        ],
    ),
]

DJANGO_PATTERNS = [
    DetectionPattern(
        library="django",
        ecosystem="python",
        import_regex=re.compile(r"from\s+django\.db\s+import\s+models"),
        usages=[
            UsageSignature(
                "Model",
                re.compile(r"class\s+(?P<name>\w+)\s*\(\s*models\.Model\s*\)"),
                "orm_model",
            ),
            UsageSignature(
                "CharField",
                re.compile(
                    r"(?P<field>\w+)\s*=\s*models\.CharField\s*\(\s*max_length\s*=\s*(?P<length>\d+)"
                ),
                "text_field",
            ),
        ],
    ),
]

REQUESTS_PATTERNS = [
    DetectionPattern(
        library="requests",
        ecosystem="python",
        import_regex=re.compile(r"^\s*(?:import\s+requests\b|from\s+requests\s+import\b)", re.MULTILINE),
        usages=[
            UsageSignature(
                "get",
                re.compile(r"(?:(?P<target>\w+)\s*=\s*)?requests\.get\s*\(\s*(?P<url>[^,)]+)"),
                "http_get_request",
            ),
            UsageSignature(
                "post",
                re.compile(r"(?:(?P<target>\w+)\s*=\s*)?requests\.post\s*\(\s*(?P<url>[^,)]+)"),
                "http_post_request",
            ),
        ],
    ),
]

SOCKET_PATTERNS = [
    DetectionPattern(
        library="socket",
        ecosystem="c",
        import_regex=re.compile(r"#include\s+<sys/socket\.h>"),
        usages=[
            UsageSignature(
                "tcp_socket",
                re.compile(
                    r"(?P<var>\w+)\s*=\s*socket\s*\(\s*(?P<family>AF_\w+)\s*,\s*"
                    r"(?P<type>SOCK_\w+)\s*,\s*(?P<protocol>\d+)\s*\)"
                ),
                "tcp_socket_creation",
            ),
        ],
    ),
]

DEFAULT_DETECTION_PATTERNS: dict[Language, list[DetectionPattern]] = {
    Language.JAVASCRIPT: REACT_PATTERNS,
    Language.PYTHON: DJANGO_PATTERNS + REQUESTS_PATTERNS,
    Language.C: SOCKET_PATTERNS,
}


class DependencyDetector:
    """Scans source text for the detection patterns registered per language."""

    def __init__(self, patterns: dict[Language, list[DetectionPattern]] | None = None):
        source = DEFAULT_DETECTION_PATTERNS if patterns is None else patterns
        self._patterns = {lang: list(items) for lang, items in source.items()}

    def register(self, language: Language, pattern: DetectionPattern) -> None:
        self._patterns.setdefault(language, []).append(pattern)

    def languages(self) -> list[Language]:
        return list(self._patterns)

    def detect(self, code: str, language: Language) -> list[LibraryDependency]:
        """Dependencies used by ``code``, one per library name.

        Raises UnsupportedLanguage when no detection set exists for ``language``.
        """
        patterns = self._patterns.get(language)
        if patterns is None:
            raise UnsupportedLanguage(language)

        offsets = _ByteOffsets(code)
        found: dict[str, LibraryDependency] = {}
        for pattern in patterns:
            import_match = pattern.import_regex.search(code)
            if import_match is None:
                continue

            usages = [
                _usage(signature, match, offsets)
                for signature in pattern.usages
                for match in signature.regex.finditer(code)
            ]
            if not usages:
                continue

            dep = found.get(pattern.library)
            if dep is None:
                found[pattern.library] = LibraryDependency(
                    name=pattern.library,
                    ecosystem=pattern.ecosystem,
                    import_path=import_match.group(0).strip(),
                    usage_patterns=usages,
                )
                continue
            # Another import variant of the same library
            known = {(u.pattern_name, u.source_location) for u in dep.usage_patterns}
            dep.usage_patterns.extend(
                u for u in usages if (u.pattern_name, u.source_location) not in known
            )

        deps = list(found.values())
        logger.debug(
            "%s: detected %d libraries (%s)",
            language.value,
            len(deps),
            ", ".join(d.name for d in deps) or "none",
        )
        return deps


def _usage(signature: UsageSignature, match: re.Match, offsets: _ByteOffsets) -> LibraryUsage:
    return LibraryUsage(
        pattern_name=signature.pattern_name,
        method_name=match.group(0),
        parameters={k: v for k, v in match.groupdict().items() if v is not None},
        semantic_intent=signature.semantic_intent,
        source_location=(offsets.of(match.start()), offsets.of(match.end())),
    )


class _ByteOffsets:
    """Character offset to UTF-8 byte offset conversion for one text."""

    def __init__(self, text: str):
        self._text = text
        self._ascii = text.isascii()

    def of(self, index: int) -> int:
        if self._ascii:
            return index
        return len(self._text[:index].encode("utf-8"))
