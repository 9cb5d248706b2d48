"""Error taxonomy for Coalesce (parse, detection, transformation, generation)."""

from __future__ import annotations


class CoalesceError(Exception):
    """Base for all Coalesce errors."""


class ParseError(CoalesceError):
    """Source could not be normalized into a UIR tree.

    Line and column are 1-based; 0 means the position is unknown.
    """

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Parse error: {self.message} at line {self.line}, column {self.column}"


class UnsupportedLanguage(CoalesceError):
    """A detector, front end or back end has no registration for a language."""

    def __init__(self, language):
        self.language = language
        name = getattr(language, "value", language)
        super().__init__(f"Unsupported language: {name}")


class TransformationError(CoalesceError):
    """Malformed stored annotation data or a failed pattern import."""


class GenerationError(CoalesceError):
    """An emitter could not produce target code."""


class LegacyPatternError(CoalesceError):
    """A verbatim legacy pattern could not be preserved (strict emitters only)."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Legacy pattern preservation failed: {pattern}")


class RegistryFrozen(CoalesceError):
    """A write was attempted on a pattern registry after initialization."""
