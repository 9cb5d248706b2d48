"""Discover translatable source files and classify them by language."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from coalesce.uir.models import Language

# Directories to always skip
SKIP_DIRS = {
    ".git", "__pycache__", "node_modules", ".venv", "venv", ".env",
    "dist", "build", ".tox", ".mypy_cache", ".pytest_cache", ".ruff_cache",
    "target", "vendor", ".next", ".nuxt", "coverage", ".coalesce",
}

# Source extensions with a front end, mapped to language
LANGUAGE_MAP = {
    ".py": Language.PYTHON,
    ".js": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".java": Language.JAVA,
    ".c": Language.C,
    ".h": Language.C,
    ".cpp": Language.CPP,
    ".cc": Language.CPP,
    ".cxx": Language.CPP,
    ".hpp": Language.CPP,
    ".cs": Language.CSHARP,
    ".fs": Language.FSHARP,
    ".fsx": Language.FSHARP,
    ".vb": Language.VISUAL_BASIC,
    ".bas": Language.VISUAL_BASIC,
}


def scan_project_files(
    repo_path: Path, languages: Iterable[Language] | None = None
) -> list[Path]:
    """Recursively scan a project directory for source files, in path order.

    Skips common non-source directories. When ``languages`` is given only
    files in those languages are returned.
    """
    wanted = set(languages) if languages is not None else None
    files = []
    for item in sorted(Path(repo_path).rglob("*")):
        if item.is_file() and _should_include(item):
            if wanted is None or classify_file(item) in wanted:
                files.append(item)
    return files


def _should_include(path: Path) -> bool:
    """Check if a file should be included in analysis."""
    # Skip files in excluded directories
    for part in path.parts:
        if part in SKIP_DIRS:
            return False

    # Only include known source file types
    return path.suffix.lower() in LANGUAGE_MAP


def classify_file(path: Path) -> Language | None:
    """Return the language classification for a file, or None if unknown."""
    return LANGUAGE_MAP.get(Path(path).suffix.lower())


def summarize_languages(files: Iterable[Path]) -> Counter[Language]:
    """File count per language."""
    return Counter(lang for lang in map(classify_file, files) if lang is not None)
