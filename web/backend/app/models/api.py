"""Pydantic models for API request/response serialization.

These models mirror the Coalesce dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Parse models
# ---------------------------------------------------------------------------


class ParseRequest(BaseModel):
    """Request body for UIR parsing."""

    source: str
    language: Optional[str] = Field(None, description="Language tag; detected if omitted")
    filename: Optional[str] = Field(None, description="Used for language detection only")


class ParseResponse(BaseModel):
    language: str
    node_count: int
    fidelity: str = "full"
    parse_error: Optional[str] = None
    dependencies: list[str] = Field(default_factory=list)
    uir: dict[str, Any]


class LanguagesResponse(BaseModel):
    frontends: list[str]
    backends: list[str]


# ---------------------------------------------------------------------------
# Library analysis models
# ---------------------------------------------------------------------------


class LibraryUsageResponse(BaseModel):
    """Mirrors coalesce.lal.models.LibraryUsage."""

    pattern_name: str
    method_name: str
    parameters: dict[str, str] = Field(default_factory=dict)
    semantic_intent: str
    source_location: list[int] = Field(default_factory=list)


class LibraryDependencyResponse(BaseModel):
    """Mirrors coalesce.lal.models.LibraryDependency."""

    name: str
    ecosystem: str
    version: Optional[str] = None
    import_path: Optional[str] = None
    usage_patterns: list[LibraryUsageResponse] = Field(default_factory=list)


class AnalyzeLibsRequest(BaseModel):
    source: str
    language: Optional[str] = None
    filename: Optional[str] = None


class AnalyzeLibsResponse(BaseModel):
    language: str
    dependencies: list[LibraryDependencyResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Translation models
# ---------------------------------------------------------------------------


class TranslateRequest(BaseModel):
    source: str
    source_language: Optional[str] = None
    target_language: str = "python"
    target_ecosystem: Optional[str] = None
    filename: Optional[str] = None
    isolate_errors: bool = False
    include_uir: bool = False


class ManualMarkerResponse(BaseModel):
    """Mirrors coalesce.translator.ManualMarker."""

    node_id: str
    line: int = 0
    comment: str = ""


class TranslateResponse(BaseModel):
    """Mirrors coalesce.translator.TranslationResult."""

    outcome: str
    source_language: str
    target_language: str
    code: Optional[str] = None
    dependencies: list[LibraryDependencyResponse] = Field(default_factory=list)
    manual_markers: list[ManualMarkerResponse] = Field(default_factory=list)
    uir: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Pattern registry models
# ---------------------------------------------------------------------------


class PatternResponse(BaseModel):
    """Mirrors coalesce.lal.patterns.LibraryPattern (summary)."""

    name: str
    library: str
    ecosystem: str
    signature: str = ""
    intent: str
    category: str = ""
    behavior: str = ""
    target_ecosystems: list[str] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    """Mirrors coalesce.lal.registry.Suggestion."""

    confidence: float
    suggestion_type: str
    target_library: str
    target_pattern: str
    description: str = ""


class EcosystemsResponse(BaseModel):
    library: str
    ecosystems: list[str] = Field(default_factory=list)
