"""Library router -- dependency detection and the pattern registry."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from coalesce.errors import UnsupportedLanguage
from coalesce.lal.detector import DependencyDetector
from coalesce.lal.registry import default_registry

from web.backend.app.models.api import (
    AnalyzeLibsRequest,
    AnalyzeLibsResponse,
    EcosystemsResponse,
    LibraryDependencyResponse,
    LibraryUsageResponse,
    PatternResponse,
    SuggestionResponse,
)
from web.backend.app.routers.parse import resolve_language

router = APIRouter(tags=["libraries"])


def dependency_to_response(dep) -> LibraryDependencyResponse:
    """Convert a LibraryDependency dataclass to a Pydantic response."""
    return LibraryDependencyResponse(
        name=dep.name,
        ecosystem=dep.ecosystem,
        version=dep.version,
        import_path=dep.import_path,
        usage_patterns=[
            LibraryUsageResponse(
                pattern_name=u.pattern_name,
                method_name=u.method_name,
                parameters=u.parameters,
                semantic_intent=u.semantic_intent,
                source_location=list(u.source_location),
            )
            for u in dep.usage_patterns
        ],
    )


@router.post(
    "/api/analyze-libs",
    response_model=AnalyzeLibsResponse,
    summary="Detect library idioms in source text",
)
async def analyze_libs(request: AnalyzeLibsRequest):
    language = resolve_language(request.language, request.source, request.filename)
    try:
        deps = DependencyDetector().detect(request.source, language)
    except UnsupportedLanguage as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return AnalyzeLibsResponse(
        language=language.value,
        dependencies=[dependency_to_response(d) for d in deps],
    )


@router.get(
    "/api/patterns",
    response_model=list[PatternResponse],
    summary="List registered library patterns",
)
async def list_patterns(
    library: Optional[str] = Query(None, description="Only patterns of this library"),
):
    patterns = default_registry().all_patterns()
    if library:
        patterns = [p for p in patterns if p.library == library]
    return [
        PatternResponse(
            name=p.name,
            library=p.library,
            ecosystem=p.ecosystem,
            signature=p.signature,
            intent=p.semantics.intent,
            category=p.semantics.category,
            behavior=p.semantics.behavior,
            target_ecosystems=list(p.transformations),
        )
        for p in patterns
    ]


@router.get(
    "/api/patterns/{library}/{pattern_name}/suggestions",
    response_model=list[SuggestionResponse],
    summary="Rank rewrites of a pattern for a target ecosystem",
)
async def suggestions(
    library: str,
    pattern_name: str,
    target_ecosystem: str = Query(..., description="Ecosystem to rewrite for"),
):
    registry = default_registry()
    if registry.get(library, pattern_name) is None:
        raise HTTPException(
            status_code=404,
            detail=f"Pattern '{library}:{pattern_name}' not found",
        )
    return [
        SuggestionResponse(
            confidence=s.confidence,
            suggestion_type=s.suggestion_type.value,
            target_library=s.target_library,
            target_pattern=s.target_pattern,
            description=s.description,
        )
        for s in registry.suggest(library, pattern_name, target_ecosystem)
    ]


@router.get(
    "/api/patterns/{library}/ecosystems",
    response_model=EcosystemsResponse,
    summary="Ecosystems a library's idioms port to",
)
async def ecosystems(library: str):
    return EcosystemsResponse(
        library=library,
        ecosystems=default_registry().target_ecosystems(library),
    )
