"""Parse router -- normalize source text into the UIR."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException

from coalesce.backends import supported_targets
from coalesce.errors import ParseError, UnsupportedLanguage
from coalesce.frontends import create_parser, detect_language, supported_languages
from coalesce.uir import annotations as ann
from coalesce.uir.models import Language

from web.backend.app.models.api import LanguagesResponse, ParseRequest, ParseResponse

router = APIRouter(tags=["parse"])


def resolve_language(name: Optional[str], source: str, filename: Optional[str] = None) -> Language:
    """Language for a request: the explicit tag, else detection. 400 on unknown tags."""
    if name is None:
        return detect_language(source, filename)
    try:
        return Language.from_name(name)
    except UnsupportedLanguage as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post(
    "/api/parse",
    response_model=ParseResponse,
    summary="Parse source text into the UIR",
)
async def parse_source(request: ParseRequest):
    """Parse source text and return its Universal Intermediate Representation."""
    language = resolve_language(request.language, request.source, request.filename)

    try:
        uir = create_parser(language).parse(request.source)
    except UnsupportedLanguage as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    annotations = uir.metadata.annotations
    return ParseResponse(
        language=language.value,
        node_count=uir.count_nodes(),
        fidelity=annotations.get(ann.FIDELITY, "full"),
        parse_error=annotations.get(ann.PARSE_ERROR),
        dependencies=uir.metadata.dependencies,
        uir=uir.to_dict(),
    )


@router.get("/api/languages", response_model=LanguagesResponse, summary="Supported languages")
async def languages():
    return LanguagesResponse(
        frontends=[lang.value for lang in supported_languages()],
        backends=supported_targets(),
    )
