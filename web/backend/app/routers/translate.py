"""Translate router -- run the full pipeline on source text."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from coalesce.errors import UnsupportedLanguage
from coalesce.translator import TranslationOutcome, Translator
from coalesce.uir.models import Language

from web.backend.app.models.api import (
    ManualMarkerResponse,
    TranslateRequest,
    TranslateResponse,
)
from web.backend.app.routers.libraries import dependency_to_response
from web.backend.app.routers.parse import resolve_language

router = APIRouter(tags=["translate"])


@router.post(
    "/api/translate",
    response_model=TranslateResponse,
    summary="Translate source text into another language",
)
async def translate(request: TranslateRequest):
    """Parse, detect library usages, rewrite them and generate target code.

    A run that needs manual work still succeeds with outcome
    ``complete_with_markers``; a failed run is reported as 422.
    """
    source_language = resolve_language(request.source_language, request.source, request.filename)
    try:
        target_language = Language.from_name(request.target_language)
    except UnsupportedLanguage as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    translator = Translator(isolate_errors=request.isolate_errors)
    result = translator.translate(
        request.source,
        source_language=source_language,
        target_language=target_language,
        target_ecosystem=request.target_ecosystem,
    )
    if result.outcome is TranslationOutcome.FAILED:
        raise HTTPException(status_code=422, detail=result.error)

    return TranslateResponse(
        outcome=result.outcome.value,
        source_language=source_language.value,
        target_language=target_language.value,
        code=result.code,
        dependencies=[dependency_to_response(d) for d in result.dependencies],
        manual_markers=[
            ManualMarkerResponse(node_id=m.node_id, line=m.line, comment=m.comment)
            for m in result.manual_markers
        ],
        uir=result.uir.to_dict() if request.include_uir and result.uir else None,
    )
