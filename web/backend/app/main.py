"""FastAPI application for the Coalesce translation service.

Wraps the ``coalesce`` package so the UIR, the library pattern registry
and the translation pipeline can be driven over HTTP. Each concern has its
own router under ``web.backend.app.routers``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coalesce import __version__
from coalesce.errors import CoalesceError
from web.backend.app.routers import libraries, parse, translate

ROUTERS = (parse.router, libraries.router, translate.router)

app = FastAPI(
    title="Coalesce API",
    description=(
        "Parse source code into a universal intermediate representation, "
        "detect the library idioms it uses and translate it to another "
        "language and ecosystem."
    ),
    version=__version__,
)

# Development setting: any origin may call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in ROUTERS:
    app.include_router(router)


@app.exception_handler(CoalesceError)
async def coalesce_error_handler(request: Request, exc: CoalesceError):
    """Pipeline errors a router did not map itself are client errors."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/", tags=["meta"])
async def root():
    """API name, version and the endpoints it serves."""
    endpoints = sorted({route.path for router in ROUTERS for route in router.routes})
    return {
        "name": "Coalesce API",
        "version": __version__,
        "endpoints": endpoints,
        "docs": "/docs",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    return {"status": "healthy"}
