"""
api/main.py — punkt wejścia FastAPI.

Dekoder jest bezstanowy między żądaniami (każde decode() ma własny rejestr
i arenę), więc jedna instancja obsługuje wszystkie żądania.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from adapters.annotation_graph import AnnotationGraphDecoder
from api.routers import graph
from api.schemas import HealthResponse
from config import Settings

logger = logging.getLogger("razorgraph.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
    )
    app.state.settings = settings
    app.state.decoder = AnnotationGraphDecoder(
        report_unresolved=settings.report_unresolved_links,
    )

    # Routers
    app.include_router(graph.router)

    # Health
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        return HealthResponse(status="ok", version=settings.app_version)

    logger.info("%s API ready.", settings.app_title)
    return app


app = create_app()
