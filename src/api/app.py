# src/api/app.py - v1
"""FastAPI application: concept graph HTTP surface.

Routes live under ``settings.api_prefix``; ``/health`` sits outside it.
Errors are rendered as ``{error, details}``: 400 for invalid input, 404
for unknown routes, 500 for anything that escapes the pipeline.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from conceptgraph.api.models import (
    CompareRequest,
    CreateGraphRequest,
    ErrorResponse,
    HealthResponse,
    RecommendationsResponse,
    RelationsResponse,
)
from conceptgraph.config.settings import Settings
from conceptgraph.core.models import ConceptComparison, ConceptNetwork, GraphPayload
from conceptgraph.core.text import parse_terms_input
from conceptgraph.logging.context import clear_context, set_request_context
from conceptgraph.pipeline.orchestrator import GraphOrchestrator, InvalidTermsError
from conceptgraph.recommendations.catalog import ContentCatalog
from conceptgraph.recommendations.recommender import ContentRecommender
from conceptgraph.version import __version__

logger = logging.getLogger(__name__)

SERVICE_NAME = "conceptgraph"
REQUEST_ID_HEADER = "X-Request-ID"


def get_orchestrator(request: Request) -> GraphOrchestrator:
    return request.app.state.orchestrator


def get_recommender(request: Request) -> ContentRecommender:
    return request.app.state.recommender


router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    500: {"model": ErrorResponse, "description": "Pipeline failure"},
}


@router.post("/graph", response_model=GraphPayload, responses=_ERROR_RESPONSES)
async def create_graph(
    body: CreateGraphRequest,
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> GraphPayload:
    """Embed the terms, relate similar pairs and return the new graph."""
    return await orchestrator.create_graph(
        body.terms,
        similarity_threshold=body.similarity_threshold,
        include_relations=body.include_relations,
    )


@router.get("/graph", response_model=ConceptNetwork, responses=_ERROR_RESPONSES)
async def get_graph(
    limit: int | None = Query(default=None, ge=1),
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> ConceptNetwork:
    return await orchestrator.get_concept_network(limit)


@router.get(
    "/concepts/{concept}/relations",
    response_model=RelationsResponse,
    responses=_ERROR_RESPONSES,
)
async def get_concept_relations(
    concept: str,
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> RelationsResponse:
    relations = await orchestrator.get_concept_relations(concept)
    return RelationsResponse(
        concept=concept, relations=relations, relations_count=len(relations),
    )


@router.post("/concepts/compare", response_model=ConceptComparison, responses=_ERROR_RESPONSES)
async def compare_concepts(
    body: CompareRequest,
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> ConceptComparison:
    return await orchestrator.compare_concepts(body.concept1, body.concept2)


@router.get("/recommendations", response_model=RecommendationsResponse, responses=_ERROR_RESPONSES)
async def get_recommendations(
    concepts: str = "",
    type: str | None = None,  # noqa: A002
    limit: int = Query(default=10, ge=1),
    recommender: ContentRecommender = Depends(get_recommender),
) -> RecommendationsResponse:
    """Catalog items matching a comma-separated concept list."""
    requested = parse_terms_input(concepts)
    try:
        items = recommender.recommend(requested, content_type=type or None, limit=limit)
    except ValueError as exc:
        raise InvalidTermsError("Invalid recommendation query", str(exc)) from exc
    return RecommendationsResponse(
        concepts=requested, recommendations=items, count=len(items),
    )


# ------------------------------------------------------------------
# Error handlers
# ------------------------------------------------------------------


async def _invalid_terms_handler(request: Request, exc: InvalidTermsError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": str(exc), "details": exc.details})


async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.info("Invalid request %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.exception(
        "Request %s failed: %s %s", request_id, request.method, request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
        headers={REQUEST_ID_HEADER: request_id} if request_id else None,
    )


# ------------------------------------------------------------------
# Application factory
# ------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    orchestrator: GraphOrchestrator | None = None,
    recommender: ContentRecommender | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Global settings. Loaded from .env if None.
        orchestrator: Pre-built orchestrator; built from settings at
            startup (and closed at shutdown) when omitted.
        recommender: Pre-built recommender; uses the configured catalog
            when omitted.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = orchestrator is None
        if owned:
            from conceptgraph.api.facade import create_orchestrator
            app.state.orchestrator = create_orchestrator(settings)
        else:
            app.state.orchestrator = orchestrator
        app.state.recommender = recommender or ContentRecommender(
            ContentCatalog.from_settings(settings.recommendations_catalog_path)
        )
        logger.info("API started: prefix=%s", settings.api_prefix)
        try:
            yield
        finally:
            if owned:
                await app.state.orchestrator.close()
            logger.info("API stopped")

    app = FastAPI(title="Concept Graph", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag every log record of the request with a request id."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        set_request_context(request_id)
        start_time = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(
                "%s %s -> failed (%dms)", request.method, request.url.path, elapsed_ms,
            )
            raise
        finally:
            clear_context()
        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        log = logger.debug if request.url.path == "/health" else logger.info
        log("%s %s -> %d (%dms)", request.method, request.url.path, response.status_code, elapsed_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.add_exception_handler(InvalidTermsError, _invalid_terms_handler)
    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_handler)

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        return HealthResponse(
            service=SERVICE_NAME,
            version=__version__,
            graph_store=request.app.state.orchestrator.graph_store.provider_name,
        )

    app.include_router(router, prefix=settings.api_prefix)
    return app
