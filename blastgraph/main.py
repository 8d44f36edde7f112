"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blastgraph.api.router import api_router
from blastgraph.config import Settings, get_settings
from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.services.cache_service import ResponseCache
from blastgraph.services.inventory_service import (
    InMemoryInventoryStore,
    InventoryStore,
    Neo4jInventoryStore,
)
from blastgraph.services.subgraph_service import SubgraphResolver
from blastgraph.utils.exceptions import NotFoundError, UpstreamDataError, ValidationError
from blastgraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _build_store(settings: Settings) -> tuple[InventoryStore, Neo4jConnection | None]:
    if settings.INVENTORY_BACKEND == "neo4j":
        conn = Neo4jConnection(settings)
        return Neo4jInventoryStore(conn), conn
    if settings.INVENTORY_FILE:
        return InMemoryInventoryStore.from_file(settings.INVENTORY_FILE), None
    return InMemoryInventoryStore(), None


def create_app(
    settings: Settings | None = None,
    inventory_store: InventoryStore | None = None,
    clock: Callable[[], float] | None = None,
) -> FastAPI:
    """Build the app. ``inventory_store`` and ``clock`` override the configured ones."""
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        conn: Neo4jConnection | None = None
        store = inventory_store
        if store is None:
            store, conn = _build_store(settings)
        if conn is not None:
            await conn.connect()

        app.state.inventory_store = store
        app.state.resolver = SubgraphResolver(
            store,
            node_limit=settings.GRAPH_NODE_LIMIT,
            min_hops=settings.GRAPH_MIN_HOPS,
            max_hops=settings.GRAPH_MAX_HOPS,
        )
        cache_kwargs = {"clock": clock} if clock is not None else {}
        app.state.response_cache = ResponseCache(
            ttl_seconds=settings.RESPONSE_CACHE_TTL_SECONDS,
            sweep_threshold=settings.RESPONSE_CACHE_SWEEP_THRESHOLD,
            **cache_kwargs,
        )

        logger.info("app_started", inventory_backend=type(store).__name__)
        yield

        # Shutdown
        app.state.response_cache.clear()
        if conn is not None:
            await conn.close()
        logger.info("app_stopped")

    application = FastAPI(
        title="blastgraph",
        description="Blast-radius graph engine for service inventories",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("invalid_request", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc), "details": exc.details})

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        logger.info("focus_not_found", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @application.exception_handler(UpstreamDataError)
    async def upstream_error_handler(request: Request, exc: UpstreamDataError) -> JSONResponse:
        logger.error("upstream_data_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return application


app = create_app()
