"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intelligence_service import __version__
from intelligence_service.api.v1.router import api_router
from intelligence_service.config import Settings, get_settings
from intelligence_service.errors import IntelligenceError, StorageError
from intelligence_service.infrastructure.catalog.client import (
    CatalogClient,
    CatalogSource,
    build_http_client,
)
from intelligence_service.infrastructure.database.connection import (
    create_engine,
    create_session_factory,
    create_tables,
)
from intelligence_service.infrastructure.redis import CatalogSnapshotCache, connect_redis
from intelligence_service.middleware.request_context import RequestContextMiddleware
from intelligence_service.services.run_store import RunStore

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if get_settings().debug else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(get_settings().log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the engine, catalog client and run store; tear them down on exit."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting Flashlight Intelligence Service",
        app_env=settings.app_env,
        debug=settings.debug,
    )

    engine = create_engine(settings)
    if settings.db_create_tables:
        await create_tables(engine)
    session_factory = create_session_factory(engine)

    http_client = None
    redis_client = None
    catalog: CatalogSource | None = app.state.catalog_override
    if catalog is None:
        redis_client = await connect_redis(settings)
        cache = CatalogSnapshotCache(
            redis_client,
            key=f"catalog:snapshot:{settings.catalog_api_base_url}",
            ttl_seconds=settings.catalog_cache_ttl_seconds,
        )
        http_client = build_http_client(settings)
        catalog = CatalogClient(
            http_client,
            page_size=settings.catalog_page_size,
            retries=settings.catalog_api_retries,
            cache=cache,
        )
        app.state.catalog_cache = cache

    app.state.session_factory = session_factory
    app.state.run_store = RunStore(
        session_factory,
        catalog,
        default_limit=settings.default_top_results,
        max_limit=settings.max_top_results,
        scoring_workers=settings.scoring_workers,
    )

    yield

    if http_client is not None:
        await http_client.aclose()
    if redis_client is not None:
        await redis_client.aclose()
    await engine.dispose()
    logger.info("Shutting down Flashlight Intelligence Service")


async def intelligence_error_handler(request: Request, exc: IntelligenceError) -> JSONResponse:
    """Render domain errors as ``{"error": ...}`` with their status code."""
    headers = {"Retry-After": "1"} if isinstance(exc, StorageError) else None
    if exc.status_code >= 500:
        logger.warning("Request failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc)},
        headers=headers,
    )


def create_app(
    settings: Settings | None = None,
    catalog: CatalogSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``catalog`` replaces the HTTP catalog client, e.g. with a fixed snapshot.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Flashlight Intelligence API",
        description="Preference-matched flashlight recommendations persisted as shareable runs",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.catalog_override = catalog
    app.state.catalog_cache = None

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(IntelligenceError, intelligence_error_handler)

    app.include_router(api_router)

    return app


app = create_app()


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "intelligence_service.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )


if __name__ == "__main__":
    run()
