"""
Main FastAPI Application

Entry point for the CRUD API. Builds the app from an explicit resource
registry, configures middleware and error handlers, and manages the
database client over the app lifespan.
"""
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from crudforge import __version__
from crudforge.config import Settings, get_settings
from crudforge.core.errors import register_exception_handlers
from crudforge.database import (
    check_connection,
    create_client,
    database_name,
    ensure_indexes,
    get_database,
)
from crudforge.registry import ResourceRegistry, default_registry
from crudforge.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

API_PREFIX = "/api"


def create_app(
    settings: Optional[Settings] = None,
    database: Any = None,
    registry: Optional[ResourceRegistry] = None,
) -> FastAPI:
    """
    Build the application.

    When `database` is given it is used as-is (tests pass an in-memory
    double) and no driver client is created.
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else default_registry()

    setup_logging(
        log_level=settings.LOG_LEVEL,
        json_format=settings.is_production
    )

    client = None
    if database is None:
        client = create_client(settings)
        database = get_database(client, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

        if client is not None:
            try:
                await check_connection(client)
            except Exception as e:
                logger.error(f"Error connecting to MongoDB: {e}")
                client.close()
                raise
            logger.info(f"Using database: {database_name(settings)}")

        await ensure_indexes(database, registry)
        logger.info(f"Registered resources: {', '.join(API_PREFIX + path for path in registry.paths)}")

        yield

        logger.info("Shutting down application")
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(
        title="CRUD Boilerplate API",
        description="Generic REST CRUD endpoints over a document database",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry

    # ========================================================================
    # MIDDLEWARE
    # ========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Add X-Process-Time and, in development, log each request."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        if settings.ENVIRONMENT == "development":
            logger.debug(
                f"{request.method} {request.url.path} {response.status_code} "
                f"{process_time * 1000:.1f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(process_time * 1000, 1),
                },
            )
        return response

    register_exception_handlers(app, settings)

    # ========================================================================
    # ROUTES
    # ========================================================================

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness check for load balancers."""
        return {"status": "ok", "message": "Server is running"}

    @app.get(API_PREFIX, tags=["root"])
    async def api_index():
        """List the registered resource paths."""
        return {
            "message": "Welcome to the CRUD Boilerplate API",
            "version": __version__,
            "availableRoutes": registry.paths,
        }

    app.state.database = database
    for definition in registry:
        app.include_router(
            definition.build_router(database, settings.DEFAULT_PAGE_SIZE),
            prefix=API_PREFIX + definition.route_path,
        )

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.is_production)

    logger.info("=" * 80)
    logger.info("CRUD Boilerplate API")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")
    logger.info(f"Database: {database_name(settings)}")
    logger.info("=" * 80)

    uvicorn.run(
        "crudforge.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
