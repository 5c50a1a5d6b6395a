"""FastAPI application factory with async lifespan for the store."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apipls.api.handlers import register_exception_handlers
from apipls.api.middleware import request_id
from apipls.api.negotiation import jsonapi_headers
from apipls.api.root import build_root_router
from apipls.api.routes import build_resource_router
from apipls.config import Settings, get_settings
from apipls.database import close_db, init_db
from apipls.registry import ResourceRegistry
from apipls.schema import build_metadata
from apipls.store import SQLAlchemyStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    On startup: create the database engine, optionally provision the resource
    tables, and expose the store on ``app.state.store``.
    On shutdown: dispose of the engine.
    """
    settings: Settings = app.state.settings
    registry: ResourceRegistry = app.state.registry

    engine = await init_db(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )
    if settings.create_tables:
        logger.info("Creating tables for %d resource(s).", len(registry.definitions))
        async with engine.begin() as conn:
            await conn.run_sync(build_metadata(registry.definitions).create_all)

    app.state.db_engine = engine
    app.state.store = SQLAlchemyStore(engine)

    yield

    await close_db(engine)


def create_app(settings: Settings | None = None, registry: ResourceRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the app factory. Uvicorn calls it with the --factory flag:
        uvicorn apipls.app:create_app --factory

    Resource definitions are compiled here, before the server accepts any
    connection, so an invalid resource directory raises
    :class:`~apipls.errors.ConfigurationError` and the app never starts.
    """
    settings = settings or get_settings()
    logging.getLogger("apipls").setLevel(settings.log_level.upper())

    if registry is None:
        registry = ResourceRegistry.from_directory(
            settings.resources_directory, settings.api_version
        )

    app = FastAPI(
        title="api-pls",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.registry = registry

    # Last added runs first: request ids are assigned before negotiation
    app.middleware("http")(jsonapi_headers)
    app.middleware("http")(request_id)
    register_exception_handlers(app)

    for definition in registry.definitions:
        app.include_router(build_resource_router(definition, registry.location(definition)))
    app.include_router(build_root_router(registry.root))

    return app
