"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with its token services, hooks,
routes, and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flowtokens.core.config import Settings, get_settings
from flowtokens.core.exceptions import (
    StorageError,
    TokenSpaceExhaustedError,
    UnknownEntityKindError,
)
from flowtokens.core.hooks import HookDecorator, HookEvent, HookRegistry
from flowtokens.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from flowtokens.core.meta_registry import MetaFieldRegistry
from flowtokens.domain.entities.access_token import TOKEN_META_KEY
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import HookContext
from flowtokens.domain.services import TokenEventHandler
from flowtokens.infrastructure.hooks import register_token_hooks
from flowtokens.infrastructure.persistence.database import DatabaseManager, init_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database and fires the application lifecycle hooks.
    """
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db

    configure_logging(settings)
    logger.info(
        "Starting Flow Tokens",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database(db)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    context = HookContext(app=app)
    await app.state.hook_registry.trigger(event=HookEvent.ON_BOOTSTRAP, context=context)
    await app.state.hook_registry.trigger(event=HookEvent.ON_SERVE, context=context)
    logger.info("ON_BOOTSTRAP and ON_SERVE hooks triggered")

    yield

    logger.info("Shutting down Flow Tokens")
    await app.state.hook_registry.trigger(
        event=HookEvent.ON_TERMINATE,
        context=HookContext(app=app),
    )

    await db.disconnect()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None, db: DatabaseManager | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The token services are built here, once per application, and kept on
    ``app.state``; nothing is shared through module globals.

    Args:
        settings: Application settings (defaults to the environment).
        db: Database manager (defaults to one built from ``settings``).

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    db = db or DatabaseManager(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Random access tokens for users and posts",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db

    hook_registry = HookRegistry()
    app.state.hook_registry = hook_registry
    app.state.hook = HookDecorator(hook_registry)

    meta_fields = MetaFieldRegistry()
    for kind in EntityKind:
        meta_fields.register_meta(
            kind,
            TOKEN_META_KEY,
            type="string",
            description="Flow random access token",
            single=True,
            show_in_rest=True,
        )
    app.state.meta_fields = meta_fields

    handler = TokenEventHandler.from_settings(db.session_factory, settings)
    app.state.token_handler = handler
    app.state.token_issuer = handler.issuer
    app.state.token_lookup = handler.lookup
    register_token_hooks(hook_registry, handler)

    logger.info(
        "Token services initialized",
        tracked_post_types=sorted(handler.tracked_post_types),
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """
    settings: Settings = app.state.settings

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint. Does not touch the database."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint, including database connectivity."""
        if await app.state.db.check_connection():
            return {
                "status": "ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "disconnected",
            },
        )

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return {
            "status": "alive",
            "service": settings.app_name,
            "version": settings.app_version,
        }


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from flowtokens.infrastructure.api.routes import (
        posts_router,
        tokens_router,
        users_router,
    )

    settings: Settings = app.state.settings

    app.include_router(users_router, prefix=f"{settings.api_prefix}/users")
    app.include_router(posts_router, prefix=f"{settings.api_prefix}/posts")
    app.include_router(tokens_router, prefix=f"{settings.api_prefix}/tokens")

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """
    debug = app.state.settings.debug

    @app.exception_handler(UnknownEntityKindError)
    async def unknown_kind_handler(request: Request, exc: UnknownEntityKindError):
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "detail": exc.message},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "Storage error",
            path=str(request.url.path),
            method=request.method,
            operation=exc.operation,
            error=exc.message,
        )
        return JSONResponse(
            status_code=503,
            content={
                "error": "Storage unavailable",
                "detail": exc.message if debug else "The token store could not be reached",
            },
        )

    @app.exception_handler(TokenSpaceExhaustedError)
    async def token_space_handler(request: Request, exc: TokenSpaceExhaustedError):
        logger.error(
            "Token space exhausted",
            entity_kind=exc.entity_kind,
            entity_id=exc.entity_id,
            attempts=exc.attempts,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": exc.message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and propagate its correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
