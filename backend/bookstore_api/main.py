"""
Bookstore API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn bookstore_api.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routers (one CrudHandler each):                    │
    │  ┌──────────────────┐ ┌──────────────┐ ┌─────────┐  │
    │  │ /api/Authors     │ │ /api/Books   │ │ /health │  │
    │  └──────────────────┘ └──────────────┘ └─────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Store/other→500    │
    └─────────────────────────────────────────────────────┘

Construction order inside create_app():
    1. Build the mapping registry (fails fast on a bad rule)
    2. Build one CrudHandler per entity resource around that registry
    3. Mount one router per handler
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response

from bookstore_api import __version__
from bookstore_api.config import settings
from bookstore_api.database import create_schema, dispose_engine
from bookstore_api.exceptions import (
    GENERIC_ERROR_MESSAGE,
    BookStoreError,
    NotFoundError,
    StoreFailureError,
    ValidationError,
)
from bookstore_api.middleware.logging import RequestLoggingMiddleware
from bookstore_api.middleware.request_id import RequestIDMiddleware, request_id_var
from bookstore_api.routes import health
from bookstore_api.routes.crud import build_crud_router
from bookstore_api.services.crud_handler import CrudHandler
from bookstore_api.services.mapper import MappingRegistry
from bookstore_api.services.mapping_profile import build_mapping_registry
from bookstore_api.services.resources import AUTHORS, BOOKS

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Handler-level records already carry "[request-id] Entities-Operation:"
    in the message via OperationLogger.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate configuration (logged, not fatal: /health still answers)
        3. Create tables when DB_CREATE_SCHEMA is set
    Shutdown:
        1. Dispose database engine
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Bookstore API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if settings.db_create_schema:
        await create_schema()
        logger.info("Database schema created from ORM metadata")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Bookstore API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _server_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "server_error",
            "message": GENERIC_ERROR_MESSAGE,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        RequestValidationError  → 400 (FastAPI's body/path validation)
        ValidationError         → 400
        NotFoundError           → 404, empty body
        StoreFailureError       → 500, generic body
        BookStoreError (base)   → 500, generic body
        Exception (fallback)    → 500, generic body

    Security: 500 responses never contain exception text. The detail is in
    the server log, correlated by request id.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed body or path parameter. Reported as 400, not FastAPI's 422."""
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed on %s %s", rid, request.method, request.url.path)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
                "request_id": rid,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": jsonable_encoder(exc.context),
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return Response(status_code=404)

    @app.exception_handler(StoreFailureError)
    async def handle_store_failure(request: Request, exc: StoreFailureError):
        # Already logged in full by the handler that raised it
        return _server_error_response()

    @app.exception_handler(BookStoreError)
    async def handle_bookstore_error(request: Request, exc: BookStoreError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _server_error_response()

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _server_error_response()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(mappings: Optional[MappingRegistry] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        mappings: mapping registry to hand to the handlers. Defaults to the
                  application profile; raises MappingConfigurationError if a
                  rule is broken.
    """
    registry = mappings if mappings is not None else build_mapping_registry()

    app = FastAPI(
        title="Bookstore API",
        description="CRUD API for authors and the books they wrote.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    handlers = {}
    for resource in (AUTHORS, BOOKS):
        handler = CrudHandler(resource, registry)
        handlers[resource.name] = handler
        app.include_router(build_crud_router(handler, prefix=settings.api_prefix))
    app.include_router(health.router)

    app.state.mappings = registry
    app.state.handlers = handlers

    return app


app = create_app()
