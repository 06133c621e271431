"""
Polystore CRUD API — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, backend wiring
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn crud_api.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware:  Request ID → Logging → CORS             │
    │                                                       │
    │  Routes:                                              │
    │  ┌─────────────┐ ┌──────────────┐ ┌────────────────┐ │
    │  │ /usuarios   │ │ /produtos    │ │ /buckets       │ │
    │  │ (MongoDB)   │ │ (MySQL)      │ │ (S3)           │ │
    │  └─────────────┘ └──────────────┘ └────────────────┘ │
    │                                                       │
    │  Exception Handlers:                                  │
    │  NotFound→404 │ Validation→400/422 │ Backend→500      │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build any backend not injected into create_app()
    3. Connect to MongoDB and ping it (failure is logged, startup continues)

    Shutdown:
    1. Close the MongoDB client
    2. Dispose the SQL engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from crud_api import __version__
from crud_api.config import Settings, settings as default_settings
from crud_api.database import RelationalStore
from crud_api.document_store import DocumentStore
from crud_api.event_log import event_log
from crud_api.exceptions import (
    BackendError,
    CrudApiError,
    ErrorKind,
    NotFoundError,
    ValidationError,
)
from crud_api.middleware.logging import RequestLoggingMiddleware
from crud_api.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from crud_api.object_storage import ObjectStorage
from crud_api.routes import buckets, products, users

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "CRUD MongoDb", "description": "CRUD operations for users in MongoDB."},
    {"name": "CRUD MySQL", "description": "CRUD operations for products in MySQL."},
    {
        "name": "Buckets",
        "description": "List buckets, upload and remove files in an S3 bucket.",
    },
]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Handler: stdout (containers capture it).
    """
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build missing backends on startup, release them on shutdown.

    Backends passed to create_app() are used as they are; the ones left out
    are created from settings here. All three are kept on app.state for the
    lifetime of the process.
    """
    config: Settings = app.state.settings
    setup_logging(config)
    logger.info("Polystore CRUD API starting up...")

    if app.state.relational_store is None:
        app.state.relational_store = RelationalStore.from_settings(config)
    if app.state.object_storage is None:
        app.state.object_storage = ObjectStorage.from_settings(config)

    # Startup does not depend on MongoDB: a bad URI or an unreachable server
    # is logged and each user request reports its own failure
    try:
        if app.state.document_store is None:
            app.state.document_store = DocumentStore.from_settings(config)
        await app.state.document_store.ping()
        event_log.info("MongoDB connected")
    except PyMongoError as e:
        event_log.error("MongoDB connection failed", error=e)

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("API docs: http://%s:%d/docs", config.backend_host, config.backend_port)

    yield

    logger.info("Polystore CRUD API shutting down...")
    if app.state.document_store is not None:
        await app.state.document_store.close()
    await app.state.relational_store.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(kind: str, message: str, details: Optional[dict] = None) -> dict:
    return {
        "error": kind,
        "message": message,
        "details": details or None,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Every handler records the failure through the event log, with the
    request context, before the response is sent.

    Handler hierarchy:
        NotFoundError           → 404 Not Found
        ValidationError         → 400 Bad Request
        RequestValidationError  → 422 Unprocessable Entity (malformed body/params)
        BackendError            → 500 Internal Server Error (details echoed)
        Exception (fallback)    → 500 Internal Server Error (no details)
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        event_log.error(exc.message, request, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind.value, exc.message, exc.context),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        event_log.error(exc.message, request, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind.value, exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON, missing fields, non-integer ids."""
        event_log.error("Request validation failed", request, exc)
        return JSONResponse(
            status_code=422,
            content=error_body(
                ErrorKind.VALIDATION.value,
                "The request is invalid",
                {"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(BackendError)
    async def handle_backend_error(request: Request, exc: BackendError):
        """Backend failure: normalized details (type, code) go back to the client."""
        event_log.error(exc.message, request, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind.value, exc.message, exc.context),
        )

    @app.exception_handler(CrudApiError)
    async def handle_app_error(request: Request, exc: CrudApiError):
        event_log.error(exc.message, request, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind.value, exc.message, exc.context),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for unexpected errors.

        The stack trace is logged server-side only, never in the response.
        Starlette runs this handler outside the user middleware stack, so the
        request ID header is set here rather than by RequestIDMiddleware.
        """
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        event_log.error("Unexpected error", request, exc)
        request_id = getattr(request.state, "request_id", "") or request_id_var.get("")
        body = error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )
        body["request_id"] = request_id
        return JSONResponse(
            status_code=500,
            content=body,
            headers={REQUEST_ID_HEADER: request_id} if request_id else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    document_store: Optional[DocumentStore] = None,
    relational_store: Optional[RelationalStore] = None,
    object_storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use (defaults to the process-wide settings)
        document_store / relational_store / object_storage: Pre-built
            connection managers. Tests pass fakes here; production leaves
            them out and the lifespan handler builds them from settings.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = config or default_settings

    app = FastAPI(
        title="Polystore CRUD API",
        description=(
            "Demonstration API exposing CRUD operations over MongoDB (users), "
            "MySQL (products) and S3 (buckets)."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.document_store = document_store
    app.state.relational_store = relational_store
    app.state.object_storage = object_storage

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(buckets.router)

    return app


# uvicorn expects `crud_api.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crud_api.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
    )
