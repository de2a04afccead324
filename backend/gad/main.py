"""
GAD Backend — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       handling and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by uvicorn (uvicorn gad.main:app, or the gad-backend script).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │  ┌─────────────────┐ ┌──────────────────┐ ┌───────────┐  │
    │  │ /api/v1/students│ │ /api/v1/role-tags│ │ /health   │  │
    │  └─────────────────┘ └──────────────────┘ └───────────┘  │
    │  ┌─────────────────┐                                     │
    │  │ /api/v1/users   │                                     │
    │  └─────────────────┘                                     │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation/BusinessRule→400  NotFound→404               │
    │  Conflict→409  Database→500  anything else→500           │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, seed default role tags (settings.seed_role_tags)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from gad import __version__
from gad.config import settings
from gad.database import async_session_factory, dispose_engine
from gad.exceptions import (
    BusinessRuleError,
    ConflictError,
    DatabaseError,
    GadError,
    NotFoundError,
    ValidationError,
)
from gad.middleware.logging import RequestLoggingMiddleware
from gad.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, current_request_id
from gad.routes import health, role_tags, students, users
from gad.services.role_tag_service import role_tag_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def seed_reference_data() -> None:
    """Insert the default role tags in their own transaction."""
    async with async_session_factory() as session:
        try:
            await role_tag_service.seed_default_role_tags(session)
            await session.commit()
        except GadError:
            await session.rollback()
            logger.error("Role tag seeding failed; continuing without it", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Seed default role tags when enabled
        3. Log successful startup

    Shutdown sequence:
        1. Dispose database engine (close all pooled connections)
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("GAD Backend %s starting up...", __version__)

    if settings.seed_role_tags:
        await seed_reference_data()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("GAD Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    validation_errors: Optional[List[Dict[str, Any]]] = None,
) -> JSONResponse:
    """
    Build the JSON body shared by every error (see schemas.common.ErrorResponse).

    The request ID header is set here as well: the catch-all handler runs in
    ServerErrorMiddleware, outside RequestIDMiddleware.
    """
    request_id = current_request_id(request)
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "status": status_code,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
    }
    if details:
        content["details"] = details
    if validation_errors is not None:
        content["validation_errors"] = validation_errors
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError → 400 validation_error (per-field list)
        ValidationError        → 400 validation_error
        BusinessRuleError      → 400 business_rule_violation
        NotFoundError          → 404 not_found
        ConflictError          → 409 conflict
        DatabaseError          → 500 server_error
        GadError (base)        → 500 server_error
        Exception (fallback)   → 500 internal_server_error

    Responses never include stack traces or SQL; those are logged server-side.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body, query or path parameter failed schema validation."""
        items = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            items.append({
                "field": ".".join(loc) or "request",
                "message": err.get("msg", "Invalid value"),
                "rejected_value": err.get("input"),
            })
        logger.warning(
            "[%s] Request validation failed on %s: %s",
            current_request_id(request),
            request.url.path,
            [i["field"] for i in items],
        )
        return error_response(
            request,
            400,
            "validation_error",
            "Request validation failed",
            validation_errors=items,
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", current_request_id(request), exc.message)
        return error_response(request, 400, "validation_error", exc.message, exc.context)

    @app.exception_handler(BusinessRuleError)
    async def handle_business_rule(request: Request, exc: BusinessRuleError):
        logger.warning("[%s] Business rule violated: %s", current_request_id(request), exc.message)
        return error_response(request, 400, "business_rule_violation", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, "not_found", exc.message, exc.context)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", current_request_id(request), exc.message)
        return error_response(request, 409, "conflict", exc.message, exc.context)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client; context is logged server-side only."""
        logger.error(
            "[%s] Database error: %s | Context: %s",
            current_request_id(request),
            exc.message,
            exc.context,
        )
        return error_response(
            request,
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(GadError)
    async def handle_gad_error(request: Request, exc: GadError):
        logger.error("[%s] Unhandled application error: %s", current_request_id(request), exc.message)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: log the stack trace, return a generic 500 with the request ID."""
        logger.error(
            "[%s] Unexpected error: %s",
            current_request_id(request),
            str(exc),
            exc_info=True,
        )
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="GAD API",
        description=(
            "Academic management backend: students, staff users and the role "
            "tags assigned to them."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(students.router)
    app.include_router(role_tags.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `gad.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn using configured host/port."""
    import uvicorn

    uvicorn.run(
        "gad.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
