"""
EstateHub Backend — FastAPI Application Factory
=================================================

What:  Builds the FastAPI app: logging, lifespan, middleware, exception
       handlers and routers.
Who:   uvicorn (`uvicorn app.main:app`), the `estatehub` console script, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Access Log → CORS        │
    │                                                     │
    │  Routers:     /residency/*   /user/*   /health      │
    │                                                     │
    │  Exception Handlers:                                │
    │    NotFound→404  Conflict→409                       │
    │    Database→500  Unexpected→500                     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → database engine (→ create tables in dev)
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import db, dispose_engine
from app.exceptions import (
    ConcurrentUpdateError,
    DatabaseError,
    DuplicateBookingError,
    EstateHubError,
    NotFoundError,
    UniquenessViolationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from app.routes import health, residency, user

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure root logging to stdout. Called once at startup."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("EstateHub Backend %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health reports the problem instead of a crash loop
        logger.error("Configuration error: %s", str(e))

    db.init()
    if settings.db_create_tables:
        await db.create_all()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("EstateHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_response(request: Request, exc: EstateHubError, message: str, include_details: bool = True) -> JSONResponse:
    rid = _request_id(request)
    content = {
        "error": exc.error_code,
        "message": message,
        "request_id": rid,
    }
    if include_details and exc.context:
        content["details"] = exc.context
    headers = {REQUEST_ID_HEADER: rid} if rid else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

        NotFoundError                            → 404
        UniquenessViolationError                 → 409
        DuplicateBookingError                    → 409
        ConcurrentUpdateError                    → 409
        DatabaseError                            → 500 (message gated by EXPOSE_ERROR_DETAILS)
        EstateHubError (base)                    → its status_code
        Exception (fallback)                     → 500, generic message
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(request, exc, exc.message)

    @app.exception_handler(UniquenessViolationError)
    @app.exception_handler(DuplicateBookingError)
    async def handle_conflict(request: Request, exc: EstateHubError):
        return _error_response(request, exc, exc.message)

    @app.exception_handler(ConcurrentUpdateError)
    async def handle_concurrent_update(request: Request, exc: ConcurrentUpdateError):
        logger.warning("[%s] %s (%s)", _request_id(request), exc.message, exc.context)
        return _error_response(request, exc, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        if settings.expose_error_details:
            return _error_response(request, exc, exc.message)
        return _error_response(
            request,
            exc,
            "An internal error occurred. Please try again later.",
            include_details=False,
        )

    @app.exception_handler(EstateHubError)
    async def handle_app_error(request: Request, exc: EstateHubError):
        logger.error("[%s] %s: %s", _request_id(request), type(exc).__name__, exc.message)
        return _error_response(request, exc, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="EstateHub API",
        description=(
            "Real-estate listing backend: user registration, residency listings, "
            "visit bookings and favorites."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(residency.router)
    app.include_router(user.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn using configured host/port."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
