"""
NoteShare Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn noteshare.main:app),
       or through the `noteshare` console script.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:  Request ID → Logging → GZip → CORS   │
    │                                                          │
    │  Routes:                                                 │
    │   POST /register  POST /login  POST /verify              │
    │   POST /upload-note  GET /notes  GET /test-db-access     │
    │   GET /health  [GET /storage/v1/object/public/...]       │
    │   GET /* front-end, other /* 404 (registered last)       │
    │                                                          │
    │  Exception Handlers:                                     │
    │   ValidationError→400 │ AuthError→401 │ NotFound→404     │
    │   ServiceError→500    │ unexpected→500                   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, does not exit)
    3. Build the ServiceContext unless one was injected
    Shutdown:
    1. Close the shared HTTP client
    2. Dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from noteshare import __version__
from noteshare.config import settings
from noteshare.database import async_session_factory, dispose_engine
from noteshare.dependencies import ServiceContext, build_service_context
from noteshare.exceptions import (
    AuthError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from noteshare.middleware.logging import RequestLoggingMiddleware
from noteshare.middleware.request_id import RequestIDMiddleware, request_id_var
from noteshare.routes import auth, diagnostics, files, frontend, health, notes

logger = logging.getLogger(__name__)

# Routes whose malformed bodies are answered like a failed login
AUTH_FAILURE_PATHS = frozenset({"/login"})


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-call chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, config validation, collaborator wiring.
    Shutdown: release the HTTP client and database pool.

    A context injected through create_app(context=...) belongs to the
    caller and is not closed here.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    owned_context: Optional[ServiceContext] = None
    if getattr(app.state, "services", None) is None:
        owned_context = build_service_context(settings, async_session_factory)
        app.state.services = owned_context

    services: ServiceContext = app.state.services
    logger.info(
        "Collaborators: storage=%s, ocr=%s",
        services.storage.backend_name,
        services.ocr.engine_name,
    )
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("NoteShare Backend shutting down...")
    if owned_context is not None:
        await owned_context.aclose()
        app.state.services = None
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": message,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and `{"success": false}` bodies.

    Handler hierarchy:
        ValidationError, RequestValidationError → 400 (401 on /login)
        AuthError                               → 401 (generic message)
        NotFoundError, HTTP 404                 → 404
        ServiceError (and subclasses)           → 500 (message passed through)
        Exception (fallback)                    → 500 (generic message)

    Error context and stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """
        Malformed JSON body or form: same 400 shape as our own ValidationError.

        Login is the exception: every failed login, malformed or not, gets
        the one generic 401.
        """
        # Field locations only: error inputs may hold passwords
        fields = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
        if request.url.path in AUTH_FAILURE_PATHS:
            logger.warning("[%s] Malformed login request: %s", request_id_var.get(""), fields)
            return _error_response(401, "auth_error", AuthError().message)
        message = "Invalid request"
        if fields:
            message = f"Invalid or missing field(s): {', '.join(f for f in fields if f)}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), fields)
        return _error_response(400, "validation_error", message)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return _error_response(401, "auth_error", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error_response(500, "service_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Collaborators to use instead of the configured ones
                 (tests pass fakes here). Built in the lifespan when None.
    """
    app = FastAPI(
        title="NoteShare API",
        description=(
            "Share scanned class notes between students. Institutional sign-up, "
            "uploads with OCR, and a filterable notes catalog."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = context

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(diagnostics.router)
    app.include_router(health.router)
    if settings.storage_backend == "local":
        app.include_router(files.router)
    # Catch-all routes: must stay last
    app.include_router(frontend.router)

    return app


app = create_app()


def run() -> None:
    """Entry point of the `noteshare` console script."""
    uvicorn.run("noteshare.main:app", host=settings.host, port=settings.port)
