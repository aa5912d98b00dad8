"""
Registrar Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn registrar.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌────────┐  │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│  CORS  │  │
    │  └──────────┘ └─────────────┘ └──────┘ └────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────┐ ┌────────────┐ ┌─────────────────┐  │
    │  │ /students  │ │ /courses   │ │ GET /health     │  │
    │  └────────────┘ └────────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ RegistrarError → STATUS_BY_KIND[exc.kind]    │   │
    │  │ RequestValidationError → 400                 │   │
    │  │ Exception → 500                              │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, optional create_all for the SQL store, ready banner
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from registrar import __version__
from registrar.config import settings
from registrar.database import create_schema, dispose_engine
from registrar.exceptions import ErrorKind, RegistrarError
from registrar.middleware.logging import RequestLoggingMiddleware
from registrar.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from registrar.routes import courses, health, students

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-01T12:00:00 [INFO] registrar.services.student_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Registrar Backend %s starting up (store=%s)", __version__, settings.store_backend)

    if settings.store_backend == "sql" and settings.auto_create_schema:
        await create_schema()
        logger.info("Database schema ensured via create_all")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Registrar Backend shutting down...")
    if settings.store_backend == "sql":
        await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _field_messages(exc: RequestValidationError) -> List[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(location) or "request"
        messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RegistrarError          → status looked up by exc.kind
        RequestValidationError  → 400 with per-field messages
        Exception (fallback)    → 500

    5xx responses never carry the exception message or context; both are
    logged server-side with the request id.
    """

    @app.exception_handler(RegistrarError)
    async def handle_registrar_error(request: Request, exc: RegistrarError):
        rid = request_id_var.get("")
        status_code = exc.status_code

        if status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s", rid, exc.kind.value, exc.message, exc.context
            )
            content = {
                "error": exc.kind.value,
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            }
        else:
            logger.warning("[%s] %s: %s", rid, exc.kind.value, exc.message)
            content = {
                "error": exc.kind.value,
                "message": exc.message,
                "details": exc.context or None,
                "request_id": rid,
            }

        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema-level input problems use the same 400 body as ValidationError."""
        rid = request_id_var.get("")
        errors = _field_messages(exc)
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": ErrorKind.VALIDATION.value,
                "message": "Validation failed",
                "errors": errors,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": ErrorKind.INTERNAL.value,
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this to get a fresh instance and override
    `get_document_store` on it.
    """
    app = FastAPI(
        title="Registrar API",
        description=(
            "Student and course management. Enrollment is recorded on both the "
            "student and the course and kept consistent across every write."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(students.router)
    app.include_router(courses.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
