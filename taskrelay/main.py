"""
TaskRelay Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, service construction, middleware, routes and
       exception handlers in one place.
How:   create_app(settings) builds every service from the given Settings,
       stores them on app.state and returns the configured app.
Who:   Called by uvicorn (uvicorn taskrelay.main:app) and by tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → GZip → CORS     │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/tasks   │ │ /api/expenses│ │ /health     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Auth→401 │ Config→500 │ Upstream→502
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from taskrelay import __version__
from taskrelay.config import Settings, get_settings
from taskrelay.exceptions import (
    AuthenticationError,
    ConfigurationError,
    TaskRelayError,
    UpstreamServiceError,
    ValidationError,
)
from taskrelay.middleware import RequestIDMiddleware, RequestLoggingMiddleware, request_id_var
from taskrelay.routes import expenses, health, tasks
from taskrelay.services.expense_service import ExpenseService
from taskrelay.services.gemini_ocr_service import GeminiOcrService
from taskrelay.services.sheets_service import SheetsService
from taskrelay.services.task_service import TaskService
from taskrelay.services.todoist_service import TodoistService
from taskrelay.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every request/discovery lookup at INFO or DEBUG.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, report missing configuration.
    Shutdown: nothing to release; no connection outlives a request.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("TaskRelay Backend starting up...")

    # Missing keys only disable the routes that need them, so warn, don't exit.
    for name in settings.missing_credentials():
        logger.warning("%s is not set; routes that need it will fail", name)
    if not settings.internal_api_secret:
        logger.warning("INTERNAL_API_SECRET is not set; /api routes are unauthenticated")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("TaskRelay Backend shut down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one response format.

    Handler hierarchy:
        ValidationError         → 400 Bad Request (client can fix the input)
        RequestValidationError  → 400 Bad Request (malformed body or query)
        AuthenticationError     → 401 Unauthorized
        ConfigurationError      → 500 (setting name logged, not returned)
        UpstreamServiceError    → 502 Bad Gateway (upstream payload attached)
        TaskRelayError (base)   → 500
        Exception (fallback)    → 500 (stack trace logged only)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = [".".join(str(p) for p in e.get("loc", ()) if p != "body") for e in errors]
        message = "Invalid request: " + "; ".join(
            f"{field or 'body'}: {e.get('msg', 'invalid')}" for field, e in zip(fields, errors)
        )
        logger.warning("[%s] %s", request_id_var.get(""), message)
        return _error_response(400, "validation_error", message, {"fields": fields})

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return _error_response(
            500,
            "configuration_error",
            "The server is missing configuration for this operation.",
        )

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        logger.error(
            "[%s] Upstream error from %s: %s | Payload: %s",
            request_id_var.get(""),
            exc.service,
            exc.message,
            exc.payload,
        )
        return _error_response(502, "upstream_error", exc.message, exc.context)

    @app.exception_handler(TaskRelayError)
    async def handle_app_error(request: Request, exc: TaskRelayError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

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
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_services(app: FastAPI, settings: Settings) -> None:
    """Construct every service from `settings` and attach them to app.state."""
    todoist = TodoistService(
        api_token=settings.todoist_api_token,
        base_url=settings.todoist_base_url,
        timeout=settings.http_timeout,
    )
    sheets = SheetsService(
        spreadsheet_id=settings.google_sheet_id,
        credentials_json=settings.google_service_account_json,
        sheet_range=settings.expense_sheet_range,
    )
    ocr = GeminiOcrService(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
    )

    app.state.settings = settings
    app.state.task_service = TaskService(todoist)
    app.state.expense_service = ExpenseService(
        sheets=sheets,
        ocr=ocr,
        uploads=UploadService(max_size=settings.max_upload_size),
        timezone=settings.timezone,
        amount_min_length=settings.amount_min_length,
        amount_max_length=settings.amount_max_length,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build services from. Defaults to the
                  process environment; tests pass their own.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="TaskRelay API",
        description=(
            "Relay between a frontend and Todoist, Google Sheets and Gemini OCR: "
            "tasks grouped by project, natural-language due dates, expense logging "
            "from fields or receipt photos."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    build_services(app, settings)

    # Middleware executes in REVERSE order of addition.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(tasks.router)
    app.include_router(expenses.router)

    return app


app = create_app()
