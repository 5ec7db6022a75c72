"""
NotesWise Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                   FastAPI App                        │
    │                                                      │
    │  Middleware:   Request ID → Access log → CORS        │
    │                                                      │
    │  Routes:       /api/ai/*            GET /health      │
    │                                                      │
    │  app.state.ai_service ──▶ ProviderFactory            │
    │                       └─▶ ElevenLabsService          │
    │  app.state.note_service ──▶ ai_service               │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration; a missing ELEVENLABS_API_KEY aborts startup
    3. Build the AIService (unless one was injected, e.g. by tests) and the
       NoteService over it
    4. Warn when no text provider is enabled (the app still starts)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import (
    AudioSynthesisError,
    ConfigurationError,
    NotesWiseError,
    NotFoundError,
    ProviderNotFoundError,
    ProviderUnsupportedError,
    UnauthorizedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import ai, health
from app.services.ai_service import AIService, build_ai_service
from app.services.note_service import NoteService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: timestamp [LEVEL] logger: message
    The HTTP client libraries log every connection at INFO/DEBUG, which would
    drown the per-call provider lines, so they are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Validate configuration and wire the AI layer before serving traffic.

    Raises:
        ConfigurationError: Mandatory configuration is missing. Propagating it
            makes uvicorn abort startup instead of serving a half-wired app.
    """
    setup_logging()
    logger.info("NotesWise Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ConfigurationError as e:
        logger.critical("Configuration error: %s", e.message)
        raise

    if getattr(app.state, "ai_service", None) is None:
        app.state.ai_service = build_ai_service(settings)
        app.state.note_service = NoteService(app.state.ai_service)

    providers = app.state.ai_service.list_available_providers()
    if providers:
        logger.info(
            "Text providers enabled: %s (default: %s)",
            ", ".join(providers),
            settings.ai_default_provider,
        )
    else:
        logger.warning("No text provider is enabled; AI text features will return empty results")
    if settings.ai_default_provider not in providers:
        logger.warning(
            "Default provider '%s' is not enabled; calls without an explicit provider will fail soft",
            settings.ai_default_provider,
        )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NotesWise Backend shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int, error: str, exc: NotesWiseError, include_details: bool = True
) -> JSONResponse:
    content = {
        "error": error,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        content["details"] = exc.context
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the NotesWiseError hierarchy to HTTP responses.

    Handler table:
        ValidationError            → 400
        ProviderUnsupportedError   → 400
        UnauthorizedError          → 401
        NotFoundError              → 404
        ProviderNotFoundError      → 404
        AudioSynthesisError        → 502
        ConfigurationError         → 500 (details withheld)
        NotesWiseError (base)      → 500
        Exception (fallback)       → 500, traceback logged server-side only
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc)

    @app.exception_handler(ProviderUnsupportedError)
    async def handle_provider_unsupported(request: Request, exc: ProviderUnsupportedError):
        return _error_response(400, "provider_unsupported", exc)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error_response(401, "unauthorized", exc, include_details=False)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc)

    @app.exception_handler(ProviderNotFoundError)
    async def handle_provider_not_found(request: Request, exc: ProviderNotFoundError):
        return _error_response(404, "provider_not_found", exc)

    @app.exception_handler(AudioSynthesisError)
    async def handle_audio_error(request: Request, exc: AudioSynthesisError):
        logger.error("[%s] Audio synthesis error: %s", request_id_var.get(""), exc.message)
        return _error_response(502, "audio_synthesis_error", exc)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "The service is not configured correctly.",
                "request_id": request_id_var.get(""),
            },
        )

    @app.exception_handler(NotesWiseError)
    async def handle_app_error(request: Request, exc: NotesWiseError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", exc, include_details=False)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(ai_service: Optional[AIService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        ai_service: Pre-built service to use instead of wiring one from
            settings at startup (tests pass a stub here). The NoteService
            is built over it.
    """
    app = FastAPI(
        title="NotesWise API",
        description=(
            "AI features for NotesWise notes: summaries, flashcards and "
            "text-to-speech over interchangeable providers."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    if ai_service is not None:
        app.state.ai_service = ai_service
        app.state.note_service = NoteService(ai_service)

    # Middleware executes in REVERSE order of addition: RequestID runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RequestIDMiddleware, trusted_user_header=settings.trusted_user_header
    )

    register_exception_handlers(app)

    app.include_router(ai.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
