"""
Prolink AI - FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application.
How:   create_app() registers middleware, exception handlers and routers; the
       lifespan configures logging, validates settings, builds the AIService
       and stores it on app.state, then disposes the engine on shutdown.
Who:   uvicorn (`uvicorn prolink_ai.main:app`).

Application Layout:
    Middleware:   RequestID -> RequestLogging -> CORS
    Routes:       /api/ai/* capabilities, /api/ai/languages, /api/ai/health
    Handlers:     ProlinkAIError subclasses -> JSON error body with request_id
                  Exception -> 500 with a generic message

Capability endpoints answer HTTP 200 with a `success` flag even when the
capability failed; the handlers below only fire for errors outside the
orchestrators.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prolink_ai import __version__
from prolink_ai.config import settings
from prolink_ai.database import async_session_factory, dispose_engine
from prolink_ai.exceptions import (
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ProlinkAIError,
    ProviderError,
)
from prolink_ai.middleware.logging import RequestLoggingMiddleware
from prolink_ai.middleware.request_id import RequestIDMiddleware, request_id_var
from prolink_ai.routes import ai, health
from prolink_ai.services.ai_service import build_ai_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once at startup.

    Format: `%(asctime)s [%(levelname)s] %(name)s: %(message)s` on stdout.
    Chatty client libraries are held at WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Prolink AI %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: affected capabilities answer with failure envelopes
        logger.error("Configuration error: %s", str(e))

    if getattr(app.state, "ai_service", None) is None:
        app.state.ai_service = build_ai_service(settings, async_session_factory)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Prolink AI shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(code: str, message: str, rid: str) -> dict:
    return {"error": code, "message": message, "request_id": rid}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler hierarchy:
        NotFoundError       -> 404
        ProviderError       -> 503
        PersistenceError    -> 500 (generic message; context logged only)
        ConfigurationError  -> 500
        ProlinkAIError      -> 500
        Exception           -> 500 (generic message, stack logged)
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message, rid))

    @app.exception_handler(ProviderError)
    async def handle_provider_error(request: Request, exc: ProviderError):
        rid = request_id_var.get("")
        logger.error("[%s] Provider error (%s): %s", rid, exc.provider, exc.message)
        return JSONResponse(
            status_code=503,
            content=_error_body("provider_error", exc.message, rid),
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error("[%s] Persistence error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later.", rid
            ),
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("[%s] Configuration error: %s", rid, exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("configuration_error", exc.message, rid),
        )

    @app.exception_handler(ProlinkAIError)
    async def handle_prolink_error(request: Request, exc: ProlinkAIError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Prolink AI API",
        description=(
            "AI capabilities for the Prolink real-estate platform: chatbot, "
            "recommendations, price prediction, market analysis, translation "
            "and image analysis."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID -> RequestLogging -> CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(ai.router)
    app.include_router(health.router)

    return app


app = create_app()
