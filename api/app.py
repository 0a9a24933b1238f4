from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from .errors import register_exception_handlers
from .logging_config import RequestResponseLoggerMiddleware, setup_logging
from .middleware.request_id import RequestIDMiddleware
from .routes.analysis import router as analysis_router
from .routes.chat import router as chat_router
from .routes.health import router as health_router
from .settings import Settings

log = logging.getLogger("api.app")


def _get_docs_urls(settings: Settings) -> tuple[str | None, str | None, str | None]:
    """
    Return the URL paths for the OpenAPI schema and interactive documentation.

    Only exposed in dev with VIBEGATE_EXPOSE_OPENAPI_IN_DEV enabled.
    """
    if settings.is_dev and settings.expose_openapi_in_dev:
        return "/openapi.json", "/docs", "/redoc"
    return None, None, None


def _configure_cors(fastapi_app: FastAPI, settings: Settings) -> None:
    """Strict CORS from the configured origin list; no wildcards."""
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID", "X-Trace-Id"],
        expose_headers=[
            "X-Trace-Id",
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
        allow_credentials=False,
        max_age=600,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application with:
    - Strict CORS
    - Request ID and structured request logging
    - Unified error handlers
    - Conditional OpenAPI/docs exposure in dev
    """
    settings = settings or Settings()  # reads env with VIBEGATE_ prefix

    # Initialize logging once per process
    setup_logging(settings)
    log.info(
        "Starting VibeGate API",
        extra={"env": settings.environment, "port": settings.port},
    )

    openapi_url, docs_url, redoc_url = _get_docs_urls(settings)

    fastapi_app = FastAPI(
        title="VibeGate Request Pipeline API",
        version="0.1.0",
        openapi_url=openapi_url,
        docs_url=docs_url,
        redoc_url=redoc_url,
        default_response_class=ORJSONResponse,
    )

    register_exception_handlers(fastapi_app)
    _configure_cors(fastapi_app, settings)

    # RequestID must be last-added to be outermost so every response,
    # including logged ones, carries the trace id
    fastapi_app.add_middleware(RequestResponseLoggerMiddleware)
    fastapi_app.add_middleware(RequestIDMiddleware)

    fastapi_app.include_router(health_router)
    fastapi_app.include_router(chat_router)
    fastapi_app.include_router(analysis_router)

    return fastapi_app


# Also expose a factory for `--factory` usage:
#   uvicorn api.app:create_app --factory
def app_factory() -> FastAPI:
    return create_app()
