"""
Portfolio Assistant Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .core.errors import (
    request_validation_exception_handler,
    unhandled_exception_handler,
)

from .api import (
    chat_routes,
    health_routes,
    knowledge_routes,
)


logger = logging.getLogger("portfolio.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Fail-fast configuration validation at startup.

    This ensures that critical configuration is present before the first
    request is ever served.
    """
    logger.info("Starting portfolio-assistant")

    if not settings.openai_api_key.get_secret_value().strip():
        raise RuntimeError("OPENAI_API_KEY is empty.")

    logger.info(
        "Configuration validated (chat_model=%s, embedding_model=%s, dim=%d)",
        settings.chat_model,
        settings.embedding_model,
        settings.embedding_dim,
    )

    yield

    logger.info("Shutting down portfolio-assistant")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="portfolio-assistant",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # CORS for the portfolio site
    # --------------------------------------------------------------

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)
    app.include_router(knowledge_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
