# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the todobatch API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from todobatch import __version__
from todobatch.api.dependencies import close_services, init_services
from todobatch.api.routes import health
from todobatch.api.v1 import router as v1_router
from todobatch.core.config import get_settings
from todobatch.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging, builds the service singletons and starts the
    notification worker on startup. Stops the worker and releases the
    services on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting todobatch API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    container = init_services(settings)
    container.notifier.start()

    yield

    await container.notifier.stop()
    close_services()
    logger.info("Shutting down todobatch API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="todobatch API",
        description="Todo service with bounded concurrent batch creation",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
