"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with
middleware, lifecycle handling and route registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ...application.container import Container
from ...application.startup import ApplicationStartup
from ...infrastructure.config.models import ApplicationConfig
from .middleware import ErrorHandlerMiddleware, PerformanceMiddleware
from .routers import health, upload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Starts the lifecycle components registered in the container and stops
    them on shutdown.
    """
    startup: Optional[ApplicationStartup] = getattr(app.state, "startup", None)

    logger.info("Application starting up...")
    if startup is not None:
        await startup.start_application()

    try:
        yield
    finally:
        logger.info("Application shutting down...")
        if startup is not None:
            await startup.stop_application()


def create_app(config: ApplicationConfig, container: Optional[Container] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        container: Pre-populated container; one is built from config if omitted

    Returns:
        Configured FastAPI application
    """
    if container is None:
        container = Container()
    startup = ApplicationStartup(container)
    if not container.is_registered(ApplicationConfig):
        startup.configure_services(config)

    app = FastAPI(
        title=config.name,
        version=config.version,
        description="Resumable chunked file uploads with pause and resume",
        debug=config.debug,
        lifespan=lifespan
    )

    app.state.container = container
    app.state.config = config
    app.state.startup = startup

    _configure_middleware(app, config)
    _register_routes(app)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app


def create_app_from_config() -> FastAPI:
    """Factory for uvicorn's reload mode."""
    from ...infrastructure.config.loader import ConfigLoader

    return create_app(ConfigLoader().load_config())


def _configure_middleware(app: FastAPI, config: ApplicationConfig) -> None:
    if config.performance.enabled:
        app.add_middleware(PerformanceMiddleware, config=config.performance)

    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.debug("Middleware configured")


def _register_routes(app: FastAPI) -> None:
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(upload.router)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Basic application information."""
        return {
            "name": app.title,
            "version": app.version,
            "status": "running",
            "docs_url": "/docs",
            "health_url": "/health"
        }

    logger.debug("Routes registered")
