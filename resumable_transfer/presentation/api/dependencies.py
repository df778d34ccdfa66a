"""
FastAPI dependency injection utilities.

This module provides dependency functions that give routes access to the
container, the configuration and the transfer manager.
"""

from fastapi import Depends, HTTPException, Request, status

from ...application.container import Container
from ...core.interfaces.transfer import ITransferManager
from ...infrastructure.config.models import ApplicationConfig


def get_container(request: Request) -> Container:
    """
    Get the dependency injection container from the request.

    Raises:
        HTTPException: If container is not available
    """
    if not hasattr(request.app.state, "container"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application container not available"
        )

    return request.app.state.container  # type: ignore[no-any-return]


def get_config(request: Request) -> ApplicationConfig:
    """
    Get the application configuration from the request.

    Raises:
        HTTPException: If configuration is not available
    """
    if not hasattr(request.app.state, "config"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not available"
        )

    return request.app.state.config  # type: ignore[no-any-return]


def get_transfer_manager(container: Container = Depends(get_container)) -> ITransferManager:
    """Resolve the transfer manager from the container."""
    manager = container.try_resolve(ITransferManager)  # type: ignore[type-abstract]
    if manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Transfer manager not available"
        )
    return manager
