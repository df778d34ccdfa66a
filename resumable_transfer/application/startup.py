"""
Application startup and configuration logic.

This module registers the application services with the container and
starts and stops lifecycle components in order.
"""

import logging
from typing import List

from .container import Container
from ..core.interfaces.lifecycle import IComponent
from ..core.interfaces.transfer import ISessionRegistry, ITransferManager
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.logging.setup import LoggingManager
from ..infrastructure.services.transfer import SessionRegistry, TransferManager

logger = logging.getLogger(__name__)


class ApplicationStartup:
    """
    Manages application startup and service configuration.

    Components are started in registration order and stopped in reverse.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self._started_components: List[IComponent] = []
        self._startup_order = [LoggingManager, ITransferManager]

    def configure_services(self, config: ApplicationConfig) -> None:
        """Register all application services."""
        logger.info("Configuring application services...")

        self._container.register_instance(ApplicationConfig, config)
        self._container.register_instance(
            LoggingManager, LoggingManager(config.logging))

        registry = SessionRegistry()
        self._container.register_instance(ISessionRegistry, registry)  # type: ignore[type-abstract]
        self._container.register_factory(
            ITransferManager,  # type: ignore[type-abstract]
            lambda: TransferManager(config=config.upload, registry=registry)
        )

        logger.info("Service configuration completed")

    async def start_application(self) -> None:
        """Start all lifecycle components in order."""
        logger.info("Starting application components...")

        for service_type in self._startup_order:
            component = self._container.try_resolve(service_type)
            if component is None:
                continue

            try:
                await component.start()
            except Exception as e:
                logger.error(f"Failed to start component {component.name}: {e}")
                await self.stop_application()
                raise

            self._started_components.append(component)
            logger.info(f"Started component: {component.name}")

        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop started components in reverse order."""
        if not self._started_components:
            return

        logger.info("Stopping application components...")

        for component in reversed(self._started_components):
            try:
                await component.stop()
                logger.info(f"Stopped component: {component.name}")
            except Exception as e:
                logger.error(f"Error stopping component {component.name}: {e}")

        self._started_components.clear()
        logger.info("Application shutdown completed")
