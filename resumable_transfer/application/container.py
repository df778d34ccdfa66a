"""
Dependency injection container for the transfer service.

Services are registered under an interface type either as a ready
instance or as a factory that is invoked once on first resolution.
"""

import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceNotRegisteredException(Exception):
    """Raised when trying to resolve an unregistered service."""
    pass


class ServiceResolutionException(Exception):
    """Raised when a service factory fails."""
    pass


class ServiceRegistration:
    """Registration information for a service."""

    def __init__(self,
                 service_type: Type[Any],
                 factory: Optional[Callable[[], Any]] = None,
                 instance: Any = None) -> None:
        self.service_type = service_type
        self.factory = factory
        self.instance = instance


class Container:
    """Singleton-only service container keyed by interface type."""

    def __init__(self) -> None:
        self._services: Dict[Type[Any], ServiceRegistration] = {}

    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register a ready instance."""
        self._services[service_type] = ServiceRegistration(service_type, instance=instance)
        logger.debug(f"Registered instance for {service_type.__name__}")

    def register_factory(self, service_type: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory; its result is cached on first resolution."""
        self._services[service_type] = ServiceRegistration(service_type, factory=factory)
        logger.debug(f"Registered factory for {service_type.__name__}")

    def resolve(self, service_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotRegisteredException: If service not registered
            ServiceResolutionException: If the factory fails
        """
        registration = self._services.get(service_type)
        if registration is None:
            raise ServiceNotRegisteredException(
                f"Service {service_type.__name__} is not registered")

        if registration.instance is None and registration.factory is not None:
            try:
                registration.instance = registration.factory()
            except Exception as e:
                raise ServiceResolutionException(
                    f"Failed to resolve {service_type.__name__}: {e}") from e

        return registration.instance  # type: ignore[no-any-return]

    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service, returning None if it is not available."""
        try:
            return self.resolve(service_type)
        except (ServiceNotRegisteredException, ServiceResolutionException):
            return None

    def is_registered(self, service_type: Type[Any]) -> bool:
        return service_type in self._services

    def get_registrations(self) -> Dict[Type[Any], ServiceRegistration]:
        return self._services.copy()
