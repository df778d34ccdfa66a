"""
Lifecycle interfaces for long-lived components.

The startup sequencer starts every IStartable it knows about in order and
stops the started ones in reverse order on shutdown.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IStartable(ABC):
    """Component with an explicit start step."""

    @abstractmethod
    async def start(self) -> None:
        """
        Acquire resources and make the component ready.

        Raises:
            Exception: If the component cannot start.
        """
        pass


class IStoppable(ABC):
    """Component with an explicit stop step."""

    @abstractmethod
    async def stop(self) -> None:
        """Release resources and let in-flight work wind down."""
        pass


class IHealthCheckable(ABC):
    """Component that reports its own health."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """
        Report health.

        Returns:
            Dict with at least 'healthy' (bool), 'status' (str)
            and 'details' (dict).
        """
        pass


class IComponent(IStartable, IStoppable, IHealthCheckable):
    """A named, versioned component with the full lifecycle."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Component name."""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Component version."""
        pass
