"""
Application layer containing dependency injection and startup logic.
"""

from .container import Container, ServiceNotRegisteredException, ServiceResolutionException
from .startup import ApplicationStartup

__all__ = [
    "Container",
    "ServiceNotRegisteredException",
    "ServiceResolutionException",
    "ApplicationStartup",
]
