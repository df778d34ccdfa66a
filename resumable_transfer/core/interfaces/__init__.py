"""
Core interfaces defining the contracts of the transfer engine components.
"""

from .lifecycle import IComponent, IHealthCheckable, IStartable, IStoppable
from .transfer import ByteStream, ISessionRegistry, ITransferManager

__all__ = [
    "IComponent",
    "IHealthCheckable",
    "IStartable",
    "IStoppable",
    "ByteStream",
    "ISessionRegistry",
    "ITransferManager",
]
