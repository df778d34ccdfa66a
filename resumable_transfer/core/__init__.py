"""
Core module containing the transfer domain model and service interfaces.

This module is independent of the HTTP framework and of the storage
implementation.
"""

from .domain import TransferError, TransferState, TransferStatus
from .interfaces import ISessionRegistry, ITransferManager

__all__ = [
    "TransferError",
    "TransferState",
    "TransferStatus",
    "ISessionRegistry",
    "ITransferManager",
]
