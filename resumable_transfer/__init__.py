"""
Resumable Transfer - chunked file uploads over HTTP with pause and resume.

A client pushes a file in one request; the server drains it to disk in
fixed-size chunks in the background while the client pauses, resumes,
terminates or polls the transfer.
"""

__version__ = "0.1.0"

from .core.domain import (
    ChunkCountMode, InvalidInput, SeekError, SessionNotFound, TransferConflict,
    TransferError, TransferState, TransferStatus
)
from .core.interfaces import ISessionRegistry, ITransferManager
from .infrastructure.services.transfer import SessionRegistry, TransferManager

__all__ = [
    "ChunkCountMode",
    "InvalidInput",
    "SeekError",
    "SessionNotFound",
    "TransferConflict",
    "TransferError",
    "TransferState",
    "TransferStatus",
    "ISessionRegistry",
    "ITransferManager",
    "SessionRegistry",
    "TransferManager",
]
