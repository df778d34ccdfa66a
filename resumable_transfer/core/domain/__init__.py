"""
Domain values and errors of the transfer engine.
"""

from .exceptions import (
    InvalidInput, SeekError, SessionNotFound, SinkIOError, StreamIOError,
    TransferConflict, TransferError
)
from .transfer import ChunkCountMode, TransferState, TransferStatus, count_chunks

__all__ = [
    "InvalidInput",
    "SeekError",
    "SessionNotFound",
    "SinkIOError",
    "StreamIOError",
    "TransferConflict",
    "TransferError",
    "ChunkCountMode",
    "TransferState",
    "TransferStatus",
    "count_chunks",
]
