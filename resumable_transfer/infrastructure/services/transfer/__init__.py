"""
Transfer services.

This module provides the resumable chunked-transfer engine: upload
sessions, the session registry, the chunk loop and the transfer manager.
"""

from .manager import TransferManager, generate_token
from .registry import SessionRegistry
from .session import UploadSession
from .worker import run_transfer

__all__ = [
    "TransferManager",
    "generate_token",
    "SessionRegistry",
    "UploadSession",
    "run_transfer",
]
