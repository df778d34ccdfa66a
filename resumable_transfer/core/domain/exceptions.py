"""
Transfer error taxonomy.

Every error raised by the transfer engine derives from TransferError and
carries the HTTP status code the presentation layer answers with.
"""

from typing import Optional


class TransferError(Exception):
    """Base class for transfer engine errors."""

    status_code: int = 500

    def __init__(self, message: str, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.token = token


class InvalidInput(TransferError):
    """The source cannot be read or sized at start."""

    status_code = 400


class SessionNotFound(TransferError):
    """No session is registered under the given token."""

    status_code = 404

    def __init__(self, token: str) -> None:
        super().__init__("Session not found", token)


class TransferConflict(TransferError):
    """The session is not in a state that allows the operation."""

    status_code = 409


class SeekError(TransferError):
    """The resume stream cannot be repositioned to the resume offset."""

    status_code = 500


class StreamIOError(TransferError):
    """Reading from the source stream failed inside a run."""


class SinkIOError(TransferError):
    """Writing to the destination failed inside a run."""
