"""
Transfer service interfaces.

This module defines the contracts of the session registry and of the
transfer control surface, plus the byte stream shape a run reads from.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol

from ..domain.transfer import TransferStatus
from .lifecycle import IComponent

if TYPE_CHECKING:
    from ...infrastructure.services.transfer.session import UploadSession


class ByteStream(Protocol):
    """
    Seekable source stream.

    Starlette's UploadFile satisfies this protocol.
    """

    async def read(self, size: int = -1) -> bytes:
        ...

    async def seek(self, offset: int) -> None:
        ...

    async def close(self) -> None:
        ...


class ISessionRegistry(ABC):
    """Concurrency-safe mapping from session token to upload session."""

    @abstractmethod
    async def create(self, token: str, session: "UploadSession") -> None:
        """Insert a session. The caller guarantees the token is unique."""
        pass

    @abstractmethod
    async def lookup(self, token: str) -> Optional["UploadSession"]:
        """Return the session registered under token, or None."""
        pass

    @abstractmethod
    async def remove(self, token: str) -> Optional["UploadSession"]:
        """Remove and return the session registered under token."""
        pass

    @abstractmethod
    async def list(self) -> List["UploadSession"]:
        """Return all registered sessions."""
        pass

    @abstractmethod
    async def purge(self, predicate: Callable[["UploadSession"], bool]) -> List[str]:
        """Remove every session matching predicate and return their tokens."""
        pass


class ITransferManager(IComponent):
    """
    Transfer control surface.

    Start, pause, resume and terminate return as soon as the session state
    has been changed; runs proceed in the background and callers observe
    progress through status.
    """

    @abstractmethod
    async def start_transfer(self, stream: ByteStream, file_name: str,
                             declared_size: Optional[int] = None) -> str:
        """
        Register a new session and launch its first run.

        Args:
            stream: Source stream positioned at byte 0
            file_name: Display name of the file
            declared_size: Source size in bytes; taken from stream.size if omitted

        Returns:
            Session token

        Raises:
            InvalidInput: If the source cannot be sized or the name is empty
            TransferConflict: If an unfinished upload already writes to the same file
        """
        pass

    @abstractmethod
    async def pause_transfer(self, token: str) -> None:
        """Request a pause. Raises SessionNotFound."""
        pass

    @abstractmethod
    async def resume_transfer(self, token: str, stream: ByteStream) -> None:
        """
        Launch a new run from the resume offset.

        Raises:
            SessionNotFound: If token is unknown
            TransferConflict: If the session is not paused, or is finished
            SeekError: If the stream cannot be positioned at the resume offset
        """
        pass

    @abstractmethod
    async def terminate_transfer(self, token: str) -> None:
        """Request an abort. Raises SessionNotFound or TransferConflict."""
        pass

    @abstractmethod
    async def get_status(self, token: str) -> TransferStatus:
        """Return a snapshot of the session. Raises SessionNotFound."""
        pass

    @abstractmethod
    async def wait_for_run(self, token: str, timeout: Optional[float] = None) -> None:
        """Wait until the session's current run has exited."""
        pass

    @abstractmethod
    async def list_transfers(self) -> List[TransferStatus]:
        """Return snapshots of all registered sessions."""
        pass

    @abstractmethod
    async def purge_finished(self, older_than: Optional[float] = None) -> int:
        """Drop finished sessions idle for more than older_than seconds (default: session TTL)."""
        pass
