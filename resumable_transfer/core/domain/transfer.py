"""
Transfer domain values: chunk accounting, derived states and status snapshots.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ChunkCountMode(Enum):
    """How the expected chunk count is derived from the source size."""
    EXACT = "exact"    # ceil(size / chunk_size)
    LEGACY = "legacy"  # floor(size / chunk_size), final partial chunk uncounted


class TransferState(Enum):
    """Derived state of a transfer as reported by status."""
    RUNNING = "running"
    PAUSED = "paused"
    ERRORED = "errored"
    COMPLETED = "completed"
    TERMINATED = "terminated"


def count_chunks(total_size: int, chunk_size: int,
                 mode: ChunkCountMode = ChunkCountMode.EXACT) -> int:
    """
    Compute the number of chunks expected for a source.

    In legacy mode a trailing partial chunk is not counted, so a finished
    transfer can report one more uploaded chunk than expected.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if total_size < 0:
        raise ValueError(f"total_size must not be negative, got {total_size}")

    if mode == ChunkCountMode.LEGACY:
        return total_size // chunk_size
    return -(-total_size // chunk_size)


@dataclass(frozen=True)
class TransferStatus:
    """Lock-consistent snapshot of one upload session."""
    token: str
    file_name: str
    total_size: int
    uploaded_chunks: int
    total_chunks: int
    paused: bool
    completed: bool
    terminated: bool
    error: Optional[str] = None
    running: bool = False

    @property
    def state(self) -> TransferState:
        if self.terminated:
            return TransferState.TERMINATED
        if self.error is not None:
            return TransferState.ERRORED
        # A pause that arrives after the last chunk does not reopen the transfer
        if self.completed and not self.running:
            return TransferState.COMPLETED
        if self.paused:
            return TransferState.PAUSED
        return TransferState.RUNNING

    @property
    def resumable(self) -> bool:
        """Whether resume would be accepted in this state."""
        return self.paused and not self.completed and not self.terminated

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "sessionID": self.token,
            "fileName": self.file_name,
            "totalSize": self.total_size,
            "uploadedChunks": self.uploaded_chunks,
            "totalChunks": self.total_chunks,
            "paused": self.paused,
            "completed": self.completed,
            "terminated": self.terminated,
            "state": self.state.value,
            "error": self.error,
        }
