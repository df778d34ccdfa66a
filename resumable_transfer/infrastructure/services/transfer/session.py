"""
Upload session state holder.

An UploadSession owns two locks. The state lock guards the mutable
fields and is only ever held for short critical sections. The launch lock
serialises run launches so that a new run never starts while the previous
one is still writing.
"""

import asyncio
import time
from typing import Optional

from ....core.domain.transfer import TransferStatus


class UploadSession:
    """State record for one transfer."""

    def __init__(
        self,
        token: str,
        file_name: str,
        destination_path: str,
        total_size: int,
        chunk_size: int,
        total_chunks: int
    ) -> None:
        self.token = token
        self.file_name = file_name
        self.destination_path = destination_path
        self.total_size = total_size
        self.chunk_size = chunk_size
        self.total_chunks = total_chunks

        # Guarded by lock
        self.uploaded_chunks = 0
        self.paused = False
        self.terminated = False
        self.completed = False
        self.error: Optional[str] = None

        self.created_at = time.time()
        self.updated_at = self.created_at

        self.lock = asyncio.Lock()
        self.launch_lock = asyncio.Lock()
        self._run_task: Optional["asyncio.Task[None]"] = None
        self._run_exited = asyncio.Event()
        self._run_exited.set()

    @property
    def resume_offset(self) -> int:
        """Byte offset implied by the chunks already written. Read under lock."""
        return self.uploaded_chunks * self.chunk_size

    @property
    def run_active(self) -> bool:
        return not self._run_exited.is_set()

    @property
    def holds_destination(self) -> bool:
        """True while a run may still write, or a resume may reopen, the destination. Read under lock."""
        return self.run_active or not (self.completed or self.terminated)

    def touch(self) -> None:
        self.updated_at = time.time()

    def attach_run(self, task: "asyncio.Task[None]") -> None:
        """Track the task of a newly launched run."""
        if self.run_active:
            raise RuntimeError(f"Session {self.token} already has an active run")
        self._run_exited.clear()
        self._run_task = task
        task.add_done_callback(lambda _: self._run_exited.set())

    async def wait_for_run_exit(self) -> None:
        """Block until the current run, if any, has exited."""
        await self._run_exited.wait()

    async def snapshot(self) -> TransferStatus:
        async with self.lock:
            return TransferStatus(
                token=self.token,
                file_name=self.file_name,
                total_size=self.total_size,
                uploaded_chunks=self.uploaded_chunks,
                total_chunks=self.total_chunks,
                paused=self.paused,
                completed=self.completed,
                terminated=self.terminated,
                error=self.error,
                running=self.run_active
            )

    def __repr__(self) -> str:
        return (f"UploadSession(token={self.token!r}, file_name={self.file_name!r}, "
                f"uploaded_chunks={self.uploaded_chunks}, total_chunks={self.total_chunks})")
