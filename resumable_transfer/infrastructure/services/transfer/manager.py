"""
Transfer manager implementation.

This module provides the control surface of the transfer engine: it
creates sessions, launches runs as background tasks and validates pause,
resume and terminate requests against the current session state.
"""

import asyncio
import logging
import os
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from ....core.domain.exceptions import (
    InvalidInput, SeekError, SessionNotFound, TransferConflict
)
from ....core.domain.transfer import (
    ChunkCountMode, TransferState, TransferStatus, count_chunks
)
from ....core.interfaces.transfer import ByteStream, ISessionRegistry, ITransferManager
from ...config.models import UploadConfig
from .registry import SessionRegistry
from .session import UploadSession
from .worker import run_transfer

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """Return a new opaque session token."""
    return uuid.uuid4().hex


class TransferManager(ITransferManager):
    """
    Transfer manager service implementation.

    Sessions live in an injected registry. Each session runs at most one
    chunk loop at a time: resume waits for the previous run to exit before
    positioning the new stream and launching.
    """

    def __init__(
        self,
        config: Optional[UploadConfig] = None,
        registry: Optional[ISessionRegistry] = None,
        token_factory: Callable[[], str] = generate_token
    ) -> None:
        """
        Initialize transfer manager.

        Args:
            config: Upload configuration
            registry: Session registry; a private one is created if omitted
            token_factory: Source of unique session tokens
        """
        self._config = config or UploadConfig()
        self._registry = registry or SessionRegistry()
        self._token_factory = token_factory
        self._chunk_count_mode = ChunkCountMode(self._config.chunk_count_mode)
        self._running = False
        self._purge_task: Optional["asyncio.Task[None]"] = None
        self._start_lock = asyncio.Lock()

        self._stats = {
            "started": 0,
            "resumed": 0,
            "paused": 0,
            "terminated": 0,
        }

    @property
    def name(self) -> str:
        return "TransferManager"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def chunk_size(self) -> int:
        return self._config.chunk_size

    @property
    def registry(self) -> ISessionRegistry:
        return self._registry

    async def start(self) -> None:
        """Start the transfer manager service."""
        if self._running:
            return

        os.makedirs(self._config.upload_directory, exist_ok=True)
        self._running = True
        self._purge_task = asyncio.create_task(self._purge_worker())

        logger.info(
            f"Transfer manager started (directory={self._config.upload_directory}, "
            f"chunk_size={self._config.chunk_size}, mode={self._chunk_count_mode.value})")

    async def stop(self) -> None:
        """Terminate every active run and wait for them to exit."""
        if not self._running:
            return

        self._running = False

        if self._purge_task and not self._purge_task.done():
            self._purge_task.cancel()
            try:
                await self._purge_task
            except asyncio.CancelledError:
                pass
        self._purge_task = None

        sessions = await self._registry.list()
        active = [session for session in sessions if session.run_active]
        for session in active:
            async with session.lock:
                session.terminated = True
                session.touch()

        if active:
            logger.info(f"Waiting for {len(active)} active runs to stop")
            _, pending = await asyncio.wait(
                [asyncio.ensure_future(session.wait_for_run_exit()) for session in active],
                timeout=self._config.shutdown_timeout
            )
            for waiter in pending:
                waiter.cancel()
            if pending:
                logger.warning(f"{len(pending)} runs did not stop within "
                               f"{self._config.shutdown_timeout}s")

        logger.info("Transfer manager stopped")

    async def check_health(self) -> Dict[str, Any]:
        """Report session counts per state."""
        counts = {state.value: 0 for state in TransferState}
        for status in await self.list_transfers():
            counts[status.state.value] += 1

        return {
            "healthy": self._running,
            "status": "running" if self._running else "stopped",
            "details": {
                "upload_directory": self._config.upload_directory,
                "chunk_size": self._config.chunk_size,
                "chunk_count_mode": self._chunk_count_mode.value,
                "sessions": counts,
                "statistics": dict(self._stats)
            }
        }

    async def start_transfer(self, stream: ByteStream, file_name: str,
                             declared_size: Optional[int] = None) -> str:
        """Register a new session and launch its first run. The run takes ownership of stream."""
        base_name = os.path.basename(file_name or "")
        total_size = declared_size
        if total_size is None:
            total_size = getattr(stream, "size", None)

        if not base_name or base_name in (".", ".."):
            await self._close_quietly(stream)
            raise InvalidInput(f"Invalid file name: {file_name!r}")
        if total_size is None or total_size < 0:
            await self._close_quietly(stream)
            raise InvalidInput("Failed to get file size")

        destination_path = os.path.join(self._config.upload_directory, base_name)

        # Claiming the destination and registering must not interleave with another start
        async with self._start_lock:
            owner = await self._destination_owner(destination_path)
            if owner is not None:
                await self._close_quietly(stream)
                raise TransferConflict(
                    f"Destination {base_name} is in use by upload {owner}", owner)

            token = self._token_factory()
            session = UploadSession(
                token=token,
                file_name=base_name,
                destination_path=destination_path,
                total_size=total_size,
                chunk_size=self._config.chunk_size,
                total_chunks=count_chunks(total_size, self._config.chunk_size,
                                          self._chunk_count_mode)
            )

            await self._registry.create(token, session)
            self._launch(session, stream)
        self._stats["started"] += 1

        logger.info(f"Created upload session {token} for {base_name} "
                    f"({total_size} bytes, {session.total_chunks} chunks)")
        return token

    async def pause_transfer(self, token: str) -> None:
        """Request a pause; the run stops at its next check point."""
        session = await self._get_session(token)

        async with session.lock:
            session.paused = True
            session.touch()

        self._stats["paused"] += 1
        logger.info(f"Upload {token} paused")

    async def resume_transfer(self, token: str, stream: ByteStream) -> None:
        """Launch a new run from the resume offset. The run takes ownership of stream."""
        try:
            session = await self._get_session(token)
        except SessionNotFound:
            await self._close_quietly(stream)
            raise

        async with session.launch_lock:
            try:
                async with session.lock:
                    self._check_resumable(session)

                await session.wait_for_run_exit()

                async with session.lock:
                    # The previous run may have finished while draining
                    self._check_resumable(session)
                    offset = session.resume_offset

                size = getattr(stream, "size", None)
                if size is not None and offset > size:
                    raise SeekError(
                        f"Failed to seek file: offset {offset} is past the end ({size} bytes)", token)
                try:
                    await stream.seek(offset)
                except Exception as e:
                    raise SeekError(f"Failed to seek file: {e}", token) from e
            except (TransferConflict, SeekError):
                await self._close_quietly(stream)
                raise

            async with session.lock:
                session.paused = False
                session.error = None
                session.touch()

            self._launch(session, stream)

        self._stats["resumed"] += 1
        logger.info(f"Upload {token} resumed at byte {offset}")

    async def terminate_transfer(self, token: str) -> None:
        """Request an abort; a terminated session cannot be resumed."""
        session = await self._get_session(token)

        async with session.lock:
            if session.completed and not session.run_active:
                raise TransferConflict("Upload already completed", token)
            if session.terminated:
                return
            session.terminated = True
            session.touch()

        self._stats["terminated"] += 1
        logger.info(f"Upload {token} terminated")

    async def get_status(self, token: str) -> TransferStatus:
        session = await self._get_session(token)
        return await session.snapshot()

    async def wait_for_run(self, token: str, timeout: Optional[float] = None) -> None:
        session = await self._get_session(token)
        await asyncio.wait_for(session.wait_for_run_exit(), timeout)

    async def list_transfers(self) -> List[TransferStatus]:
        return [await session.snapshot() for session in await self._registry.list()]

    async def purge_finished(self, older_than: Optional[float] = None) -> int:
        """Drop completed or terminated sessions idle for longer than older_than."""
        ttl = self._config.session_ttl if older_than is None else older_than
        cutoff = time.time() - ttl

        def is_expired(session: UploadSession) -> bool:
            return (not session.run_active
                    and (session.completed or session.terminated)
                    and session.updated_at < cutoff)

        return len(await self._registry.purge(is_expired))

    async def _get_session(self, token: str) -> UploadSession:
        session = await self._registry.lookup(token)
        if session is None:
            logger.warning(f"Session not found: {token}")
            raise SessionNotFound(token)
        return session

    async def _destination_owner(self, destination_path: str) -> Optional[str]:
        """Token of an unfinished session writing to destination_path, if any."""
        for session in await self._registry.list():
            if session.destination_path != destination_path:
                continue
            async with session.lock:
                if session.holds_destination:
                    return session.token
        return None

    def _check_resumable(self, session: UploadSession) -> None:
        """Raise TransferConflict unless the session is paused and unfinished. Call under lock."""
        if session.completed or session.terminated or not session.paused:
            raise TransferConflict("Upload cannot be resumed", session.token)

    def _launch(self, session: UploadSession, stream: ByteStream) -> None:
        task = asyncio.create_task(run_transfer(session, stream),
                                   name=f"transfer-{session.token}")
        session.attach_run(task)

    async def _close_quietly(self, stream: ByteStream) -> None:
        try:
            await stream.close()
        except Exception as e:
            logger.warning(f"Failed to close stream: {e}")

    async def _purge_worker(self) -> None:
        """Periodically drop expired finished sessions."""
        while self._running:
            await asyncio.sleep(self._config.purge_interval)
            try:
                await self.purge_finished()
            except Exception as e:
                logger.error(f"Session purge failed: {e}")
