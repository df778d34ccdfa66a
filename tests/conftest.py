"""
Shared fixtures for transfer engine tests.
"""

import asyncio
import io
import itertools
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import pytest

from resumable_transfer.infrastructure.config.models import UploadConfig
from resumable_transfer.infrastructure.services.transfer.manager import TransferManager


class MemoryStream:
    """In-memory source stream with hooks for driving a run from a test."""

    def __init__(self, data: bytes, size: Optional[int] = -1) -> None:
        self._buffer = io.BytesIO(data)
        self.size = len(data) if size == -1 else size
        self.reads = 0
        self.seeks: List[int] = []
        self.closed = False
        self.fail_on_read: Optional[int] = None
        self.on_read: Optional[Callable[[int], Awaitable[None]]] = None

    async def read(self, size: int = -1) -> bytes:
        self.reads += 1
        if self.fail_on_read is not None and self.reads >= self.fail_on_read:
            raise OSError("connection reset")
        data = self._buffer.read(size)
        if self.on_read is not None:
            await self.on_read(self.reads)
        return data

    async def seek(self, offset: int) -> None:
        self.seeks.append(offset)
        self._buffer.seek(offset)

    async def close(self) -> None:
        self.closed = True


class GatedStream(MemoryStream):
    """Stream whose reads block until the test releases them."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self._gate = asyncio.Semaphore(0)
        self.blocked = False

    async def read(self, size: int = -1) -> bytes:
        self.blocked = True
        await self._gate.acquire()
        self.blocked = False
        return await super().read(size)

    def release(self, count: int = 1) -> None:
        for _ in range(count):
            self._gate.release()


class UnseekableStream(MemoryStream):
    async def seek(self, offset: int) -> None:
        raise OSError("stream is not seekable")


async def wait_until(predicate: Callable[[], Any], timeout: float = 2.0) -> None:
    """Poll a sync or async predicate until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        result = predicate()
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            return
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def payload() -> bytes:
    """250 bytes: two full chunks and a partial one at chunk size 100."""
    return bytes(i % 251 for i in range(250))


@pytest.fixture
def upload_config(tmp_path: Path) -> UploadConfig:
    return UploadConfig(
        upload_directory=str(tmp_path / "uploads"),
        chunk_size=100,
        shutdown_timeout=1.0
    )


@pytest.fixture
async def manager(upload_config: UploadConfig):
    counter = itertools.count(1)
    manager = TransferManager(
        config=upload_config,
        token_factory=lambda: f"session-{next(counter)}"
    )
    await manager.start()

    yield manager

    await manager.stop()
