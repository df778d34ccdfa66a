"""
Chunk reader/writer loop.

A run drains a source stream into the session's destination file one chunk
at a time. Between chunks it checks the session's pause and terminate
flags, so the worst-case latency to honour a pause is one chunk's read and
write. I/O failures end the run and are recorded on the session; they are
never raised to the caller that launched the run.
"""

import logging
import os
from typing import Any

import aiofiles
import aiofiles.os

from ....core.domain.exceptions import SinkIOError, StreamIOError, TransferError
from ....core.interfaces.transfer import ByteStream
from .session import UploadSession

logger = logging.getLogger(__name__)


async def run_transfer(session: UploadSession, stream: ByteStream) -> None:
    """
    Execute one run against session, reading from stream.

    The stream must already be positioned at the session's resume offset.
    The run owns the stream and closes it on exit.
    """
    async with session.lock:
        offset = session.resume_offset

    sink: Any = None
    try:
        sink = await _open_sink(session, offset)

        async with session.lock:
            session.completed = False

        position = offset
        while True:
            async with session.lock:
                if session.paused or session.terminated:
                    logger.info(
                        f"Run for {session.token} stopped at chunk {session.uploaded_chunks} "
                        f"({'terminated' if session.terminated else 'paused'})")
                    return

            remaining = session.total_size - position
            if remaining <= 0:
                break

            data = await _read_chunk(session, stream, min(session.chunk_size, remaining))
            if not data:
                break

            try:
                await sink.write(data)
                await sink.flush()
            except Exception as e:
                raise SinkIOError(f"Error writing chunk: {e}", session.token) from e

            position += len(data)

            async with session.lock:
                session.uploaded_chunks += 1
                session.touch()
                if session.uploaded_chunks >= session.total_chunks:
                    session.completed = True

            async with session.lock:
                if session.paused or session.terminated:
                    logger.info(
                        f"Run for {session.token} stopped after chunk {session.uploaded_chunks}")
                    return

        if position < session.total_size:
            raise StreamIOError(
                f"Source ended after {position} of {session.total_size} bytes",
                session.token)

        async with session.lock:
            session.completed = True
            session.touch()

        logger.info(f"Upload {session.token} completed: {session.destination_path} "
                    f"({session.uploaded_chunks} chunks)")

    except (StreamIOError, SinkIOError) as e:
        logger.error(f"Run for {session.token} failed: {e.message}")
        async with session.lock:
            session.error = e.message
            session.paused = True
            session.touch()

    finally:
        if sink is not None:
            try:
                await sink.close()
            except Exception as e:
                logger.warning(f"Failed to close {session.destination_path}: {e}")
        try:
            await stream.close()
        except Exception as e:
            logger.warning(f"Failed to close source stream for {session.token}: {e}")


async def _open_sink(session: UploadSession, offset: int) -> Any:
    """
    Open the destination so that the next write lands at offset.

    A fresh run truncates the file. A resumed run appends, after cutting
    off any bytes past offset left behind by a failed write.
    """
    path = session.destination_path
    try:
        directory = os.path.dirname(path)
        if directory:
            await aiofiles.os.makedirs(directory, exist_ok=True)

        if offset == 0:
            return await aiofiles.open(path, 'wb')

        sink = await aiofiles.open(path, 'ab')
        size = await sink.tell()
        if size > offset:
            logger.warning(f"Truncating {path} from {size} to resume offset {offset}")
            await sink.truncate(offset)
        elif size < offset:
            await sink.close()
            raise SinkIOError(
                f"Destination holds {size} bytes, resume offset is {offset}",
                session.token)
        return sink

    except TransferError:
        raise
    except Exception as e:
        raise SinkIOError(f"Error creating/opening file: {e}", session.token) from e


async def _read_chunk(session: UploadSession, stream: ByteStream, size: int) -> bytes:
    """Read exactly size bytes, or fewer only at end of stream."""
    parts = []
    wanted = size
    while wanted > 0:
        try:
            data = await stream.read(wanted)
        except Exception as e:
            raise StreamIOError(f"Error reading file chunk: {e}", session.token) from e
        if not data:
            break
        parts.append(data)
        wanted -= len(data)
    return b"".join(parts)
