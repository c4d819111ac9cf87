"""
Streaming File Sink
===================

Bounded producer/consumer hand-off between the encoder and storage.

The encoder side awaits write(chunk); a background writer task drains
an asyncio.Queue into the output file. The queue is bounded, so a slow
disk blocks the producer instead of growing memory.

Design Rules:
    - The sink owns the file handle for the whole run
    - The handle is closed on every exit path (close, abort, error)
    - Completion is signaled exactly once through a Future
    - A failed or aborted run removes the partial file
    - I/O faults surface as OutputWriteError with the OSError chained

Example:
    async with GifFileSink("/tmp/out.gif") as sink:
        for chunk in chunks:
            await sink.write(chunk)
        path = await sink.close()
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from gif_recorder.errors import OutputWriteError


logger = logging.getLogger(__name__)


_END_OF_STREAM = None


class GifFileSink:
    """
    Async file sink with backpressure.

    Attributes:
        path: Destination file path
        max_pending_chunks: Queue bound between producer and writer
        bytes_written: Bytes confirmed written so far
        completion: Future resolved with the path, or failed, exactly once
    """

    def __init__(
        self,
        path: str,
        max_pending_chunks: int = 16,
        fsync: bool = True,
    ) -> None:
        """
        Initialize the sink. Nothing is touched on disk until open().

        Args:
            path: Output file path
            max_pending_chunks: Maximum chunks waiting for the writer. Must be >= 1.
            fsync: fsync the file before reporting success
        """
        if max_pending_chunks < 1:
            raise ValueError("max_pending_chunks must be >= 1")

        self.path = Path(path)
        self.max_pending_chunks = max_pending_chunks
        self.fsync = fsync
        self.bytes_written: int = 0

        self._queue: Optional[asyncio.Queue] = None
        self._writer: Optional[asyncio.Task] = None
        self._fh: Optional[BinaryIO] = None
        self._error: Optional[Exception] = None
        self._aborted = False
        self._completion: Optional[asyncio.Future] = None

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    @property
    def completion(self) -> Optional[asyncio.Future]:
        return self._completion

    async def __aenter__(self) -> "GifFileSink":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.abort()
        elif not self._completion.done():
            await self.close()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> None:
        """
        Create the destination directory and open the file.

        Raises:
            OutputWriteError: If the directory or file cannot be created
        """
        if self._completion is not None:
            raise RuntimeError("Sink already opened")

        loop = asyncio.get_running_loop()
        self._completion = loop.create_future()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "wb")
        except OSError as e:
            error = OutputWriteError(f"Cannot open output file {self.path}: {e}")
            error.__cause__ = e
            self._completion.set_exception(error)
            self._completion.exception()
            raise error from e

        self._queue = asyncio.Queue(maxsize=self.max_pending_chunks)
        self._writer = asyncio.create_task(self._drain(), name="gif-sink-writer")
        logger.debug(f"Sink opened: {self.path}")

    async def write(self, chunk: bytes) -> None:
        """
        Queue a chunk for writing, waiting while the queue is full.

        Raises:
            OutputWriteError: If the writer has already failed
            RuntimeError: If the sink is not open
        """
        if self._queue is None or self._completion.done():
            raise RuntimeError("Sink is not open")
        self._raise_if_failed()
        if chunk:
            await self._queue.put(chunk)

    async def close(self) -> str:
        """
        Drain pending chunks, flush, and close the file.

        Returns:
            The output path

        Raises:
            OutputWriteError: If any write, flush or close failed
        """
        if self._queue is None or self._completion.done():
            raise RuntimeError("Sink is not open")

        await self._queue.put(_END_OF_STREAM)
        await self._writer

        if self._error is None:
            try:
                await asyncio.to_thread(self._flush_and_close)
            except OSError as e:
                self._error = e
        else:
            self._close_handle()

        if self._error is not None:
            self._remove_partial()
            error = self._fail()
            raise error from self._error

        self._completion.set_result(str(self.path))
        logger.info(f"Wrote {self.bytes_written} bytes to {self.path}")
        return str(self.path)

    async def abort(self) -> None:
        """
        Stop writing, close the handle and remove the partial file.

        Completion fails with OutputWriteError if a write had already
        failed, and is cancelled otherwise. Safe to call at any point,
        including after close().
        """
        if self._completion is None or self._completion.done():
            return

        if self._writer is not None:
            self._aborted = True
            await self._queue.put(_END_OF_STREAM)
            await self._writer

        self._close_handle()
        self._remove_partial()

        if self._error is not None:
            self._fail()
            logger.warning(f"Sink failed, removed partial output {self.path}")
        else:
            self._completion.cancel()
            logger.warning(f"Sink aborted, removed partial output {self.path}")

    # -------------------------------------------------------------------------
    # Writer task
    # -------------------------------------------------------------------------

    async def _drain(self) -> None:
        """Consume chunks until end-of-stream; discard them after an error or abort."""
        while True:
            chunk = await self._queue.get()
            if chunk is _END_OF_STREAM:
                break
            if self._error is not None or self._aborted:
                continue
            try:
                await asyncio.to_thread(self._fh.write, chunk)
                self.bytes_written += len(chunk)
            except Exception as e:
                self._error = e
                logger.error(f"Write to {self.path} failed: {e}")

    def _fail(self) -> OutputWriteError:
        """Resolve completion with the recorded write error."""
        error = OutputWriteError(f"Failed to write {self.path}: {self._error}")
        error.__cause__ = self._error
        self._completion.set_exception(error)
        self._completion.exception()
        return error

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise OutputWriteError(
                f"Failed to write {self.path}: {self._error}"
            ) from self._error

    def _flush_and_close(self) -> None:
        fh = self._fh
        try:
            fh.flush()
            if self.fsync:
                os.fsync(fh.fileno())
        finally:
            self._fh = None
            fh.close()

    def _close_handle(self) -> None:
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        try:
            fh.close()
        except OSError as e:
            logger.warning(f"Error closing {self.path}: {e}")

    def _remove_partial(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial output {self.path}: {e}")
