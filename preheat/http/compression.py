"""Streaming gzip compression for request bodies.

The compressed body is never built up front. A producer thread writes the
gzip encoding of the body text into a :class:`BodyPipe` while the consumer
(usually the HTTP transport) reads from the other end, so the producer only
advances as fast as the body is drained.
"""

import gzip
import io
import threading
from enum import Enum

from preheat.core.logging import get_logger


logger = get_logger(__name__)

# Size of the text slices fed to the encoder.
ENCODER_CHUNK_SIZE = 64 * 1024


class CompressionState(str, Enum):
    """Lifecycle of a single compression call."""

    IDLE = "idle"
    PRODUCING = "producing"
    DRAINING = "draining"
    FAILED = "failed"
    CLOSED = "closed"


class BodyPipe:
    """Synchronous in-memory pipe with one writer and one reader.

    There is no internal buffer: ``write`` blocks until the reader has taken
    every byte of the chunk, or until the read end is closed.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._chunk: memoryview | None = None
        self._write_closed = False
        self._read_closed = False
        self._error: BaseException | None = None

    @property
    def read_closed(self) -> bool:
        return self._read_closed

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Hand ``data`` to the reader and wait until it is consumed.

        Raises:
            BrokenPipeError: If the read end is closed before all of ``data``
                was read
            ValueError: If the write end is already closed
        """
        view = memoryview(data).cast("B")
        size = view.nbytes
        with self._cond:
            if self._write_closed:
                raise ValueError("write to closed pipe")
            if self._read_closed:
                raise BrokenPipeError("read end of pipe is closed")
            if not size:
                return 0

            self._chunk = view
            self._cond.notify_all()
            while self._chunk is not None and not self._read_closed:
                self._cond.wait()

            if self._chunk is not None:
                self._chunk = None
                raise BrokenPipeError("read end of pipe is closed")
        return size

    def flush(self) -> None:
        pass

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (the whole pending chunk when negative).

        Returns ``b""`` at end of stream. If the writer closed the pipe with an
        error, that error is raised once all written data has been read.
        """
        if size == 0:
            return b""

        with self._cond:
            while (
                self._chunk is None
                and not self._write_closed
                and not self._read_closed
            ):
                self._cond.wait()

            if self._read_closed:
                raise ValueError("read from closed pipe")

            if self._chunk is not None:
                chunk = self._chunk
                n = len(chunk) if size < 0 else min(size, len(chunk))
                data = chunk[:n].tobytes()
                if n < len(chunk):
                    self._chunk = chunk[n:]
                else:
                    self._chunk = None
                    self._cond.notify_all()
                return data

            if self._error is not None:
                raise self._error
            return b""

    def close_write(self, error: BaseException | None = None) -> None:
        """Close the write end; ``error`` becomes the reader's terminal error."""
        with self._cond:
            if self._write_closed:
                return
            self._write_closed = True
            self._error = error
            self._cond.notify_all()

    def close_read(self) -> None:
        """Close the read end; blocked and future writes fail."""
        with self._cond:
            self._read_closed = True
            self._cond.notify_all()


class GzipBodyStream(io.RawIOBase):
    """Readable stream yielding the gzip encoding of a text body.

    The producer thread starts as soon as the stream is created. Errors hit
    by the producer are raised from :meth:`read` when the consumer reaches
    them, never from the constructor.
    """

    def __init__(self, text: str, *, compresslevel: int = 9) -> None:
        super().__init__()
        self._pipe = BodyPipe()
        self._state = CompressionState.IDLE
        self._state_lock = threading.Lock()
        self._producer_done = False
        self._producer = threading.Thread(
            target=self._produce,
            args=(text, compresslevel),
            name="gzip-body-producer",
            daemon=True,
        )
        self._state = CompressionState.PRODUCING
        self._producer.start()

    @property
    def state(self) -> CompressionState:
        with self._state_lock:
            return self._state

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        view = memoryview(buffer).cast("B")
        data = self._pipe.read(len(view))
        n = len(data)
        view[:n] = data
        return n

    def close(self) -> None:
        if not self.closed:
            self._pipe.close_read()
            with self._state_lock:
                if self._producer_done:
                    self._state = CompressionState.CLOSED
        super().close()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the producer thread to exit; return True if it did."""
        self._producer.join(timeout)
        return not self._producer.is_alive()

    def _produce(self, text: str, compresslevel: int) -> None:
        error: BaseException | None = None
        try:
            payload = memoryview(text.encode("utf-8"))
            with gzip.GzipFile(
                fileobj=self._pipe,  # type: ignore[arg-type]
                mode="wb",
                compresslevel=compresslevel,
                mtime=0,
            ) as encoder:
                for offset in range(0, len(payload), ENCODER_CHUNK_SIZE):
                    encoder.write(payload[offset : offset + ENCODER_CHUNK_SIZE])
        except Exception as e:
            error = e
            logger.debug(
                "gzip_body_producer_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self._pipe.close_write(error)
            self._finish(error)

    def _finish(self, error: BaseException | None) -> None:
        with self._state_lock:
            self._producer_done = True
            if self._pipe.read_closed:
                self._state = CompressionState.CLOSED
            elif error is not None:
                self._state = CompressionState.FAILED
            else:
                self._state = CompressionState.DRAINING


def gzip_compress_body(body: str) -> GzipBodyStream:
    """Return a stream that yields ``body`` gzip-compressed as it is read."""
    return GzipBodyStream(body)
