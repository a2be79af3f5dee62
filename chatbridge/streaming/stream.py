"""
chatbridge - Stream Session

A live streaming call: owns the HTTP response, the SSE reader and one
dialect decoder.

Concurrency:
- exactly one caller drives `recv()` (or iterates the stream)
- `close()` may be called from another thread at any time
- after `close()`, every `recv()` raises StreamClosedError without I/O

`recv()` and `close()` are serialized by a lock. The closed flag is
checked before taking the lock, so reads after close never block, and
again after taking it, so a read queued behind `close()` sees the flag.
"""

import threading
from typing import Iterator, Optional

import httpx

from ..core.errors import StreamClosedError
from ..core.models import StreamChunk
from ..observability.logging import get_logger
from .decoders import StreamDecoder
from .sse import MAX_LINE_SIZE, SSEReader

logger = get_logger(__name__)


class Stream:
    """
    Iterator over canonical chunks of a streaming chat completion.

    Example:
        with client.chat_completion_stream(request) as stream:
            for chunk in stream:
                print(chunk.choices[0].delta.content.text(), end="")
    """

    def __init__(
        self,
        response: httpx.Response,
        decoder: StreamDecoder,
        max_line_size: int = MAX_LINE_SIZE
    ):
        self._response = response
        self._decoder = decoder
        self._reader = SSEReader(response.iter_bytes(), max_line_size)
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._error: Optional[BaseException] = None
        self.chunks_received = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def provider(self) -> str:
        return self._decoder.provider

    def recv(self) -> Optional[StreamChunk]:
        """
        Read the next chunk.

        Returns:
            The next StreamChunk, or None at end of stream.

        Raises:
            StreamClosedError: close() was called
            APIError: the vendor reported an error in-stream
            DecodeError: a payload or line could not be decoded
            httpx.HTTPError: transport failure, passed through unchanged
        """
        if self._closed.is_set():
            raise StreamClosedError()

        with self._lock:
            if self._closed.is_set():
                raise StreamClosedError()

            if self._error is not None:
                raise self._error
            if self._decoder.done:
                return None

            try:
                return self._next_chunk()
            except Exception as e:
                self._error = e
                self._release()
                logger.debug(
                    "Stream terminated with error",
                    provider=self.provider,
                    error_class=type(e).__name__,
                    chunks=self.chunks_received
                )
                raise

    def _next_chunk(self) -> Optional[StreamChunk]:
        while True:
            line = self._reader.next_line()
            if line is None:
                self._decoder.finish()
                self._finished()
                return None

            chunk = self._decoder.consume(line)
            if chunk is not None:
                self.chunks_received += 1
                return chunk

            if self._decoder.done:
                self._finished()
                return None

    def _finished(self) -> None:
        logger.debug(
            "Stream finished",
            provider=self.provider,
            chunks=self.chunks_received
        )
        self._release()

    def _release(self) -> None:
        self._response.close()

    def close(self) -> None:
        """Close the stream and release the connection. Safe to call twice."""
        self._closed.set()
        with self._lock:
            self._release()

    def __iter__(self) -> Iterator[StreamChunk]:
        while True:
            chunk = self.recv()
            if chunk is None:
                return
            yield chunk

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
