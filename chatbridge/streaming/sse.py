"""
chatbridge - SSE Frame Reader

Vendor-agnostic, line-oriented reader for Server-Sent-Events framing.

The reader only splits and classifies lines:
- blank lines are dropped (record separators)
- lines starting with ":" are dropped (comments, used as keep-alives)
- everything else is returned as a "field: value" pair

What a field means is up to the decoder consuming the lines.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..core.errors import DecodeError, StreamLineTooLongError


# 1 MiB per line
MAX_LINE_SIZE = 1 << 20


@dataclass(frozen=True)
class SSELine:
    """A meaningful SSE line split into field name and value."""
    field: str
    value: str


def parse_line(text: str) -> SSELine:
    """
    Split a raw line at the first colon.

    A single space after the colon is not part of the value. A line
    without a colon is a field with an empty value.
    """
    name, _, value = text.partition(":")
    if value.startswith(" "):
        value = value[1:]
    return SSELine(field=name, value=value)


class SSEReader:
    """
    Pulls meaningful lines out of a byte stream.

    Args:
        chunks: Iterable of raw byte chunks, split at arbitrary positions
        max_line_size: Longest accepted line in bytes, excluding the
            line terminator. Longer lines raise StreamLineTooLongError.

    Example:
        reader = SSEReader(response.iter_bytes())
        while (line := reader.next_line()) is not None:
            ...
    """

    def __init__(self, chunks: Iterable[bytes], max_line_size: int = MAX_LINE_SIZE):
        if max_line_size <= 0:
            raise ValueError(f"max_line_size must be positive, got {max_line_size}")
        self._chunks = iter(chunks)
        self._buffer = bytearray()
        self._scanned = 0
        self._eof = False
        self.max_line_size = max_line_size

    def _read_raw_line(self) -> Optional[bytes]:
        while True:
            newline = self._buffer.find(b"\n", self._scanned)
            if newline >= 0:
                line = bytes(self._buffer[:newline])
                del self._buffer[:newline + 1]
                self._scanned = 0
                return self._check_size(line)

            self._scanned = len(self._buffer)
            # One extra byte of slack for a trailing "\r"
            if len(self._buffer) > self.max_line_size + 1:
                raise StreamLineTooLongError(self.max_line_size)

            if self._eof:
                if not self._buffer:
                    return None
                line = bytes(self._buffer)
                self._buffer.clear()
                self._scanned = 0
                return self._check_size(line)

            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._eof = True
                continue
            self._buffer.extend(chunk)

    def _check_size(self, line: bytes) -> bytes:
        if line.endswith(b"\r"):
            line = line[:-1]
        if len(line) > self.max_line_size:
            raise StreamLineTooLongError(self.max_line_size)
        return line

    def next_line(self) -> Optional[SSELine]:
        """
        Return the next meaningful line, or None once the stream is exhausted.

        Raises:
            StreamLineTooLongError: a line exceeded max_line_size
            DecodeError: a line was not valid UTF-8
        """
        while True:
            raw = self._read_raw_line()
            if raw is None:
                return None
            if not raw or raw.startswith(b":"):
                continue
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError("decode stream line", e) from e
            return parse_line(text)

    def __iter__(self) -> Iterator[SSELine]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
