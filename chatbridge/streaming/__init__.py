"""
chatbridge Streaming Module

Streaming support for both dialects:
- SSE frame reading with a line-length guard
- Per-dialect decoders producing canonical chunks
- Stream sessions safe to close from another thread
- Delta accumulation back into complete messages
"""

from .sse import (
    MAX_LINE_SIZE,
    SSELine,
    SSEReader,
    parse_line,
)
from .decoders import (
    DONE_SENTINEL,
    StreamDecoder,
    OpenAIStreamDecoder,
    AnthropicStreamDecoder,
    map_anthropic_stop_reason,
)
from .stream import Stream
from .accumulator import (
    StreamAccumulator,
    merge_deltas,
    accumulate,
)

__all__ = [
    # SSE
    "MAX_LINE_SIZE",
    "SSELine",
    "SSEReader",
    "parse_line",
    # Decoders
    "DONE_SENTINEL",
    "StreamDecoder",
    "OpenAIStreamDecoder",
    "AnthropicStreamDecoder",
    "map_anthropic_stop_reason",
    # Session
    "Stream",
    # Accumulation
    "StreamAccumulator",
    "merge_deltas",
    "accumulate",
]
