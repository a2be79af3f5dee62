"""
chatbridge - Streaming Decoders

Turn SSE lines into canonical stream chunks, one decoder per dialect.

Each decoder is advanced by `consume(line)`, which either:
- returns a StreamChunk,
- returns None ("no chunk yet", or end-of-stream when `done` is set),
- raises APIError / DecodeError, which terminates the stream.

OpenAI-style streams carry one self-contained JSON chunk per `data:` line
and end with `data: [DONE]`. Anthropic-style streams pair `event:` and
`data:` lines and need a little cross-event state (message id, model,
token usage, which text blocks were seen).
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from ..core.errors import APIError, DecodeError, decode_json, require_object
from ..core.models import (
    Content,
    FinishReason,
    FinishReasonValue,
    FunctionCall,
    Message,
    Role,
    StreamChunk,
    StreamChunkChoice,
    ToolCall,
    Usage,
    chunk_from_dict,
    error_body_from_dict,
)
from .sse import SSELine


DONE_SENTINEL = "[DONE]"

_ANTHROPIC_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "tool_use": FinishReason.TOOL_CALLS,
}


def map_anthropic_stop_reason(reason: Optional[str]) -> Optional[FinishReasonValue]:
    """Map an Anthropic stop reason; unknown values pass through unchanged."""
    if not reason:
        return None
    return _ANTHROPIC_STOP_REASONS.get(reason, reason)


class StreamDecoder(ABC):
    """Base class for per-dialect stream decoders."""

    provider: str = ""

    def __init__(self):
        self.done = False

    @abstractmethod
    def consume(self, line: SSELine) -> Optional[StreamChunk]:
        """Advance the decoder by one SSE line."""
        pass

    def finish(self) -> None:
        """Called when the transport reaches EOF."""
        self.done = True


class OpenAIStreamDecoder(StreamDecoder):
    """
    Decoder for OpenAI-style `data:`-only streams.

    Holds no state between lines apart from `done`.
    """

    provider = "openai"

    def consume(self, line: SSELine) -> Optional[StreamChunk]:
        if line.field != "data":
            return None

        if line.value == DONE_SENTINEL:
            self.done = True
            return None

        data = require_object(decode_json(line.value, "stream chunk"), "stream chunk")

        # An embedded error supersedes whatever chunk fields came with it
        error = data.get("error")
        if isinstance(error, dict):
            raise APIError.from_error_body(error_body_from_dict(error))

        try:
            return chunk_from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise DecodeError("decode stream chunk", e) from e


class AnthropicStreamDecoder(StreamDecoder):
    """
    State machine for Anthropic-style `event:` / `data:` streams.

    | event               | effect                                          |
    |---------------------|-------------------------------------------------|
    | message_start       | capture id, model, input tokens; no chunk       |
    | content_block_start | tool_use block -> chunk opening a tool call     |
    |                     | at the block's index                            |
    | content_block_delta | text_delta -> text chunk                        |
    |                     | input_json_delta -> tool call arguments chunk   |
    | message_delta       | chunk with mapped finish reason and usage       |
    | message_stop        | end of stream                                   |
    | error               | raise APIError                                  |
    | ping, other         | ignored                                         |

    An `event:` line is paired with the next `data:` line; blank lines and
    comments between them are already dropped by the reader. Any other
    field in between discards the pending event.
    """

    provider = "anthropic"

    def __init__(self):
        super().__init__()
        self.message_id = ""
        self.model = ""
        self._input_tokens = 0
        self._pending_event: Optional[str] = None
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Optional[StreamChunk]]] = {
            "message_start": self._on_message_start,
            "content_block_start": self._on_content_block_start,
            "content_block_delta": self._on_content_block_delta,
            "message_delta": self._on_message_delta,
            "message_stop": self._on_message_stop,
            "error": self._on_error,
        }

    def consume(self, line: SSELine) -> Optional[StreamChunk]:
        if line.field == "event":
            self._pending_event = line.value
            return None

        event, self._pending_event = self._pending_event, None
        if line.field != "data" or event is None:
            return None

        handler = self._handlers.get(event)
        if handler is None:
            return None

        payload = require_object(decode_json(line.value, event), event)
        return handler(payload)

    # ============================================================
    # Event handlers
    # ============================================================

    def _on_message_start(self, payload: Dict[str, Any]) -> None:
        message = payload.get("message") or {}
        self.message_id = message.get("id") or ""
        self.model = message.get("model") or ""
        self._input_tokens = (message.get("usage") or {}).get("input_tokens") or 0
        return None

    def _on_content_block_start(self, payload: Dict[str, Any]) -> Optional[StreamChunk]:
        block = payload.get("content_block") or {}
        if block.get("type") != "tool_use":
            return None

        tool_call = ToolCall(
            index=_block_index(payload),
            id=block.get("id") or None,
            type="function",
            function=FunctionCall(name=block.get("name") or "")
        )
        return self._chunk(Message(role=Role.ASSISTANT, tool_calls=[tool_call]))

    def _on_content_block_delta(self, payload: Dict[str, Any]) -> Optional[StreamChunk]:
        index = _block_index(payload)
        delta = payload.get("delta") or {}
        delta_type = delta.get("type")

        if delta_type == "text_delta":
            return self._chunk(Message(content=Content.from_text(delta.get("text") or "")))

        if delta_type == "input_json_delta":
            tool_call = ToolCall(
                index=index,
                function=FunctionCall(arguments=delta.get("partial_json") or "")
            )
            return self._chunk(Message(tool_calls=[tool_call]))

        return None

    def _on_message_delta(self, payload: Dict[str, Any]) -> StreamChunk:
        delta = payload.get("delta") or {}
        chunk = self._chunk(
            Message(),
            finish_reason=map_anthropic_stop_reason(delta.get("stop_reason"))
        )
        usage = payload.get("usage")
        if isinstance(usage, dict):
            chunk.usage = Usage(
                prompt_tokens=usage.get("input_tokens") or self._input_tokens,
                completion_tokens=usage.get("output_tokens") or 0
            )
        return chunk

    def _on_message_stop(self, payload: Dict[str, Any]) -> None:
        self.done = True
        return None

    def _on_error(self, payload: Dict[str, Any]) -> None:
        error = payload.get("error") or {}
        raise APIError(
            message=error.get("message") or "",
            error_type=error.get("type") or ""
        )

    def _chunk(
        self,
        delta: Message,
        finish_reason: Optional[FinishReasonValue] = None
    ) -> StreamChunk:
        return StreamChunk(
            id=self.message_id,
            model=self.model,
            choices=[StreamChunkChoice(index=0, delta=delta, finish_reason=finish_reason)]
        )


def _block_index(payload: Dict[str, Any]) -> int:
    index = payload.get("index", 0)
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise DecodeError(
            "decode content block",
            ValueError(f"invalid content block index: {index!r}")
        )
    return index
