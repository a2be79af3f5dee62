"""
chatbridge - Delta Accumulation

Rebuilds complete messages from streamed deltas.

Merging every delta of a streamed turn rebuilds the full message:
- text is appended, never replaced
- tool calls are addressed by index; gaps are filled with placeholders
- a tool call's id/type/name take the last non-empty value seen;
  its arguments string only grows
"""

import copy
from typing import Dict, Iterable, List, Optional

from ..core.models import (
    ChatResponse,
    Choice,
    FinishReasonValue,
    Message,
    Role,
    StreamChunk,
    Usage,
)


def merge_deltas(initial: Optional[Message], deltas: Iterable[Message]) -> Message:
    """
    Fold a sequence of delta messages into one message.

    `initial` is copied, never modified.
    """
    message = copy.deepcopy(initial) if initial is not None else Message()
    for delta in deltas:
        message.append_delta(delta)
    return message


class StreamAccumulator:
    """
    Accumulates stream chunks into a complete ChatResponse.

    Tracks the merged message and the last finish reason per choice index,
    plus the stream's id, model and usage when the vendor reports them.

    Example:
        acc = StreamAccumulator()
        for chunk in stream:
            acc.add(chunk)
        response = acc.to_response()
    """

    def __init__(self):
        self.id = ""
        self.model = ""
        self.created = 0
        self.usage: Optional[Usage] = None
        self.chunk_count = 0
        self._messages: Dict[int, Message] = {}
        self._finish_reasons: Dict[int, FinishReasonValue] = {}

    def add(self, chunk: StreamChunk) -> None:
        """Merge one chunk."""
        self.chunk_count += 1
        if chunk.id:
            self.id = chunk.id
        if chunk.model:
            self.model = chunk.model
        if chunk.created:
            self.created = chunk.created
        if chunk.usage is not None:
            self.usage = chunk.usage

        for choice in chunk.choices:
            message = self._messages.get(choice.index)
            if message is None:
                message = self._messages[choice.index] = Message(role=Role.ASSISTANT)
            message.append_delta(choice.delta)
            if choice.finish_reason is not None:
                self._finish_reasons[choice.index] = choice.finish_reason

    def add_all(self, chunks: Iterable[StreamChunk]) -> "StreamAccumulator":
        for chunk in chunks:
            self.add(chunk)
        return self

    @property
    def choice_indices(self) -> List[int]:
        return sorted(self._messages)

    def message(self, index: int = 0) -> Message:
        """The message merged so far for a choice (empty if none seen)."""
        return self._messages.get(index) or Message(role=Role.ASSISTANT)

    def finish_reason(self, index: int = 0) -> Optional[FinishReasonValue]:
        return self._finish_reasons.get(index)

    def to_response(self) -> ChatResponse:
        """Snapshot the accumulated state as a ChatResponse."""
        return ChatResponse(
            id=self.id,
            created=self.created,
            model=self.model,
            choices=[
                Choice(
                    index=index,
                    message=copy.deepcopy(self._messages[index]),
                    finish_reason=self._finish_reasons.get(index)
                )
                for index in self.choice_indices
            ],
            usage=copy.copy(self.usage) if self.usage is not None else Usage()
        )


def accumulate(chunks: Iterable[StreamChunk]) -> ChatResponse:
    """Drain an iterable of chunks (e.g. a Stream) into a ChatResponse."""
    return StreamAccumulator().add_all(chunks).to_response()
