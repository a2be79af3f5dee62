"""
chatbridge - Core Data Models

Canonical, vendor-neutral chat models shared by every dialect.
Requests are translated out of these types and every vendor response,
streamed or not, is translated back into them.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# ============================================================
# Enums
# ============================================================

class Role(str, Enum):
    """Message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(str, Enum):
    """
    Completion finish reasons.

    Unrecognized vendor values are kept as plain strings rather than
    rejected, see `FinishReason.parse`.
    """
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[FinishReasonValue]:
        """Map a wire value to a member, passing unknown strings through."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return value


FinishReasonValue = Union[FinishReason, str]


class ContentKind(str, Enum):
    """Which variant of `Content` is populated."""
    TEXT = "text"
    PARTS = "parts"


class ContentType(str, Enum):
    """Content part types."""
    TEXT = "text"
    IMAGE_URL = "image_url"


# ============================================================
# Content
# ============================================================

@dataclass(frozen=True)
class ImageURL:
    """Image reference for vision models."""
    url: str
    detail: str = ""


@dataclass(frozen=True)
class ContentPart:
    """A single part of multimodal content."""
    type: str
    text: str = ""
    image_url: Optional[ImageURL] = None

    @classmethod
    def text_part(cls, text: str) -> ContentPart:
        return cls(type=ContentType.TEXT.value, text=text)

    @classmethod
    def image_part(cls, url: str, detail: str = "") -> ContentPart:
        return cls(type=ContentType.IMAGE_URL.value, image_url=ImageURL(url, detail))


@dataclass(frozen=True)
class Content:
    """
    Message content: either plain text or an ordered sequence of parts.

    The populated variant is recorded in `kind`, so an empty string is
    still unambiguously text content.

    Example:
        Content.from_text("Hello!")
        Content.from_parts(
            ContentPart.text_part("What is in this image?"),
            ContentPart.image_part("https://example.com/cat.png"),
        )
    """
    kind: ContentKind = ContentKind.TEXT
    value: str = ""
    parts: Tuple[ContentPart, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> Content:
        return cls(kind=ContentKind.TEXT, value=text)

    @classmethod
    def from_parts(cls, *parts: ContentPart) -> Content:
        return cls(kind=ContentKind.PARTS, parts=tuple(parts))

    def text(self) -> str:
        """Return the text. For parts, concatenate the text-typed parts in order."""
        if self.kind is ContentKind.PARTS:
            return "".join(
                part.text for part in self.parts
                if part.type == ContentType.TEXT.value
            )
        return self.value


ContentInput = Union[str, Content, List[ContentPart], None]


def _as_content(content: ContentInput) -> Content:
    if content is None:
        return Content()
    if isinstance(content, Content):
        return content
    if isinstance(content, str):
        return Content.from_text(content)
    return Content.from_parts(*content)


# ============================================================
# Tool Calling
# ============================================================

@dataclass
class FunctionDefinition:
    """Function definition for tool calling."""
    name: str
    description: str = ""
    parameters: Optional[Dict[str, Any]] = None


@dataclass
class Tool:
    """Tool definition."""
    type: str = "function"
    function: FunctionDefinition = field(default_factory=lambda: FunctionDefinition(""))


@dataclass
class ToolChoiceFunction:
    """Specific function to call."""
    name: str


@dataclass
class ToolChoice:
    """Force a specific tool."""
    type: str = "function"
    function: ToolChoiceFunction = field(default_factory=lambda: ToolChoiceFunction(""))


ToolChoiceValue = Union[str, ToolChoice, Dict[str, Any]]


@dataclass
class FunctionCall:
    """Function call made by the model. `arguments` is a JSON string."""
    name: str = ""
    arguments: str = ""


@dataclass
class ToolCall:
    """
    Tool call issued by the assistant.

    `index` is the position in the assistant's tool call list and is how
    streaming deltas address the call they extend.
    """
    index: int = 0
    id: Optional[str] = None
    type: Optional[str] = None
    function: FunctionCall = field(default_factory=FunctionCall)

    def merge(self, delta: ToolCall) -> None:
        """Fold a streaming delta into this call. Arguments only ever grow."""
        if delta.id:
            self.id = delta.id
        if delta.type:
            self.type = delta.type
        if delta.function.name:
            self.function.name = delta.function.name
        self.function.arguments += delta.function.arguments


# ============================================================
# Messages
# ============================================================

@dataclass
class Message:
    """
    Unified message format.

    `role` is absent on most streaming deltas. Once constructed a message
    only changes through `append_delta`.
    """
    role: Optional[Role] = None
    content: Content = field(default_factory=Content)
    tool_call_id: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)

    @classmethod
    def system(cls, content: ContentInput) -> Message:
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=_as_content(content))

    @classmethod
    def user(cls, content: ContentInput) -> Message:
        """Create a user message."""
        return cls(role=Role.USER, content=_as_content(content))

    @classmethod
    def assistant(
        cls,
        content: ContentInput = None,
        tool_calls: Optional[List[ToolCall]] = None
    ) -> Message:
        """Create an assistant message."""
        return cls(
            role=Role.ASSISTANT,
            content=_as_content(content),
            tool_calls=list(tool_calls or [])
        )

    @classmethod
    def tool_result(cls, tool_call_id: str, content: ContentInput) -> Message:
        """Create a tool result message."""
        return cls(role=Role.TOOL, content=_as_content(content), tool_call_id=tool_call_id)

    def append_delta(self, delta: Message) -> None:
        """
        Merge a streaming delta into this message.

        Text is appended. Tool calls are addressed by index; a delta for an
        index past the end grows the list with placeholder entries first.
        """
        if self.role is None and delta.role is not None:
            self.role = delta.role

        text = delta.content.text()
        if text:
            self.content = Content.from_text(self.content.text() + text)

        for tool_delta in delta.tool_calls:
            if tool_delta.index < 0:
                raise ValueError(f"negative tool call index: {tool_delta.index}")
            while tool_delta.index >= len(self.tool_calls):
                self.tool_calls.append(ToolCall(index=len(self.tool_calls)))
            self.tool_calls[tool_delta.index].merge(tool_delta)


# ============================================================
# Request Models
# ============================================================

@dataclass
class ChatRequest:
    """
    Canonical chat completion request.

    Example:
        request = ChatRequest(
            model="gpt-4o",
            messages=[
                Message.system("You are helpful."),
                Message.user("Hello!")
            ],
            temperature=0.7
        )
    """
    model: str
    messages: List[Message] = field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    stop: Optional[List[str]] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    user: Optional[str] = None
    response_format: Optional[Any] = None
    stream: bool = False
    tools: Optional[List[Tool]] = None
    tool_choice: Optional[ToolChoiceValue] = None


# ============================================================
# Response Models
# ============================================================

@dataclass
class Usage:
    """Token usage information."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class ErrorBody:
    """Error object embedded in a vendor response body."""
    code: str = ""
    message: str = ""
    param: str = ""
    type: str = ""


@dataclass
class Choice:
    """A single completion choice."""
    index: int
    message: Message
    finish_reason: Optional[FinishReasonValue] = None


@dataclass
class ChatResponse:
    """Canonical chat completion response."""
    id: str = ""
    object: str = "chat.completion"
    created: int = field(default_factory=lambda: int(time.time()))
    model: str = ""
    choices: List[Choice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    error: Optional[ErrorBody] = None

    @property
    def first_message(self) -> Optional[Message]:
        """The first choice's message, if any."""
        return self.choices[0].message if self.choices else None


@dataclass
class StreamChunkChoice:
    """One choice's increment inside a stream chunk."""
    index: int = 0
    delta: Message = field(default_factory=Message)
    finish_reason: Optional[FinishReasonValue] = None


@dataclass
class StreamChunk:
    """
    A single increment of a streamed response.

    A choice's finish reason is only set on its terminal increment.
    Usage, when the vendor reports it in-stream, rides on the final chunk.
    """
    id: str = ""
    object: str = "chat.completion.chunk"
    created: int = 0
    model: str = ""
    choices: List[StreamChunkChoice] = field(default_factory=list)
    usage: Optional[Usage] = None


# ============================================================
# Serialization Helpers
# ============================================================

def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def content_part_to_dict(part: ContentPart) -> Dict[str, Any]:
    result: Dict[str, Any] = {"type": part.type}
    if part.text:
        result["text"] = part.text
    if part.image_url is not None:
        image: Dict[str, Any] = {"url": part.image_url.url}
        if part.image_url.detail:
            image["detail"] = part.image_url.detail
        result["image_url"] = image
    return result


def content_part_from_dict(data: Dict[str, Any]) -> ContentPart:
    image = data.get("image_url")
    return ContentPart(
        type=data.get("type", ""),
        text=data.get("text") or "",
        image_url=ImageURL(image.get("url", ""), image.get("detail") or "") if image else None
    )


def content_to_json(content: Content) -> Union[str, List[Dict[str, Any]]]:
    """Plain string for text content, array of parts for multimodal content."""
    if content.kind is ContentKind.TEXT:
        return content.value
    if content.kind is ContentKind.PARTS:
        return [content_part_to_dict(part) for part in content.parts]
    raise ValueError(f"Unknown content kind: {content.kind!r}")


def content_from_json(data: Any) -> Content:
    """Accept a plain string, an array of parts, or null."""
    if data is None:
        return Content()
    if isinstance(data, str):
        return Content.from_text(data)
    if isinstance(data, list):
        return Content.from_parts(*(content_part_from_dict(part) for part in data))
    raise ValueError(f"Content must be a string, array or null, got {type(data).__name__}")


def tool_call_to_dict(tc: ToolCall) -> Dict[str, Any]:
    function: Dict[str, Any] = {}
    if tc.function.name:
        function["name"] = tc.function.name
    if tc.function.arguments:
        function["arguments"] = tc.function.arguments
    return _drop_none({
        "index": tc.index,
        "id": tc.id or None,
        "type": tc.type or None,
        "function": function,
    })


def tool_call_from_dict(data: Dict[str, Any]) -> ToolCall:
    function = data.get("function") or {}
    return ToolCall(
        index=data.get("index", 0),
        id=data.get("id") or None,
        type=data.get("type") or None,
        function=FunctionCall(
            name=function.get("name") or "",
            arguments=function.get("arguments") or ""
        )
    )


def message_to_dict(msg: Message) -> Dict[str, Any]:
    """Convert Message to dictionary for JSON serialization."""
    result: Dict[str, Any] = {}
    if msg.role is not None:
        result["role"] = msg.role.value
    result["content"] = content_to_json(msg.content)
    if msg.tool_call_id:
        result["tool_call_id"] = msg.tool_call_id
    if msg.tool_calls:
        result["tool_calls"] = [tool_call_to_dict(tc) for tc in msg.tool_calls]
    return result


def message_from_dict(data: Dict[str, Any]) -> Message:
    """Build a Message from its JSON form. Raises ValueError on an unknown role."""
    role = data.get("role")
    return Message(
        role=Role(role) if role else None,
        content=content_from_json(data.get("content")),
        tool_call_id=data.get("tool_call_id") or None,
        tool_calls=[tool_call_from_dict(tc) for tc in data.get("tool_calls") or []]
    )


def tool_to_dict(tool: Tool) -> Dict[str, Any]:
    function: Dict[str, Any] = {"name": tool.function.name}
    if tool.function.description:
        function["description"] = tool.function.description
    if tool.function.parameters is not None:
        function["parameters"] = tool.function.parameters
    return {"type": tool.type, "function": function}


def tool_from_dict(data: Dict[str, Any]) -> Tool:
    function = data.get("function") or {}
    return Tool(
        type=data.get("type", "function"),
        function=FunctionDefinition(
            name=function.get("name", ""),
            description=function.get("description", ""),
            parameters=function.get("parameters")
        )
    )


def tool_choice_to_json(tool_choice: ToolChoiceValue) -> Any:
    if isinstance(tool_choice, ToolChoice):
        return {"type": tool_choice.type, "function": {"name": tool_choice.function.name}}
    return tool_choice


def tool_choice_from_json(data: Any) -> Optional[ToolChoiceValue]:
    if isinstance(data, dict):
        function = data.get("function")
        if set(data) == {"type", "function"} and isinstance(function, dict) \
                and set(function) == {"name"} and isinstance(function["name"], str):
            return ToolChoice(type=data["type"], function=ToolChoiceFunction(function["name"]))
    return data


def request_to_dict(req: ChatRequest) -> Dict[str, Any]:
    """Convert ChatRequest to its wire dictionary. Unset fields are omitted."""
    result = _drop_none({
        "model": req.model,
        "messages": [message_to_dict(msg) for msg in req.messages],
        "temperature": req.temperature,
        "max_tokens": req.max_tokens,
        "top_p": req.top_p,
        "n": req.n,
        "stop": list(req.stop) if req.stop else None,
        "frequency_penalty": req.frequency_penalty,
        "presence_penalty": req.presence_penalty,
        "seed": req.seed,
        "user": req.user or None,
        "response_format": req.response_format,
        "stream": True if req.stream else None,
        "tools": [tool_to_dict(t) for t in req.tools] if req.tools else None,
        "tool_choice": tool_choice_to_json(req.tool_choice) if req.tool_choice is not None else None,
    })
    return result


def request_from_dict(data: Dict[str, Any]) -> ChatRequest:
    tools = data.get("tools")
    return ChatRequest(
        model=data.get("model", ""),
        messages=[message_from_dict(m) for m in data.get("messages") or []],
        temperature=data.get("temperature"),
        max_tokens=data.get("max_tokens"),
        top_p=data.get("top_p"),
        n=data.get("n"),
        stop=data.get("stop"),
        frequency_penalty=data.get("frequency_penalty"),
        presence_penalty=data.get("presence_penalty"),
        seed=data.get("seed"),
        user=data.get("user"),
        response_format=data.get("response_format"),
        stream=bool(data.get("stream", False)),
        tools=[tool_from_dict(t) for t in tools] if tools else None,
        tool_choice=tool_choice_from_json(data.get("tool_choice"))
    )


def _finish_reason_to_json(reason: Optional[FinishReasonValue]) -> Optional[str]:
    if isinstance(reason, FinishReason):
        return reason.value
    return reason


def error_body_to_dict(err: ErrorBody) -> Dict[str, Any]:
    result = {"code": err.code, "message": err.message, "type": err.type}
    if err.param:
        result["param"] = err.param
    return result


def error_body_from_dict(data: Dict[str, Any]) -> ErrorBody:
    code = data.get("code")
    return ErrorBody(
        code="" if code is None else str(code),
        message=data.get("message") or "",
        param=data.get("param") or "",
        type=data.get("type") or ""
    )


def usage_to_dict(usage: Usage) -> Dict[str, int]:
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens
    }


def usage_from_dict(data: Optional[Dict[str, Any]]) -> Usage:
    data = data or {}
    return Usage(
        prompt_tokens=data.get("prompt_tokens") or 0,
        completion_tokens=data.get("completion_tokens") or 0,
        total_tokens=data.get("total_tokens") or 0
    )


def response_to_dict(resp: ChatResponse) -> Dict[str, Any]:
    """Convert ChatResponse to dictionary for JSON serialization."""
    result: Dict[str, Any] = {
        "id": resp.id,
        "object": resp.object,
        "created": resp.created,
        "model": resp.model,
        "choices": [
            {
                "index": c.index,
                "message": message_to_dict(c.message),
                "finish_reason": _finish_reason_to_json(c.finish_reason)
            }
            for c in resp.choices
        ],
        "usage": usage_to_dict(resp.usage)
    }
    if resp.error is not None:
        result["error"] = error_body_to_dict(resp.error)
    return result


def response_from_dict(data: Dict[str, Any]) -> ChatResponse:
    error = data.get("error")
    return ChatResponse(
        id=data.get("id", ""),
        object=data.get("object", "chat.completion"),
        created=data.get("created") or 0,
        model=data.get("model", ""),
        choices=[
            Choice(
                index=c.get("index", 0),
                message=message_from_dict(c.get("message") or {}),
                finish_reason=FinishReason.parse(c.get("finish_reason"))
            )
            for c in data.get("choices") or []
        ],
        usage=usage_from_dict(data.get("usage")),
        error=error_body_from_dict(error) if isinstance(error, dict) else None
    )


def chunk_to_dict(chunk: StreamChunk) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "id": chunk.id,
        "object": chunk.object,
        "created": chunk.created,
        "model": chunk.model,
        "choices": [
            {
                "index": c.index,
                "delta": message_to_dict(c.delta),
                "finish_reason": _finish_reason_to_json(c.finish_reason)
            }
            for c in chunk.choices
        ]
    }
    if chunk.usage is not None:
        result["usage"] = usage_to_dict(chunk.usage)
    return result


def chunk_from_dict(data: Dict[str, Any]) -> StreamChunk:
    usage = data.get("usage")
    return StreamChunk(
        id=data.get("id") or "",
        object=data.get("object") or "chat.completion.chunk",
        created=data.get("created") or 0,
        model=data.get("model") or "",
        choices=[
            StreamChunkChoice(
                index=c.get("index", 0),
                delta=message_from_dict(c.get("delta") or {}),
                finish_reason=FinishReason.parse(c.get("finish_reason"))
            )
            for c in data.get("choices") or []
        ],
        usage=usage_from_dict(usage) if isinstance(usage, dict) else None
    )
