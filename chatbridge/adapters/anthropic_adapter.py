"""
chatbridge - Anthropic-style Adapter

Adapter for Anthropic's Messages API.

Anthropic differs from the canonical format in several ways:
- system prompts are a top-level string, not messages
- max_tokens is required
- there is no "tool" role; tool results are user content blocks
- assistant tool calls are `tool_use` content blocks with parsed JSON input
- responses carry a list of typed content blocks instead of choices
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from .base import BaseAdapter
from ..core.errors import (
    APIError,
    DecodeError,
    TranslationError,
    decode_json,
    handle_anthropic_error,
    require_object,
)
from ..core.models import (
    ChatRequest,
    ChatResponse,
    Choice,
    Content,
    ContentKind,
    ContentPart,
    ContentType,
    FunctionCall,
    Message,
    Role,
    ToolCall,
    ToolChoice,
    ToolChoiceValue,
    Usage,
)
from ..observability.logging import get_logger
from ..streaming.decoders import AnthropicStreamDecoder, StreamDecoder, map_anthropic_stop_reason

logger = get_logger(__name__)


DEFAULT_BASE_URL = "https://api.anthropic.com"
API_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096


# ============================================================
# Request translation
# ============================================================

def build_anthropic_payload(request: ChatRequest, stream: bool) -> Dict[str, Any]:
    """
    Build an Anthropic Messages API request body.

    Raises:
        TranslationError: a tool call's arguments are not valid JSON, or a
            message has no role
    """
    system_texts: List[str] = []
    messages: List[Dict[str, Any]] = []

    for msg in request.messages:
        if msg.role == Role.SYSTEM:
            system_texts.append(msg.content.text())
            continue
        messages.append(convert_message(msg))

    payload: Dict[str, Any] = {
        "model": request.model,
        "messages": messages,
        "max_tokens": request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS,
    }

    system = "\n".join(text for text in system_texts if text)
    if system:
        payload["system"] = system

    if request.temperature is not None:
        payload["temperature"] = request.temperature

    if request.top_p is not None:
        payload["top_p"] = request.top_p

    if request.stop:
        payload["stop_sequences"] = list(request.stop)

    if stream:
        payload["stream"] = True

    if request.tools:
        payload["tools"] = [
            _drop_empty({
                "name": tool.function.name,
                "description": tool.function.description,
                "input_schema": tool.function.parameters
                if tool.function.parameters is not None else {"type": "object"},
            })
            for tool in request.tools
        ]

    if request.tool_choice is not None:
        tool_choice = convert_tool_choice(request.tool_choice)
        if tool_choice is not None:
            payload["tool_choice"] = tool_choice

    return payload


def convert_message(msg: Message) -> Dict[str, Any]:
    """Convert one non-system canonical message to Anthropic format."""
    if msg.role is None:
        raise TranslationError("message has no role")

    # Tool results become user messages carrying a tool_result block
    if msg.role == Role.TOOL:
        return {
            "role": "user",
            "content": [{
                "type": "tool_result",
                "tool_use_id": msg.tool_call_id or "",
                "content": msg.content.text(),
            }]
        }

    if msg.role == Role.ASSISTANT and msg.tool_calls:
        blocks: List[Dict[str, Any]] = []
        text = msg.content.text()
        if text:
            blocks.append({"type": "text", "text": text})
        for tc in msg.tool_calls:
            blocks.append({
                "type": "tool_use",
                "id": tc.id or "",
                "name": tc.function.name,
                "input": _parse_arguments(tc),
            })
        return {"role": msg.role.value, "content": blocks}

    if msg.content.kind is ContentKind.PARTS:
        return {
            "role": msg.role.value,
            "content": [
                block for block in (_convert_part(part) for part in msg.content.parts)
                if block is not None
            ]
        }

    return {"role": msg.role.value, "content": msg.content.text()}


def convert_tool_choice(tool_choice: ToolChoiceValue) -> Optional[Dict[str, Any]]:
    """
    Convert a canonical tool choice to Anthropic format.

    "none" has no Anthropic equivalent and maps to no policy, as does any
    unrecognized shape.
    """
    if isinstance(tool_choice, str):
        if tool_choice == "auto":
            return {"type": "auto"}
        if tool_choice == "required":
            return {"type": "any"}
        if tool_choice != "none":
            logger.debug("Ignoring unsupported tool_choice", tool_choice=tool_choice)
        return None

    if isinstance(tool_choice, ToolChoice):
        if tool_choice.function.name:
            return {"type": "tool", "name": tool_choice.function.name}
        return None

    if isinstance(tool_choice, dict):
        function = tool_choice.get("function")
        if isinstance(function, dict) and isinstance(function.get("name"), str):
            return {"type": "tool", "name": function["name"]}

    logger.debug("Ignoring unsupported tool_choice", tool_choice_type=type(tool_choice).__name__)
    return None


def _parse_arguments(tc: ToolCall) -> Any:
    arguments = tc.function.arguments
    if not arguments.strip():
        return {}
    try:
        return json.loads(arguments)
    except json.JSONDecodeError as e:
        raise TranslationError(
            f"tool call {tc.id or tc.index} has invalid JSON arguments", e
        ) from e


def _convert_part(part: ContentPart) -> Optional[Dict[str, Any]]:
    if part.type == ContentType.TEXT.value:
        return {"type": "text", "text": part.text}

    if part.type == ContentType.IMAGE_URL.value and part.image_url is not None:
        url = part.image_url.url
        if url.startswith("data:") and "," in url:
            # data:<media_type>;base64,<data>
            header, data = url.split(",", 1)
            media_type = header[len("data:"):].split(";")[0]
            return {
                "type": "image",
                "source": {"type": "base64", "media_type": media_type, "data": data}
            }
        return {"type": "image", "source": {"type": "url", "url": url}}

    return None


def _drop_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "")}


# ============================================================
# Response translation
# ============================================================

def parse_anthropic_response(data: Any, status_code: int = 200) -> ChatResponse:
    """
    Parse an Anthropic Messages API response into a ChatResponse.

    Text blocks are joined with newlines. Each tool_use block becomes a
    tool call numbered by its position among tool_use blocks.

    `data` is either the raw body (bytes or str) or an already-decoded
    object. From a raw body, each tool call's arguments are the block's
    `input` text exactly as sent. A decoded object no longer has that
    text, so its `input` is re-serialized as compact JSON.

    Raises:
        APIError: the body is an error envelope
        DecodeError: the body does not have the expected shape
    """
    raw_inputs: Optional[List[str]] = None
    if isinstance(data, (bytes, str)):
        text = _body_text(data)
        data = decode_json(text, "response")
        if isinstance(data, dict):
            raw_inputs = _raw_tool_inputs(text)

    data = require_object(data, "response")

    if data.get("type") == "error":
        error = data.get("error") or {}
        raise APIError(
            message=error.get("message") or "",
            status_code=status_code,
            error_type=error.get("type") or ""
        )

    try:
        message = _parse_content_blocks(data.get("content") or [], raw_inputs)
        finish_reason = map_anthropic_stop_reason(_optional_str(data, "stop_reason"))
        usage = data.get("usage") or {}
        input_tokens = _token_count(usage, "input_tokens")
        output_tokens = _token_count(usage, "output_tokens")
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError("decode response", e) from e

    return ChatResponse(
        id=data.get("id") or "",
        model=data.get("model") or "",
        choices=[Choice(index=0, message=message, finish_reason=finish_reason)],
        usage=Usage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens
        )
    )


def _parse_content_blocks(
    blocks: List[Dict[str, Any]],
    raw_inputs: Optional[List[str]] = None
) -> Message:
    texts: List[str] = []
    tool_calls: List[ToolCall] = []

    for block in blocks:
        block_type = block.get("type")
        if block_type == "text":
            texts.append(block.get("text") or "")
        elif block_type == "tool_use":
            if raw_inputs is not None:
                arguments = raw_inputs[len(tool_calls)]
            else:
                arguments = _dump_input(block)
            tool_calls.append(
                ToolCall(
                    index=len(tool_calls),
                    id=block.get("id") or None,
                    type="function",
                    function=FunctionCall(
                        name=block.get("name") or "",
                        arguments=arguments
                    )
                )
            )

    return Message(
        role=Role.ASSISTANT,
        content=Content.from_text("\n".join(texts)),
        tool_calls=tool_calls
    )


def _dump_input(block: Dict[str, Any]) -> str:
    if "input" not in block:
        return ""
    return json.dumps(block["input"], separators=(",", ":"), ensure_ascii=False)


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _token_count(usage: Dict[str, Any], key: str) -> int:
    value = usage.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"usage.{key} must be an integer, got {type(value).__name__}")
    return value


def _body_text(body: Union[bytes, str]) -> str:
    if isinstance(body, str):
        return body
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("decode response", e) from e


# ============================================================
# Raw tool input extraction
# ============================================================

# Decoding loses the literal text of each tool_use `input`, such as how
# numbers and escapes were spelled. These helpers walk the already
# validated body text and slice that text back out.

_JSON_DECODER = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")


def _skip_whitespace(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _value_spans(text: str, idx: int, open_char: str, close_char: str, keyed: bool):
    """Yield (key, start, end) for each member of the container at `idx`."""
    idx = _skip_whitespace(text, idx)
    if text[idx:idx + 1] != open_char:
        return
    idx = _skip_whitespace(text, idx + 1)
    if text[idx:idx + 1] == close_char:
        return

    while True:
        key = None
        if keyed:
            key, idx = _JSON_DECODER.raw_decode(text, idx)
            # skip the ':' separator
            idx = _skip_whitespace(text, _skip_whitespace(text, idx) + 1)
        _, end = _JSON_DECODER.raw_decode(text, idx)
        yield key, idx, end

        idx = _skip_whitespace(text, end)
        if text[idx:idx + 1] != ",":
            return
        idx = _skip_whitespace(text, idx + 1)


def _object_spans(text: str, idx: int) -> Dict[str, Tuple[int, int]]:
    # Later duplicate keys win, as they do in json.loads
    return {
        key: (start, end)
        for key, start, end in _value_spans(text, idx, "{", "}", keyed=True)
    }


def _raw_tool_inputs(text: str) -> List[str]:
    """Literal `input` text of each tool_use block, in block order."""
    content = _object_spans(text, 0).get("content")
    if content is None:
        return []

    inputs: List[str] = []
    for _, start, _ in _value_spans(text, content[0], "[", "]", keyed=False):
        block = _object_spans(text, start)
        type_span = block.get("type")
        if type_span is None or json.loads(text[type_span[0]:type_span[1]]) != "tool_use":
            continue
        input_span = block.get("input")
        inputs.append(text[input_span[0]:input_span[1]] if input_span is not None else "")
    return inputs


# ============================================================
# Adapter
# ============================================================

class AnthropicAdapter(BaseAdapter):
    """
    Adapter for Anthropic Claude API.

    Supports:
    - Chat completions
    - Vision (base64 data URLs and plain image URLs)
    - Tool/Function calling
    - Streaming (`event:` / `data:` pairs terminated by `message_stop`)
    """

    provider = "anthropic"
    chat_path = "/v1/messages"

    def build_payload(self, request: ChatRequest, stream: bool) -> Dict[str, Any]:
        return build_anthropic_payload(request, stream)

    def parse_response(self, body: bytes, status_code: int) -> ChatResponse:
        return parse_anthropic_response(body, status_code)

    def create_decoder(self) -> StreamDecoder:
        return AnthropicStreamDecoder()

    def handle_error(self, status_code: int, body: bytes) -> APIError:
        return handle_anthropic_error(status_code, body)

    def base_url(self) -> str:
        return self.config.anthropic_base_url or self.config.base_url or DEFAULT_BASE_URL

    def headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.config.api_key,
            "anthropic-version": API_VERSION,
            "Content-Type": "application/json",
        }
