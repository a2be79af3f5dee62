"""
chatbridge - OpenAI-style Adapter

Adapter for OpenAI-compatible chat completion endpoints.

The wire format is the canonical format, so translation is mostly a
pass-through: requests only get `stream` forced to the call variant and
responses are decoded field for field.
"""

from typing import Any, Dict

from .base import BaseAdapter
from ..core.errors import (
    APIError,
    DecodeError,
    EmptyResponseError,
    MissingBaseURLError,
    decode_json,
    handle_openai_error,
    require_object,
)
from ..core.models import (
    ChatRequest,
    ChatResponse,
    request_to_dict,
    response_from_dict,
)
from ..streaming.decoders import OpenAIStreamDecoder, StreamDecoder


def build_openai_payload(request: ChatRequest, stream: bool) -> Dict[str, Any]:
    """Build the request body; `stream` always reflects the call variant."""
    payload = request_to_dict(request)
    payload["stream"] = stream
    return payload


def parse_openai_response(data: Any, status_code: int = 200) -> ChatResponse:
    """
    Parse an OpenAI-style response body into a ChatResponse.

    `data` is the raw body (bytes or str) or an already-decoded object.

    Raises:
        APIError: the body carries an embedded `error` object
        EmptyResponseError: the body has zero choices
        DecodeError: the body does not have the expected shape
    """
    if isinstance(data, (bytes, str)):
        data = decode_json(data, "response")
    data = require_object(data, "response")

    try:
        response = response_from_dict(data)
    except (ValueError, TypeError, AttributeError, KeyError) as e:
        raise DecodeError("decode response", e) from e

    if response.error is not None:
        raise APIError.from_error_body(response.error, status_code)

    if not response.choices:
        raise EmptyResponseError()

    return response


class OpenAIAdapter(BaseAdapter):
    """
    Adapter for OpenAI-style APIs.

    Supports:
    - Chat completions
    - Vision (image_url content parts)
    - Tool/Function calling
    - Streaming (`data:` lines terminated by `[DONE]`)
    """

    provider = "openai"
    chat_path = "/chat/completions"

    def build_payload(self, request: ChatRequest, stream: bool) -> Dict[str, Any]:
        return build_openai_payload(request, stream)

    def parse_response(self, body: bytes, status_code: int) -> ChatResponse:
        return parse_openai_response(body, status_code)

    def create_decoder(self) -> StreamDecoder:
        return OpenAIStreamDecoder()

    def handle_error(self, status_code: int, body: bytes) -> APIError:
        return handle_openai_error(status_code, body)

    def base_url(self) -> str:
        if not self.config.base_url:
            raise MissingBaseURLError()
        return self.config.base_url

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
