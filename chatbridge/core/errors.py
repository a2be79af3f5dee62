"""
chatbridge - Error Definitions

Unified error taxonomy for both dialects:
- APIError: the vendor answered with an error (HTTP status or embedded error)
- DecodeError: a payload could not be parsed
- TranslationError: a request cannot be expressed in a vendor format
- EmptyResponseError / StreamClosedError: sentinel conditions
- ConfigurationError: the client could not be configured

Transport failures (httpx.HTTPError and subclasses) are not wrapped;
they reach the caller unchanged.
"""

import json
from typing import Any, Dict, Optional, Union

from .models import ErrorBody


# Error bodies larger than this are truncated before parsing.
MAX_ERROR_BODY_SIZE = 1 << 20


class ChatBridgeError(Exception):
    """Base exception for all chatbridge errors."""
    pass


class APIError(ChatBridgeError):
    """
    Error returned by a vendor API, regardless of dialect.

    `status_code` is 0 when no HTTP status applies, e.g. an error event
    delivered in the middle of a stream.
    """

    def __init__(
        self,
        message: str = "",
        status_code: int = 0,
        code: str = "",
        error_type: str = "",
        cause: Optional[BaseException] = None
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.type = error_type
        self.cause = cause
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"API error (status {self.status_code}): {self.code} - {self.message}"

    @classmethod
    def from_error_body(cls, body: ErrorBody, status_code: int = 0) -> "APIError":
        return cls(
            message=body.message,
            status_code=status_code,
            code=body.code,
            error_type=body.type
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "status_code": self.status_code,
            "code": self.code,
            "message": self.message,
            "type": self.type,
        }
        return {"error": result}


class DecodeError(ChatBridgeError):
    """A response or stream payload could not be decoded."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")
        if cause is not None:
            self.__cause__ = cause


class TranslationError(ChatBridgeError):
    """A canonical request cannot be expressed in a vendor's wire format."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")
        if cause is not None:
            self.__cause__ = cause


class StreamLineTooLongError(DecodeError):
    """An SSE line exceeded the reader's size ceiling."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"stream line exceeds {limit} bytes")


class EmptyResponseError(ChatBridgeError):
    """The API answered successfully but with zero choices."""

    def __init__(self, message: str = "empty response from API"):
        super().__init__(message)


class StreamClosedError(ChatBridgeError):
    """The stream was used after close()."""

    def __init__(self, message: str = "stream is closed"):
        super().__init__(message)


class ConfigurationError(ChatBridgeError):
    """Base class for client configuration errors."""
    pass


class MissingAPIKeyError(ConfigurationError):
    """No API key was given and none was found in the environment."""

    def __init__(self):
        super().__init__(
            "API key is required. Pass api_key or set AI_API_KEY / OPENAI_API_KEY."
        )


class MissingBaseURLError(ConfigurationError):
    """No base URL was given for an endpoint without a default."""

    def __init__(self):
        super().__init__(
            "Base URL is required. Pass base_url or set AI_BASE_URL / OPENAI_BASE_URL."
        )


# ============================================================
# Decoding helpers
# ============================================================

def decode_json(raw: Union[str, bytes], what: str) -> Any:
    """Parse JSON, raising DecodeError that wraps the parse failure."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"decode {what}", e) from e


def require_object(data: Any, what: str) -> Dict[str, Any]:
    """Raise DecodeError unless a decoded payload is a JSON object."""
    if not isinstance(data, dict):
        raise DecodeError(
            f"decode {what}",
            ValueError(f"expected a JSON object, got {type(data).__name__}")
        )
    return data


def _body_text(body: bytes) -> str:
    return body[:MAX_ERROR_BODY_SIZE].decode("utf-8", errors="replace")


# ============================================================
# Provider-specific error handlers
# ============================================================

def handle_openai_error(status_code: int, body: bytes) -> APIError:
    """
    Convert an OpenAI-style HTTP error response to APIError.

    OpenAI error format:
    {
        "error": {
            "message": "...",
            "type": "invalid_request_error|authentication_error|...",
            "code": "invalid_api_key|model_not_found|...",
            "param": "..."
        }
    }

    A body that does not match falls back to its raw text as the message.
    """
    text = _body_text(body)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return APIError(message=text, status_code=status_code)

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return APIError(message=text, status_code=status_code)

    code = error.get("code")
    return APIError(
        message=error.get("message") or "",
        status_code=status_code,
        code="" if code is None else str(code),
        error_type=error.get("type") or ""
    )


def handle_anthropic_error(status_code: int, body: bytes) -> APIError:
    """
    Convert an Anthropic-style HTTP error response to APIError.

    Anthropic error format:
    {
        "type": "error",
        "error": {
            "type": "authentication_error|invalid_request_error|...",
            "message": "..."
        }
    }
    """
    text = _body_text(body)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return APIError(message=text, status_code=status_code)

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict) or not error.get("message"):
        return APIError(message=text, status_code=status_code)

    return APIError(
        message=error["message"],
        status_code=status_code,
        error_type=error.get("type") or ""
    )


def read_error_failed(status_code: int, cause: BaseException) -> APIError:
    """APIError for an error response whose body could not be read."""
    return APIError(
        message="failed to read error response",
        status_code=status_code,
        cause=cause
    )
