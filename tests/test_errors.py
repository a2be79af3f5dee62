"""
chatbridge - Error System Tests

Verifies:
- Exception hierarchy
- OpenAI-style and Anthropic-style error envelopes map to one APIError
- Unparseable error bodies fall back to the raw text
"""

import json

import pytest

from chatbridge.core.errors import (
    APIError,
    ChatBridgeError,
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    MAX_ERROR_BODY_SIZE,
    MissingAPIKeyError,
    MissingBaseURLError,
    StreamClosedError,
    StreamLineTooLongError,
    TranslationError,
    decode_json,
    handle_anthropic_error,
    handle_openai_error,
    read_error_failed,
)
from chatbridge.core.models import ErrorBody


class TestHierarchy:
    @pytest.mark.parametrize("exc", [
        APIError("x"),
        DecodeError("x"),
        TranslationError("x"),
        StreamLineTooLongError(10),
        EmptyResponseError(),
        StreamClosedError(),
        MissingAPIKeyError(),
        MissingBaseURLError(),
    ])
    def test_all_errors_share_base(self, exc):
        assert isinstance(exc, ChatBridgeError)

    def test_configuration_errors(self):
        assert isinstance(MissingAPIKeyError(), ConfigurationError)
        assert isinstance(MissingBaseURLError(), ConfigurationError)

    def test_line_too_long_is_decode_error(self):
        assert isinstance(StreamLineTooLongError(10), DecodeError)


class TestAPIError:
    def test_fields_and_message(self):
        error = APIError(message="Rate limited", status_code=429, code="rate_limit", error_type="rate_limit_error")

        assert error.status_code == 429
        assert error.code == "rate_limit"
        assert error.type == "rate_limit_error"
        assert str(error) == "API error (status 429): rate_limit - Rate limited"

    def test_from_error_body(self):
        error = APIError.from_error_body(
            ErrorBody(code="invalid_api_key", message="Bad key", type="authentication_error"),
            status_code=401,
        )

        assert error.status_code == 401
        assert error.code == "invalid_api_key"
        assert error.type == "authentication_error"

    def test_cause_is_chained(self):
        cause = OSError("connection reset")
        error = read_error_failed(502, cause)

        assert error.status_code == 502
        assert error.message == "failed to read error response"
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_to_dict(self):
        error = APIError(message="nope", status_code=400, code="bad", error_type="invalid_request_error")

        assert error.to_dict() == {
            "error": {"status_code": 400, "code": "bad", "message": "nope", "type": "invalid_request_error"}
        }


class TestDecodeJSON:
    def test_valid(self):
        assert decode_json(b'{"a": 1}', "payload") == {"a": 1}

    def test_invalid_wraps_cause(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_json("{", "payload")

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)
        assert "decode payload" in str(exc_info.value)


class TestOpenAIErrors:
    def test_error_envelope(self):
        body = json.dumps({
            "error": {
                "message": "Incorrect API key provided",
                "type": "invalid_request_error",
                "code": "invalid_api_key",
                "param": None,
            }
        }).encode()

        error = handle_openai_error(401, body)

        assert error.status_code == 401
        assert error.code == "invalid_api_key"
        assert error.type == "invalid_request_error"
        assert error.message == "Incorrect API key provided"

    def test_numeric_code_stringified(self):
        error = handle_openai_error(500, b'{"error": {"message": "oops", "code": 500}}')

        assert error.code == "500"

    def test_plain_text_body(self):
        error = handle_openai_error(502, b"Bad Gateway")

        assert error.status_code == 502
        assert error.message == "Bad Gateway"
        assert error.code == ""

    def test_json_without_error_object(self):
        error = handle_openai_error(500, b'{"detail": "internal"}')

        assert error.message == '{"detail": "internal"}'


class TestAnthropicErrors:
    def test_rate_limit_envelope(self):
        """HTTP 429 with rate_limit_error surfaces status and type unchanged."""
        body = json.dumps({
            "type": "error",
            "error": {"type": "rate_limit_error", "message": "Number of requests has exceeded your rate limit"},
        }).encode()

        error = handle_anthropic_error(429, body)

        assert isinstance(error, APIError)
        assert error.status_code == 429
        assert error.type == "rate_limit_error"
        assert error.message == "Number of requests has exceeded your rate limit"

    def test_plain_text_body(self):
        error = handle_anthropic_error(503, b"upstream connect error")

        assert error.status_code == 503
        assert error.message == "upstream connect error"

    def test_envelope_without_message_falls_back_to_body(self):
        error = handle_anthropic_error(400, b'{"type": "error", "error": {"type": "x"}}')

        assert error.message == '{"type": "error", "error": {"type": "x"}}'

    def test_oversized_body_truncated(self):
        body = b"x" * (MAX_ERROR_BODY_SIZE + 100)

        error = handle_anthropic_error(500, body)

        assert len(error.message) == MAX_ERROR_BODY_SIZE
