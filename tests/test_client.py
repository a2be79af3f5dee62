"""
chatbridge - Client Tests

Exercises the full request path over httpx.MockTransport:
- endpoint paths, auth headers and payloads per dialect
- HTTP error responses mapped to APIError
- streaming calls returning Stream sessions
- transport ownership and timeout handling
"""

import httpx
import pytest

from chatbridge import (
    APIError,
    ChatRequest,
    Client,
    DecodeError,
    EmptyResponseError,
    FinishReason,
    Message,
    MissingAPIKeyError,
    MissingBaseURLError,
    TranslationError,
    accumulate,
)
from chatbridge.adapters import AnthropicAdapter, OpenAIAdapter, get_adapter
from chatbridge.config import ClientConfig

from conftest import openai_chunk, sse_data, sse_event


BASE_URL = "https://llm.example/v1"

OPENAI_RESPONSE = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "created": 1700000000,
    "model": "gpt-4o",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello!"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
}

ANTHROPIC_RESPONSE = {
    "id": "msg_1",
    "type": "message",
    "role": "assistant",
    "model": "claude-3-5-sonnet-20241022",
    "content": [{"type": "text", "text": "Hello!"}],
    "stop_reason": "end_turn",
    "usage": {"input_tokens": 10, "output_tokens": 5},
}


def hello_request(model: str = "gpt-4o") -> ChatRequest:
    return ChatRequest(model=model, messages=[Message.user("Hi")])


# ============================================================
# Construction
# ============================================================

class TestClientConstruction:
    def test_missing_api_key(self):
        with pytest.raises(MissingAPIKeyError):
            Client()

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        monkeypatch.setenv("OPENAI_BASE_URL", "https://env.example/v1/")

        with Client() as client:
            assert client.config.api_key == "env-key"
            assert client.base_url == "https://env.example/v1"

    def test_explicit_overrides_env(self, monkeypatch):
        monkeypatch.setenv("AI_API_KEY", "env-key")
        monkeypatch.setenv("AI_BASE_URL", "https://env.example/v1")

        with Client(api_key="explicit", base_url="https://explicit.example/") as client:
            assert client.config.api_key == "explicit"
            assert client.base_url == "https://explicit.example"

    def test_timeout_sent_with_each_request(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=OPENAI_RESPONSE))
        original_timeout = http_client.timeout
        client = Client(api_key="k", base_url=BASE_URL, timeout=5.0, http_client=http_client)

        client.chat_completion(hello_request())

        assert recorder.last_request.extensions["timeout"] == httpx.Timeout(5.0).as_dict()
        assert http_client.timeout == original_timeout

    def test_default_timeout_sent_with_each_request(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=ANTHROPIC_RESPONSE))
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        client.anthropic_chat_completion(hello_request("claude-3-5-sonnet-latest"))

        assert recorder.last_request.extensions["timeout"] == httpx.Timeout(60.0).as_dict()

    def test_injected_client_not_closed(self, fake_http):
        _, http_client = fake_http(lambda request: httpx.Response(200, json=OPENAI_RESPONSE))

        Client(api_key="k", base_url=BASE_URL, http_client=http_client).close()

        assert not http_client.is_closed

    def test_owned_client_closed(self):
        client = Client(api_key="k", base_url=BASE_URL)
        client.close()

        assert client._http_client.is_closed


class TestGetAdapter:
    def test_known_dialects(self):
        config = ClientConfig(api_key="k", base_url=BASE_URL)
        with httpx.Client() as http_client:
            assert isinstance(get_adapter("openai", config, http_client), OpenAIAdapter)
            assert isinstance(get_adapter("Anthropic", config, http_client), AnthropicAdapter)

    def test_unknown_dialect(self):
        with httpx.Client() as http_client:
            with pytest.raises(ValueError):
                get_adapter("gemini", ClientConfig(api_key="k"), http_client)


# ============================================================
# OpenAI-style calls
# ============================================================

class TestOpenAICalls:
    def test_chat_completion(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=OPENAI_RESPONSE))
        client = Client(api_key="sk-test", base_url=BASE_URL, http_client=http_client)

        response = client.chat_completion(hello_request())

        request = recorder.last_request
        assert request.method == "POST"
        assert str(request.url) == "https://llm.example/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert recorder.last_json == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "Hi"}],
            "stream": False,
        }
        assert response.choices[0].message.content.text() == "Hello!"
        assert response.choices[0].finish_reason is FinishReason.STOP
        assert response.usage.total_tokens == 15

    def test_missing_base_url_fails_without_io(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=OPENAI_RESPONSE))
        client = Client(api_key="k", http_client=http_client)

        with pytest.raises(MissingBaseURLError):
            client.chat_completion(hello_request())
        with pytest.raises(MissingBaseURLError):
            client.chat_completion_stream(hello_request())

        assert recorder.requests == []

    def test_http_error(self, fake_http):
        _, http_client = fake_http(lambda request: httpx.Response(401, json={
            "error": {"message": "Incorrect API key provided", "type": "invalid_request_error",
                      "code": "invalid_api_key"}
        }))
        client = Client(api_key="bad", base_url=BASE_URL, http_client=http_client)

        with pytest.raises(APIError) as exc_info:
            client.chat_completion(hello_request())

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "invalid_api_key"

    def test_empty_choices(self, fake_http):
        _, http_client = fake_http(lambda request: httpx.Response(200, json={"id": "x", "choices": []}))
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        with pytest.raises(EmptyResponseError):
            client.chat_completion(hello_request())

    def test_invalid_json_body(self, fake_http):
        _, http_client = fake_http(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        with pytest.raises(DecodeError):
            client.chat_completion(hello_request())

    def test_transport_error_passes_through(self, fake_http):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        _, http_client = fake_http(refuse)
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        with pytest.raises(httpx.ConnectError):
            client.chat_completion(hello_request())

    def test_stream(self, fake_http):
        body = "".join([
            sse_data(openai_chunk(role="assistant", content="Hello")),
            sse_data(openai_chunk(content=" world")),
            sse_data(openai_chunk(finish_reason="stop")),
            sse_data("[DONE]"),
        ])
        recorder, http_client = fake_http(lambda request: httpx.Response(
            200, headers={"Content-Type": "text/event-stream"}, content=body.encode()
        ))
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        with client.chat_completion_stream(hello_request()) as stream:
            response = accumulate(stream)

        assert recorder.last_json["stream"] is True
        assert response.choices[0].message.content.text() == "Hello world"
        assert response.choices[0].finish_reason is FinishReason.STOP

    def test_stream_http_error(self, fake_http):
        _, http_client = fake_http(lambda request: httpx.Response(429, json={
            "error": {"message": "Slow down", "type": "rate_limit_error", "code": "rate_limit_exceeded"}
        }))
        client = Client(api_key="k", base_url=BASE_URL, http_client=http_client)

        with pytest.raises(APIError) as exc_info:
            client.chat_completion_stream(hello_request())

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "rate_limit_exceeded"


# ============================================================
# Anthropic-style calls
# ============================================================

class TestAnthropicCalls:
    def test_chat_completion(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=ANTHROPIC_RESPONSE))
        client = Client(api_key="sk-ant", http_client=http_client)

        response = client.anthropic_chat_completion(ChatRequest(
            model="claude-3-5-sonnet-20241022",
            messages=[Message.system("You are helpful."), Message.user("Hi")],
        ))

        request = recorder.last_request
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-ant"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in request.headers
        assert recorder.last_json == {
            "model": "claude-3-5-sonnet-20241022",
            "messages": [{"role": "user", "content": "Hi"}],
            "max_tokens": 4096,
            "system": "You are helpful.",
        }
        assert response.choices[0].message.content.text() == "Hello!"
        assert response.choices[0].finish_reason is FinishReason.STOP
        assert response.usage.total_tokens == 15

    def test_tool_input_text_kept_from_body(self, fake_http):
        body = (
            b'{"id":"msg_2","type":"message","model":"claude","content":['
            b'{"type":"tool_use","id":"toolu_1","name":"f","input":{"n":1e2,"s":"\\u00e9"}}'
            b'],"stop_reason":"tool_use","usage":{"input_tokens":1,"output_tokens":2}}'
        )
        _, http_client = fake_http(lambda request: httpx.Response(200, content=body))
        client = Client(api_key="sk-ant", http_client=http_client)

        response = client.anthropic_chat_completion(hello_request("claude"))

        call = response.choices[0].message.tool_calls[0]
        assert call.function.arguments == '{"n":1e2,"s":"\\u00e9"}'
        assert response.choices[0].finish_reason is FinishReason.TOOL_CALLS

    def test_base_url_used_for_anthropic(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=ANTHROPIC_RESPONSE))
        client = Client(api_key="k", base_url="https://gateway.example/", http_client=http_client)

        client.anthropic_chat_completion(hello_request("claude"))

        assert str(recorder.last_request.url) == "https://gateway.example/v1/messages"

    def test_anthropic_base_url_override(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=ANTHROPIC_RESPONSE))
        client = Client(
            api_key="k",
            base_url=BASE_URL,
            anthropic_base_url="https://anthropic-proxy.example",
            http_client=http_client,
        )

        client.anthropic_chat_completion(hello_request("claude"))

        assert str(recorder.last_request.url) == "https://anthropic-proxy.example/v1/messages"

    def test_rate_limit_error(self, fake_http):
        """HTTP 429 rate_limit_error surfaces as APIError with status and type."""
        _, http_client = fake_http(lambda request: httpx.Response(429, json={
            "type": "error",
            "error": {"type": "rate_limit_error", "message": "Number of requests has exceeded your rate limit"},
        }))
        client = Client(api_key="k", http_client=http_client)

        with pytest.raises(APIError) as exc_info:
            client.anthropic_chat_completion(hello_request("claude"))

        assert exc_info.value.status_code == 429
        assert exc_info.value.type == "rate_limit_error"

    def test_translation_error_before_io(self, fake_http):
        recorder, http_client = fake_http(lambda request: httpx.Response(200, json=ANTHROPIC_RESPONSE))
        client = Client(api_key="k", http_client=http_client)
        request = ChatRequest(model="claude", messages=[Message()])

        with pytest.raises(TranslationError):
            client.anthropic_chat_completion(request)

        assert recorder.requests == []

    def test_stream(self, fake_http):
        body = "".join([
            sse_event("message_start", {"type": "message_start",
                                        "message": {"id": "msg_1", "model": "claude", "usage": {"input_tokens": 7}}}),
            sse_event("content_block_start", {"type": "content_block_start", "index": 0,
                                              "content_block": {"type": "tool_use", "id": "toolu_1",
                                                                "name": "get_weather", "input": {}}}),
            sse_event("content_block_delta", {"type": "content_block_delta", "index": 0,
                                              "delta": {"type": "input_json_delta", "partial_json": '{"city":'}}),
            sse_event("content_block_delta", {"type": "content_block_delta", "index": 0,
                                              "delta": {"type": "input_json_delta", "partial_json": '"NYC"}'}}),
            sse_event("message_delta", {"type": "message_delta", "delta": {"stop_reason": "tool_use"},
                                        "usage": {"output_tokens": 12}}),
            sse_event("message_stop", {"type": "message_stop"}),
        ])
        recorder, http_client = fake_http(lambda request: httpx.Response(200, content=body.encode()))
        client = Client(api_key="k", http_client=http_client)

        with client.anthropic_chat_completion_stream(hello_request("claude")) as stream:
            response = accumulate(stream)

        assert recorder.last_json["stream"] is True
        call = response.choices[0].message.tool_calls[0]
        assert (call.id, call.function.name, call.function.arguments) == ("toolu_1", "get_weather", '{"city":"NYC"}')
        assert response.choices[0].finish_reason is FinishReason.TOOL_CALLS
        assert response.usage.total_tokens == 19


@pytest.mark.integration
class TestLiveEndpoint:
    """Runs against a real endpoint configured through AI_API_KEY / AI_BASE_URL."""

    def test_round_trip(self):
        model = "gpt-4o-mini"
        with Client() as client:
            response = client.chat_completion(ChatRequest(
                model=model,
                messages=[Message.user("Reply with the single word: pong")],
                max_tokens=5,
            ))

        assert response.choices
        assert isinstance(response.choices[0].message.content.text(), str)
