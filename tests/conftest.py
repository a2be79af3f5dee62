"""
chatbridge - Pytest Configuration

Configures:
- Integration test markers (skip by default)
- Environment isolation for client configuration
- Fake HTTP transports and SSE bodies for unit tests
"""

import json
import os
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from chatbridge.streaming.decoders import StreamDecoder
from chatbridge.streaming.stream import Stream


# ============================================================
# Environment Configuration
# ============================================================

def _is_truthy(value: Optional[str]) -> bool:
    """Check if environment variable is truthy."""
    if value is None:
        return False
    return value.lower() in ("1", "true", "yes", "on")


RUN_INTEGRATION = _is_truthy(os.getenv("RUN_INTEGRATION"))

CONFIG_ENV_VARS = (
    "AI_API_KEY",
    "OPENAI_API_KEY",
    "AI_BASE_URL",
    "OPENAI_BASE_URL",
    "CHATBRIDGE_LOG_LEVEL",
    "CHATBRIDGE_LOG_FORMAT",
)


# ============================================================
# Pytest Markers
# ============================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires RUN_INTEGRATION=1)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless RUN_INTEGRATION=1."""
    skip_integration = pytest.mark.skip(
        reason="Integration test - set RUN_INTEGRATION=1 to run"
    )

    for item in items:
        if "integration" in item.keywords and not RUN_INTEGRATION:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def clean_env(request, monkeypatch):
    """Keep the developer's real keys and URLs out of unit tests."""
    if "integration" in request.keywords:
        return
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============================================================
# SSE helpers
# ============================================================

def sse_data(payload: Any) -> str:
    """A `data:` record for a JSON payload (or a raw string)."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return f"data: {text}\n\n"


def sse_event(event: str, payload: Dict[str, Any]) -> str:
    """An `event:` / `data:` record pair."""
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def openai_chunk(
    content: Optional[str] = None,
    finish_reason: Optional[str] = None,
    role: Optional[str] = None,
    tool_calls: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """An OpenAI-style chat.completion.chunk payload for choice 0."""
    delta: Dict[str, Any] = {}
    if role is not None:
        delta["role"] = role
    if content is not None:
        delta["content"] = content
    if tool_calls is not None:
        delta["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def make_stream(
    body: Iterable[str],
    decoder: StreamDecoder,
    max_line_size: Optional[int] = None
) -> Stream:
    """Build a Stream over an in-memory response, one transport chunk per string."""
    response = httpx.Response(200, content=iter([part.encode("utf-8") for part in body]))
    if max_line_size is None:
        return Stream(response, decoder)
    return Stream(response, decoder, max_line_size)


# ============================================================
# Fake transport
# ============================================================

class RecordingTransport:
    """
    httpx.MockTransport handler that records requests and replays a
    canned response.
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_http():
    """
    Factory for an httpx.Client backed by a RecordingTransport.

    Usage:
        recorder, http_client = fake_http(lambda req: httpx.Response(200, json={...}))
    """
    clients: List[httpx.Client] = []

    def factory(responder: Callable[[httpx.Request], httpx.Response]):
        recorder = RecordingTransport(responder)
        http_client = httpx.Client(transport=httpx.MockTransport(recorder))
        clients.append(http_client)
        return recorder, http_client

    yield factory

    for http_client in clients:
        http_client.close()
