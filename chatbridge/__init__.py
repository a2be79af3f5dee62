"""
chatbridge Python SDK

One canonical chat-completion model for OpenAI-style and Anthropic-style
APIs, streaming included.

Quick Start:
    from chatbridge import Client, ChatRequest, Message

    client = Client(api_key="sk-...", base_url="https://api.openai.com/v1")

    # Simple chat
    response = client.chat_completion(ChatRequest(
        model="gpt-4o",
        messages=[Message.user("Hello!")]
    ))
    print(response.choices[0].message.content.text())

    # Same request against Anthropic
    response = client.anthropic_chat_completion(ChatRequest(
        model="claude-3-5-sonnet-latest",
        messages=[Message.user("Hello!")]
    ))

    # With streaming
    with client.chat_completion_stream(request) as stream:
        for chunk in stream:
            print(chunk.choices[0].delta.content.text(), end="", flush=True)
"""

from .client import Client
from .config import ClientConfig
from .core.models import (
    Role,
    FinishReason,
    ContentKind,
    ContentType,
    Content,
    ContentPart,
    ImageURL,
    Message,
    Tool,
    ToolCall,
    ToolChoice,
    ToolChoiceFunction,
    FunctionDefinition,
    FunctionCall,
    ChatRequest,
    ChatResponse,
    Choice,
    Usage,
    ErrorBody,
    StreamChunk,
    StreamChunkChoice,
)
from .core.errors import (
    ChatBridgeError,
    APIError,
    DecodeError,
    TranslationError,
    StreamLineTooLongError,
    EmptyResponseError,
    StreamClosedError,
    ConfigurationError,
    MissingAPIKeyError,
    MissingBaseURLError,
)
from .streaming import Stream, StreamAccumulator, merge_deltas, accumulate

__version__ = "0.1.0"

__all__ = [
    # Client
    "Client",
    "ClientConfig",
    # Models
    "Role",
    "FinishReason",
    "ContentKind",
    "ContentType",
    "Content",
    "ContentPart",
    "ImageURL",
    "Message",
    "Tool",
    "ToolCall",
    "ToolChoice",
    "ToolChoiceFunction",
    "FunctionDefinition",
    "FunctionCall",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "Usage",
    "ErrorBody",
    "StreamChunk",
    "StreamChunkChoice",
    # Errors
    "ChatBridgeError",
    "APIError",
    "DecodeError",
    "TranslationError",
    "StreamLineTooLongError",
    "EmptyResponseError",
    "StreamClosedError",
    "ConfigurationError",
    "MissingAPIKeyError",
    "MissingBaseURLError",
    # Streaming
    "Stream",
    "StreamAccumulator",
    "merge_deltas",
    "accumulate",
]
