"""
chatbridge Core Module

Contains the canonical data models and the error taxonomy.
"""

from .models import (
    # Enums
    Role,
    FinishReason,
    FinishReasonValue,
    ContentKind,
    ContentType,

    # Content
    Content,
    ContentPart,
    ImageURL,

    # Messages
    Message,

    # Tool calling
    Tool,
    ToolCall,
    ToolChoice,
    ToolChoiceFunction,
    FunctionDefinition,
    FunctionCall,

    # Requests
    ChatRequest,

    # Responses
    ChatResponse,
    Choice,
    Usage,
    ErrorBody,
    StreamChunk,
    StreamChunkChoice,

    # Serialization
    content_to_json,
    content_from_json,
    message_to_dict,
    message_from_dict,
    request_to_dict,
    request_from_dict,
    response_to_dict,
    response_from_dict,
    chunk_to_dict,
    chunk_from_dict,
)

from .errors import (
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
    decode_json,
    handle_openai_error,
    handle_anthropic_error,
)

__all__ = [
    # Enums
    "Role",
    "FinishReason",
    "FinishReasonValue",
    "ContentKind",
    "ContentType",

    # Content
    "Content",
    "ContentPart",
    "ImageURL",

    # Messages
    "Message",

    # Tool calling
    "Tool",
    "ToolCall",
    "ToolChoice",
    "ToolChoiceFunction",
    "FunctionDefinition",
    "FunctionCall",

    # Requests
    "ChatRequest",

    # Responses
    "ChatResponse",
    "Choice",
    "Usage",
    "ErrorBody",
    "StreamChunk",
    "StreamChunkChoice",

    # Serialization
    "content_to_json",
    "content_from_json",
    "message_to_dict",
    "message_from_dict",
    "request_to_dict",
    "request_from_dict",
    "response_to_dict",
    "response_from_dict",
    "chunk_to_dict",
    "chunk_from_dict",

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
    "decode_json",
    "handle_openai_error",
    "handle_anthropic_error",
]
