"""
chatbridge Adapters Module

Dialect adapters that translate between the canonical chatbridge format
and each vendor's native wire format.
"""

import httpx

from ..config import ClientConfig
from .base import BaseAdapter
from .openai_adapter import OpenAIAdapter, build_openai_payload, parse_openai_response
from .anthropic_adapter import (
    AnthropicAdapter,
    build_anthropic_payload,
    parse_anthropic_response,
    convert_tool_choice,
)

__all__ = [
    "BaseAdapter",
    "OpenAIAdapter",
    "AnthropicAdapter",
    "build_openai_payload",
    "parse_openai_response",
    "build_anthropic_payload",
    "parse_anthropic_response",
    "convert_tool_choice",
    "get_adapter",
]


def get_adapter(provider: str, config: ClientConfig, http_client: httpx.Client) -> BaseAdapter:
    """
    Factory function to get the adapter for a dialect.

    Args:
        provider: Dialect name ("openai", "anthropic")
        config: Resolved client configuration
        http_client: Transport shared by the adapters of one client

    Returns:
        Configured adapter instance

    Raises:
        ValueError: If the dialect is not supported
    """
    adapters = {
        "openai": OpenAIAdapter,
        "anthropic": AnthropicAdapter,
    }

    adapter_class = adapters.get(provider.lower())
    if not adapter_class:
        raise ValueError(f"Unsupported provider: {provider}")

    return adapter_class(config, http_client)
