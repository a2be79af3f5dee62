"""
chatbridge - Synchronous Client

Main client for chat completions against OpenAI-style and Anthropic-style
endpoints through one canonical model.
"""

from __future__ import annotations

from typing import Optional

import httpx

from .adapters import get_adapter
from .config import ClientConfig
from .core.models import ChatRequest, ChatResponse
from .observability.logging import get_logger
from .streaming.stream import Stream

logger = get_logger(__name__)


class Client:
    """
    chatbridge Python Client.

    Args:
        api_key: API key. If not provided, reads AI_API_KEY, then OPENAI_API_KEY.
        base_url: Base URL for the API. If not provided, reads AI_BASE_URL,
            then OPENAI_BASE_URL. Trailing slashes are trimmed.
        timeout: Request timeout in seconds. Defaults to 60. Sent with every
            request, including those through an injected http_client.
        http_client: Optional httpx.Client to send requests with. A client
            passed in is neither modified nor closed by this object.
        anthropic_base_url: Base URL used for Anthropic-style calls only.
            Defaults to base_url, then https://api.anthropic.com.

    Example:
        >>> client = Client(api_key="sk-...", base_url="https://api.openai.com/v1")
        >>> response = client.chat_completion(ChatRequest(
        ...     model="gpt-4o",
        ...     messages=[Message.user("Hello!")]
        ... ))
        >>> print(response.choices[0].message.content.text())

    Raises:
        MissingAPIKeyError: no API key was given or found in the environment
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        anthropic_base_url: Optional[str] = None,
    ):
        self.config = ClientConfig.resolve(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            anthropic_base_url=anthropic_base_url,
        )

        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=self.config.timeout)
        self._http_client = http_client

        self._openai = get_adapter("openai", self.config, http_client)
        self._anthropic = get_adapter("anthropic", self.config, http_client)

        logger.debug(
            "Client initialized",
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            injected_transport=not self._owns_client
        )

    @property
    def base_url(self) -> Optional[str]:
        """Base URL for OpenAI-style requests."""
        return self.config.base_url

    # ============================================================
    # OpenAI-style endpoint
    # ============================================================

    def chat_completion(self, request: ChatRequest) -> ChatResponse:
        """
        Create a chat completion on an OpenAI-style endpoint.

        Raises:
            MissingBaseURLError: no base URL is configured
            APIError: the API answered with an error
            EmptyResponseError: the response had no choices
            DecodeError: the response could not be decoded
            httpx.HTTPError: transport failure
        """
        return self._openai.chat_completion(request)

    def chat_completion_stream(self, request: ChatRequest) -> Stream:
        """Stream a chat completion from an OpenAI-style endpoint."""
        return self._openai.chat_completion_stream(request)

    # ============================================================
    # Anthropic-style endpoint
    # ============================================================

    def anthropic_chat_completion(self, request: ChatRequest) -> ChatResponse:
        """
        Create a chat completion on Anthropic's Messages API.

        The canonical request is translated to Anthropic's format and the
        answer translated back, so callers handle both dialects the same way.

        Raises:
            TranslationError: the request cannot be expressed for Anthropic
            APIError: the API answered with an error
            DecodeError: the response could not be decoded
            httpx.HTTPError: transport failure
        """
        return self._anthropic.chat_completion(request)

    def anthropic_chat_completion_stream(self, request: ChatRequest) -> Stream:
        """Stream a chat completion from Anthropic's Messages API."""
        return self._anthropic.chat_completion_stream(request)

    def close(self):
        """Close the HTTP client if this object created it."""
        if self._owns_client:
            self._http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
