"""
chatbridge - Provider Adapter Base

Abstract base class for dialect adapters.
Each dialect (OpenAI-style, Anthropic-style) implements this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx

from ..config import ClientConfig
from ..core.errors import (
    APIError,
    MAX_ERROR_BODY_SIZE,
    read_error_failed,
)
from ..core.models import ChatRequest, ChatResponse
from ..observability.logging import LogContext, get_logger
from ..streaming.decoders import StreamDecoder
from ..streaming.stream import Stream

logger = get_logger(__name__)


class BaseAdapter(ABC):
    """
    Abstract base class for dialect adapters.

    Each adapter must implement:
    - build_payload: canonical request -> vendor JSON body
    - parse_response: vendor response body -> canonical response
    - create_decoder: a fresh stream decoder for one streaming call
    - handle_error: vendor error response -> APIError
    - base_url / headers: where and how to send requests

    The shared plumbing here sends the request, turns non-2xx answers
    into APIError and wraps streaming bodies in a Stream. Transport
    failures from httpx propagate unchanged; nothing is retried.
    """

    provider: str
    chat_path: str

    def __init__(self, config: ClientConfig, http_client: httpx.Client):
        self.config = config
        self.http_client = http_client

    @abstractmethod
    def build_payload(self, request: ChatRequest, stream: bool) -> Dict[str, Any]:
        pass

    @abstractmethod
    def parse_response(self, body: bytes, status_code: int) -> ChatResponse:
        pass

    @abstractmethod
    def create_decoder(self) -> StreamDecoder:
        pass

    @abstractmethod
    def handle_error(self, status_code: int, body: bytes) -> APIError:
        pass

    @abstractmethod
    def base_url(self) -> str:
        pass

    @abstractmethod
    def headers(self) -> Dict[str, str]:
        pass

    def chat_completion(self, request: ChatRequest) -> ChatResponse:
        """
        Send a non-streaming chat completion.

        Raises:
            APIError: the vendor answered with an error
            EmptyResponseError: the answer had no choices
            DecodeError: the answer could not be decoded
            httpx.HTTPError: transport failure
        """
        payload = self.build_payload(request, stream=False)

        token = LogContext.set_current(LogContext(provider=self.provider, model=request.model))
        try:
            response = self._send(payload, stream=False)
            try:
                if not response.is_success:
                    raise self._error_from_response(response)
                body = response.content
            finally:
                response.close()
        finally:
            LogContext.reset(token)

        return self.parse_response(body, response.status_code)

    def chat_completion_stream(self, request: ChatRequest) -> Stream:
        """
        Send a streaming chat completion.

        The returned Stream owns the connection; close it when done.
        """
        payload = self.build_payload(request, stream=True)

        token = LogContext.set_current(LogContext(provider=self.provider, model=request.model))
        try:
            response = self._send(payload, stream=True)
            if not response.is_success:
                try:
                    raise self._error_from_response(response)
                finally:
                    response.close()
        finally:
            LogContext.reset(token)

        return Stream(response, self.create_decoder())

    # ============================================================
    # Helper methods for subclasses
    # ============================================================

    def _send(self, payload: Dict[str, Any], stream: bool) -> httpx.Response:
        url = self.base_url() + self.chat_path
        logger.debug("Sending chat request", endpoint=url, stream=stream)

        http_request = self.http_client.build_request(
            "POST",
            url,
            json=payload,
            headers=self.headers(),
            timeout=self.config.timeout
        )
        return self.http_client.send(http_request, stream=stream)

    def _error_from_response(self, response: httpx.Response) -> APIError:
        try:
            body = self._read_error_body(response)
        except httpx.HTTPError as e:
            return read_error_failed(response.status_code, e)

        error = self.handle_error(response.status_code, body)
        logger.warning(
            "Provider returned error",
            status_code=error.status_code,
            error_type=error.type,
            error_code=error.code
        )
        return error

    @staticmethod
    def _read_error_body(response: httpx.Response) -> bytes:
        body = bytearray()
        for chunk in response.iter_bytes():
            body.extend(chunk)
            if len(body) >= MAX_ERROR_BODY_SIZE:
                break
        return bytes(body[:MAX_ERROR_BODY_SIZE])

