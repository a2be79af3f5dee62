"""
chatbridge - Client Configuration

Resolves API key, base URL and timeout from explicit arguments and the
environment. Explicit arguments always win; among environment variables
the AI_* names take precedence over the OPENAI_* names.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .core.errors import MissingAPIKeyError


DEFAULT_TIMEOUT = 60.0

API_KEY_ENV_VARS = ("AI_API_KEY", "OPENAI_API_KEY")
BASE_URL_ENV_VARS = ("AI_BASE_URL", "OPENAI_BASE_URL")


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def normalize_base_url(url: Optional[str]) -> Optional[str]:
    """Trim trailing slashes; empty strings become None."""
    if not url:
        return None
    return url.rstrip("/") or None


def resolve_api_key(api_key: Optional[str] = None) -> Optional[str]:
    """Explicit key, then AI_API_KEY, then OPENAI_API_KEY."""
    return api_key or _first_env(API_KEY_ENV_VARS)


def resolve_base_url(base_url: Optional[str] = None) -> Optional[str]:
    """Explicit URL, then AI_BASE_URL, then OPENAI_BASE_URL."""
    return normalize_base_url(base_url or _first_env(BASE_URL_ENV_VARS))


@dataclass
class ClientConfig:
    """
    Resolved client configuration.

    `base_url` may be None: the OpenAI-style endpoint then fails on first
    use, while the Anthropic-style endpoint falls back to its default.
    `anthropic_base_url` overrides `base_url` for Anthropic calls only.
    """
    api_key: str
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    anthropic_base_url: Optional[str] = None

    @classmethod
    def resolve(
        cls,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        anthropic_base_url: Optional[str] = None,
    ) -> "ClientConfig":
        """
        Build a config from explicit values with environment fallback.

        Raises:
            MissingAPIKeyError: no key was given or found in the environment
        """
        key = resolve_api_key(api_key)
        if not key:
            raise MissingAPIKeyError()

        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        return cls(
            api_key=key,
            base_url=resolve_base_url(base_url),
            timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
            anthropic_base_url=normalize_base_url(anthropic_base_url),
        )
