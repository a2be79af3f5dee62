"""
chatbridge Observability Module

Structured logging with context injection.
"""

from .logging import (
    LogContext,
    JSONFormatter,
    StructuredLogger,
    setup_logging,
    get_logger,
)

__all__ = [
    "LogContext",
    "JSONFormatter",
    "StructuredLogger",
    "setup_logging",
    "get_logger",
]
