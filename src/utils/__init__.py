"""Utilities: retry."""

from .retry import RetryableError, retry_with_exponential_backoff

__all__ = [
    "RetryableError",
    "retry_with_exponential_backoff",
]
