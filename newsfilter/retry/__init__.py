"""Exponential backoff for unreliable network calls."""

from newsfilter.retry.policy import (
    RetryPolicy,
    is_retryable_error,
    retry_with_backoff,
)


__all__ = [
    "RetryPolicy",
    "is_retryable_error",
    "retry_with_backoff",
]
