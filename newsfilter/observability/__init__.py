"""Observability module for structured logging."""

from newsfilter.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    redact_secrets,
    redact_text,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "redact_secrets",
    "redact_text",
]
