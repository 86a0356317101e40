"""Structured logging configuration for pipeline runs."""

import logging
import re
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any, TextIO

import structlog


REDACTED_VALUE = "[REDACTED]"

# Event keys whose values are credentials
SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "authorization",
        "bearer_token",
        "deepseek_api_key",
        "twitter_bearer_token",
    }
)

_BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
_API_KEY_PATTERN = re.compile(r"\bsk-[A-Za-z0-9_-]{6,}")


def redact_text(text: str) -> str:
    """Mask bearer tokens and ``sk-`` style API keys inside free text.

    Error messages and response previews can echo request headers back,
    so they are scrubbed before rendering.

    Args:
        text: Text that may contain credentials.

    Returns:
        Text with credentials replaced by ``[REDACTED]``.
    """
    masked = _BEARER_PATTERN.sub(rf"\1{REDACTED_VALUE}", text)
    return _API_KEY_PATTERN.sub(REDACTED_VALUE, masked)


def _redact_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS:
        return REDACTED_VALUE
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, Mapping):
        return {k: _redact_value(str(k), v) for k, v in value.items()}
    return value


def redact_secrets(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor that keeps credentials out of log lines."""
    for key, value in list(event_dict.items()):
        event_dict[key] = _redact_value(key, value)
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for the pipeline.

    JSON lines by default; the console renderer is meant for local runs.
    Every line passes through ``redact_secrets`` before rendering.

    Args:
        level: Minimum log level.
        output: Stream receiving log lines.
        json_format: Render JSON instead of colored console output.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through the stdlib logger
    logging.basicConfig(format="%(message)s", stream=output, level=level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def bind_run_context(run_id: str, command: str | None = None) -> None:
    """Attach the run identifier (and CLI command) to every later log line."""
    context: dict[str, str] = {"run_id": run_id}
    if command:
        context["command"] = command
    structlog.contextvars.bind_contextvars(**context)


def clear_run_context() -> None:
    """Remove the run identifier and command from the log context."""
    structlog.contextvars.unbind_contextvars("run_id", "command")
