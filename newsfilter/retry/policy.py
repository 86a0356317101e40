"""Retry policy with pure exponential backoff.

The policy holds no mutable state, so one instance can be shared by any
number of concurrent callers.
"""

import time
from collections.abc import Callable
from http import HTTPStatus
from typing import Annotated, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field


logger = structlog.get_logger()

T = TypeVar("T")

ShouldRetry = Callable[[BaseException], bool]
OnRetry = Callable[[BaseException, int], None]

_HTTP_SERVER_ERROR_MIN = 500
_HTTP_SERVER_ERROR_MAX = 600


def _status_code_of(error: BaseException) -> int | None:
    """Extract an HTTP status code carried by an exception, if any."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status_code", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def is_retryable_error(error: BaseException) -> bool:
    """Default retry classification.

    Retries transport failures (timeouts, resets, refused connections,
    DNS failures), HTTP 5xx and HTTP 429. Other 4xx responses and
    unrecognized errors are not retried.

    Args:
        error: The exception raised by the operation.

    Returns:
        True if the operation should be attempted again.
    """
    if isinstance(error, httpx.TimeoutException | httpx.NetworkError):
        return True
    if isinstance(error, ConnectionError | TimeoutError):
        return True

    status = _status_code_of(error)
    if status is None:
        return False
    if status == HTTPStatus.TOO_MANY_REQUESTS:
        return True
    return _HTTP_SERVER_ERROR_MIN <= status < _HTTP_SERVER_ERROR_MAX


def _log_retry(error: BaseException, attempt: int, max_retries: int) -> None:
    logger.warning(
        "retry_scheduled",
        attempt=attempt,
        max_retries=max_retries,
        error=str(error),
        error_type=type(error).__name__,
    )


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Delay before retry ``n`` (zero-indexed) is
    ``min(initial_delay_ms * 2 ** n, max_delay_ms)``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    initial_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 1000
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 30000

    def get_delay_ms(self, attempt: int) -> int:
        """Calculate delay before the next retry attempt.

        Args:
            attempt: Zero-indexed number of the attempt that just failed.

        Returns:
            Delay in milliseconds.
        """
        delay = self.initial_delay_ms * (2**attempt)
        return int(min(delay, self.max_delay_ms))

    def execute(
        self,
        operation: Callable[[], T],
        should_retry: ShouldRetry = is_retryable_error,
        on_retry: OnRetry | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        """Run an operation, retrying failures the classifier accepts.

        Args:
            operation: Zero-argument callable to run.
            should_retry: Classifier deciding whether an error is transient.
            on_retry: Hook called with ``(error, retry_number)`` before each
                wait. Defaults to a warning log line.
            sleep: Sleep function taking seconds (injectable for tests).

        Returns:
            The operation's return value.

        Raises:
            Exception: The last error, once retries are exhausted or the
                classifier rejects it.
        """
        for attempt in range(self.max_retries + 1):
            try:
                return operation()
            except Exception as error:
                if attempt == self.max_retries or not should_retry(error):
                    raise

                if on_retry is not None:
                    on_retry(error, attempt + 1)
                else:
                    _log_retry(error, attempt + 1, self.max_retries)

                sleep(self.get_delay_ms(attempt) / 1000.0)

        # range() always yields at least once and every path returns or raises
        msg = "retry loop exited without a result"
        raise RuntimeError(msg)


def retry_with_backoff(  # noqa: PLR0913
    operation: Callable[[], T],
    *,
    max_retries: int = 3,
    initial_delay_ms: int = 1000,
    max_delay_ms: int = 30000,
    should_retry: ShouldRetry = is_retryable_error,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` under a one-off RetryPolicy.

    Args:
        operation: Zero-argument callable to run.
        max_retries: Retries after the first attempt.
        initial_delay_ms: Delay before the first retry.
        max_delay_ms: Upper bound for any single delay.
        should_retry: Classifier deciding whether an error is transient.
        on_retry: Hook called before each wait.
        sleep: Sleep function taking seconds.

    Returns:
        The operation's return value.
    """
    policy = RetryPolicy(
        max_retries=max_retries,
        initial_delay_ms=initial_delay_ms,
        max_delay_ms=max_delay_ms,
    )
    return policy.execute(
        operation, should_retry=should_retry, on_retry=on_retry, sleep=sleep
    )
