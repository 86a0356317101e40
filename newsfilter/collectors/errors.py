"""Error types for paginated collection."""

from enum import Enum


class SourceApiErrorKind(str, Enum):
    """Classification of errors signalled by a source API.

    - RECOVERABLE: Request parameters rejected (e.g. page size too large);
      retrying with a smaller page may succeed.
    - FATAL: Authorization or permission failure; the plan cannot proceed.
    """

    RECOVERABLE = "RECOVERABLE"
    FATAL = "FATAL"


class SourceApiError(Exception):
    """Typed failure reported by a source API.

    Attributes:
        kind: Recoverable or fatal.
        code: Source-specific error code, if any.
        status_code: HTTP status code, if any.
    """

    def __init__(
        self,
        kind: SourceApiErrorKind,
        message: str,
        code: str | int | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            kind: Recoverable or fatal.
            message: Human-readable error message.
            code: Source-specific error code.
            status_code: HTTP status code.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.status_code = status_code

    @classmethod
    def recoverable(
        cls,
        message: str,
        code: str | int | None = None,
        status_code: int | None = None,
    ) -> "SourceApiError":
        """Create an error that page-size degradation may recover from."""
        return cls(SourceApiErrorKind.RECOVERABLE, message, code, status_code)

    @classmethod
    def fatal(
        cls,
        message: str,
        code: str | int | None = None,
        status_code: int | None = None,
    ) -> "SourceApiError":
        """Create an error that aborts the current plan."""
        return cls(SourceApiErrorKind.FATAL, message, code, status_code)

    @property
    def is_recoverable(self) -> bool:
        """Check if a smaller page size may succeed."""
        return self.kind == SourceApiErrorKind.RECOVERABLE

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
        }
