"""Page source contract consumed by the paginated collector."""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from newsfilter.collectors.plans import FetchPlan
from newsfilter.items import Item


@dataclass(frozen=True)
class PageRequest:
    """Parameters of one page request.

    Attributes:
        size: Number of records requested.
        cursor: Continuation cursor from the previous page, if any.
    """

    size: int
    cursor: str | None = None


@dataclass(frozen=True)
class FetchedPage:
    """One page of raw, source-specific records.

    Attributes:
        records: Raw records in upstream order.
        next_cursor: Continuation cursor returned by the upstream, if any.
        total_available: Upstream's count of matching records, if reported.
    """

    records: list[Any] = field(default_factory=list)
    next_cursor: str | None = None
    total_available: int | None = None


@runtime_checkable
class PageSource(Protocol):
    """A paginated upstream API.

    Implementations raise ``SourceApiError`` for typed API rejections and
    let transport or HTTP status errors propagate so the retry policy can
    classify them.
    """

    def fetch_page(self, plan: FetchPlan, request: PageRequest) -> FetchedPage:
        """Fetch one page of records for a plan.

        Args:
            plan: The plan being paginated.
            request: Page size and continuation cursor.

        Returns:
            The fetched page.

        Raises:
            SourceApiError: If the API rejects the request.
        """
        ...

    def record_id(self, record: Any) -> str:
        """Return the stable identifier of a raw record."""
        ...

    def record_cursor(self, record: Any) -> str | None:
        """Return a fallback cursor derived from a record's own timestamp."""
        ...

    def normalize(self, record: Any, plan: FetchPlan) -> Item | None:
        """Convert a raw record into an Item, or None to drop it."""
        ...
