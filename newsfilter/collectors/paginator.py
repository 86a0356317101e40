"""Quota-aware, deduplicating pagination over a page source."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from newsfilter.collectors.constants import (
    DEGRADED_PAGE_SIZES,
    MAX_RESULTS_PER_PAGE,
    MIN_RESULTS_PER_PAGE,
)
from newsfilter.collectors.errors import SourceApiError
from newsfilter.collectors.plans import FetchPlan
from newsfilter.collectors.protocols import FetchedPage, PageRequest, PageSource
from newsfilter.collectors.state_machine import PlanState, PlanStateMachine
from newsfilter.items import Item
from newsfilter.retry import RetryPolicy


logger = structlog.get_logger()


@dataclass
class PlanCollection:
    """Items collected by one plan.

    Attributes:
        plan: The plan that ran.
        items: Accepted items, in upstream order.
        state: Terminal state of the successful attempt.
        page_size: Page size that succeeded.
        pages_fetched: Pages fetched by the successful attempt.
        duplicates_skipped: Records dropped because their id was already seen.
        records_dropped: Records the source refused to normalize.
    """

    plan: FetchPlan
    items: list[Item] = field(default_factory=list)
    state: PlanState = PlanState.EXHAUSTED
    page_size: int = 0
    pages_fetched: int = 0
    duplicates_skipped: int = 0
    records_dropped: int = 0


def page_size_candidates(
    limit: int,
    initial_size: int = MAX_RESULTS_PER_PAGE,
    min_page_size: int = MIN_RESULTS_PER_PAGE,
) -> list[int]:
    """Page sizes to try for a plan, largest first.

    The initial size is followed by the fixed degradation ladder. Every
    entry is capped by the plan limit (never below the minimum page size)
    and by the initial size; duplicates are removed.

    Args:
        limit: Effective limit of the plan.
        initial_size: Page size of the first attempt.
        min_page_size: Smallest page the upstream accepts.

    Returns:
        Distinct page sizes in descending order.
    """
    cap = min(initial_size, max(limit, min_page_size))
    sizes = {min(size, cap) for size in (initial_size, *DEGRADED_PAGE_SIZES)}
    return sorted((s for s in sizes if s > 0), reverse=True)


class PaginatedCollector:
    """Paginates one plan at a time against a page source.

    Each page fetch goes through the retry policy. A recoverable API
    rejection restarts the plan with the next smaller page size; a fatal
    one aborts the plan. Ids accepted by an attempt are only added to the
    caller's seen set once the attempt finishes, so a restarted attempt
    can accept them again.
    """

    def __init__(
        self,
        source: PageSource,
        retry_policy: RetryPolicy | None = None,
        max_page_size: int = MAX_RESULTS_PER_PAGE,
        min_page_size: int = MIN_RESULTS_PER_PAGE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the collector.

        Args:
            source: Upstream page source.
            retry_policy: Retry policy for page fetches.
            max_page_size: Page size of the first attempt.
            min_page_size: Smallest page the upstream accepts.
            sleep: Sleep function used between retries.
        """
        self._source = source
        self._retry_policy = retry_policy or RetryPolicy()
        self._max_page_size = max_page_size
        self._min_page_size = min_page_size
        self._sleep = sleep
        self._log = logger.bind(component="collectors", subcomponent="paginator")

    def collect_plan(
        self,
        plan: FetchPlan,
        limit: int,
        seen_ids: set[str],
    ) -> PlanCollection:
        """Collect up to ``limit`` unseen items for a plan.

        Args:
            plan: Plan to paginate.
            limit: Effective item limit for this run of the plan.
            seen_ids: Run-wide ids already collected; updated on success.

        Returns:
            The plan's collected items.

        Raises:
            SourceApiError: On a fatal rejection, or the last recoverable
                rejection once every page size failed.
            Exception: Any fetch error the retry policy gave up on.
        """
        log = self._log.bind(plan=plan.label, query=plan.query, limit=limit)
        candidates = page_size_candidates(
            limit, self._max_page_size, self._min_page_size
        )
        last_error: SourceApiError | None = None

        for page_size in candidates:
            try:
                collection = self._collect_attempt(plan, limit, page_size, seen_ids)
            except SourceApiError as e:
                if not e.is_recoverable:
                    log.warning(
                        "plan_fatal_api_error",
                        page_size=page_size,
                        **e.to_dict(),
                    )
                    raise
                last_error = e
                log.warning(
                    "page_size_degraded",
                    page_size=page_size,
                    **e.to_dict(),
                )
                continue

            log.info(
                "plan_collected",
                state=collection.state.value,
                items=len(collection.items),
                page_size=page_size,
                pages=collection.pages_fetched,
                duplicates_skipped=collection.duplicates_skipped,
            )
            return collection

        if last_error is not None:
            raise last_error
        return PlanCollection(plan=plan)

    def _fetch(self, plan: FetchPlan, request: PageRequest) -> FetchedPage:
        return self._retry_policy.execute(
            lambda: self._source.fetch_page(plan, request),
            sleep=self._sleep,
        )

    def _collect_attempt(
        self,
        plan: FetchPlan,
        limit: int,
        page_size: int,
        seen_ids: set[str],
    ) -> PlanCollection:
        machine = PlanStateMachine(plan.label)
        collection = PlanCollection(plan=plan, page_size=page_size)
        accepted_ids: set[str] = set()
        cursor: str | None = None

        try:
            while True:
                remaining = limit - len(collection.items)
                request = PageRequest(
                    size=min(page_size, max(remaining, self._min_page_size)),
                    cursor=cursor,
                )
                page = self._fetch(plan, request)
                collection.pages_fetched += 1

                if not page.records:
                    machine.to_exhausted()
                    break

                self._accept_records(
                    page, plan, limit, seen_ids, accepted_ids, collection
                )

                if len(collection.items) >= limit:
                    machine.to_quota_met()
                    break

                next_cursor = page.next_cursor or self._source.record_cursor(
                    page.records[-1]
                )
                if not next_cursor or next_cursor == cursor:
                    machine.to_exhausted()
                    break

                cursor = next_cursor
                machine.to_fetching()
        except Exception:
            machine.to_error()
            raise

        seen_ids.update(accepted_ids)
        collection.state = machine.state
        return collection

    def _accept_records(  # noqa: PLR0913
        self,
        page: FetchedPage,
        plan: FetchPlan,
        limit: int,
        seen_ids: set[str],
        accepted_ids: set[str],
        collection: PlanCollection,
    ) -> None:
        for record in page.records:
            if len(collection.items) >= limit:
                return

            record_id = self._source.record_id(record)
            if record_id in seen_ids or record_id in accepted_ids:
                collection.duplicates_skipped += 1
                continue

            item = self._source.normalize(record, plan)
            if item is None:
                collection.records_dropped += 1
                continue

            accepted_ids.add(record_id)
            collection.items.append(item)
