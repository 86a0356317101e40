"""Paginated, quota-aware collection of items from search APIs."""

from newsfilter.collectors.errors import SourceApiError, SourceApiErrorKind
from newsfilter.collectors.paginator import (
    PaginatedCollector,
    PlanCollection,
    page_size_candidates,
)
from newsfilter.collectors.plans import (
    FetchPlan,
    PlanDefaults,
    PlanType,
    append_language,
    build_fetch_plans,
    compute_global_budget,
)
from newsfilter.collectors.protocols import FetchedPage, PageRequest, PageSource
from newsfilter.collectors.runner import CollectionResult, PlanOutcome, PlanRunner
from newsfilter.collectors.state_machine import (
    PlanState,
    PlanStateMachine,
    PlanStateTransitionError,
)
from newsfilter.collectors.twitter import TwitterCollector, TwitterSearchSource


__all__ = [
    "CollectionResult",
    "FetchPlan",
    "FetchedPage",
    "PageRequest",
    "PageSource",
    "PaginatedCollector",
    "PlanCollection",
    "PlanDefaults",
    "PlanOutcome",
    "PlanRunner",
    "PlanState",
    "PlanStateMachine",
    "PlanStateTransitionError",
    "PlanType",
    "SourceApiError",
    "SourceApiErrorKind",
    "TwitterCollector",
    "TwitterSearchSource",
    "append_language",
    "build_fetch_plans",
    "compute_global_budget",
    "page_size_candidates",
]
