"""Sequential plan runner with a global budget and failure isolation."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from newsfilter.collectors.paginator import PaginatedCollector
from newsfilter.collectors.plans import FetchPlan, compute_global_budget
from newsfilter.collectors.state_machine import PlanState
from newsfilter.items import Item


logger = structlog.get_logger()


@dataclass
class PlanOutcome:
    """What happened to one plan during a run.

    Attributes:
        plan: The plan.
        items_collected: Items the plan contributed.
        state: Terminal pagination state, None when the plan never ran.
        skipped: Whether the plan was skipped (quota or budget used up).
        error: Error message when the plan failed.
    """

    plan: FetchPlan
    items_collected: int = 0
    state: PlanState | None = None
    skipped: bool = False
    error: str | None = None


@dataclass
class CollectionResult:
    """Result of running every plan of a source.

    Attributes:
        items: Collected items in plan order.
        budget: Global item budget of the run.
        outcomes: Per-plan outcomes in plan order.
    """

    items: list[Item] = field(default_factory=list)
    budget: int = 0
    outcomes: list[PlanOutcome] = field(default_factory=list)

    @property
    def plans_failed(self) -> int:
        """Count plans that raised."""
        return sum(1 for o in self.outcomes if o.error is not None)

    @property
    def plans_skipped(self) -> int:
        """Count plans skipped for quota or budget."""
        return sum(1 for o in self.outcomes if o.skipped)


class PlanRunner:
    """Runs plans one after another against a shared seen-id set.

    Usage is tracked per plan key, so the language plans of one account
    share that account's limit. Once the global budget is reached the
    remaining plans are skipped. A failing plan is logged and the runner
    moves on to the next one.
    """

    def __init__(self, collector: PaginatedCollector) -> None:
        """Initialize the runner.

        Args:
            collector: Paginated collector used for every plan.
        """
        self._collector = collector
        self._seen_ids: set[str] = set()
        self._log = logger.bind(component="collectors", subcomponent="runner")

    def run(
        self,
        plans: Sequence[FetchPlan],
        configured_total_limit: int | None = None,
    ) -> CollectionResult:
        """Run all plans.

        Args:
            plans: Plans in execution order.
            configured_total_limit: Configured global item cap.

        Returns:
            CollectionResult with the collected items and per-plan outcomes.
        """
        self._seen_ids.clear()
        budget = compute_global_budget(plans, configured_total_limit)
        result = CollectionResult(budget=budget)
        usage: dict[str, int] = {}

        self._log.info("plans_started", plan_count=len(plans), budget=budget)

        for plan in plans:
            outcome = PlanOutcome(plan=plan)
            result.outcomes.append(outcome)

            global_remaining = budget - len(result.items)
            if global_remaining <= 0:
                outcome.skipped = True
                self._log.debug("plan_skipped_budget_met", plan=plan.label)
                continue

            used = usage.get(plan.usage_key, 0)
            remaining_for_key = plan.limit - used
            if remaining_for_key <= 0:
                outcome.skipped = True
                self._log.debug(
                    "plan_skipped_quota_met",
                    plan=plan.label,
                    usage_key=plan.usage_key,
                )
                continue

            limit = min(remaining_for_key, global_remaining)
            try:
                collection = self._collector.collect_plan(plan, limit, self._seen_ids)
            except Exception as e:  # noqa: BLE001
                outcome.error = str(e)
                outcome.state = PlanState.ERROR
                self._log.error(
                    "plan_failed",
                    plan=plan.label,
                    query=plan.query,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            outcome.state = collection.state
            outcome.items_collected = len(collection.items)
            result.items.extend(collection.items)
            if collection.items:
                usage[plan.usage_key] = used + len(collection.items)

        self._log.info(
            "plans_completed",
            items=len(result.items),
            budget=budget,
            plans_failed=result.plans_failed,
            plans_skipped=result.plans_skipped,
        )
        return result
