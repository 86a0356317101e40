"""Scoring pipeline: validate, batch-score, merge, select, summarize."""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from newsfilter.config.schemas import FilterConfig, PricingConfig
from newsfilter.items import Item, ScoredItem
from newsfilter.items.validation import item_errors
from newsfilter.llm import BatchScorer
from newsfilter.orchestrator.stats import RunStats, calculate_stats, empty_stats
from newsfilter.orchestrator.threshold import apply_dynamic_threshold


logger = structlog.get_logger()

INVALID_REASON = "invalid item"
UNSCORED_REASON = "unscored"


@dataclass
class OrchestratorResult:
    """Output of one run, handed to the rendering layer.

    Attributes:
        scored: Every input item with its score, in input order.
        filtered: Selected items, highest score first.
        stats: Run statistics.
    """

    scored: list[ScoredItem] = field(default_factory=list)
    filtered: list[ScoredItem] = field(default_factory=list)
    stats: RunStats = field(default_factory=empty_stats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scored": [s.to_dict() for s in self.scored],
            "filtered": [s.to_dict() for s in self.filtered],
            "stats": self.stats.to_dict(),
        }


class Orchestrator:
    """Runs the scoring and selection pipeline over collected items."""

    def __init__(
        self,
        batch_scorer: BatchScorer,
        pricing: PricingConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            batch_scorer: Scorer for the valid items.
            pricing: Token prices for the cost estimate.
            clock: Monotonic clock in seconds (injectable for tests).
        """
        self._batch_scorer = batch_scorer
        self._pricing = pricing or PricingConfig()
        self._clock = clock
        self._log = logger.bind(component="orchestrator")

    def run(
        self,
        items: Sequence[Item],
        filter_config: FilterConfig,
    ) -> OrchestratorResult:
        """Score items and select the top share.

        Args:
            items: Collected items.
            filter_config: Reader preferences and threshold bounds.

        Returns:
            OrchestratorResult with every item scored, the selection and stats.
        """
        if not items:
            self._log.warning("orchestrator_empty_input")
            return OrchestratorResult()

        started = self._clock()
        self._log.info("orchestrator_started", items=len(items))

        errors_per_item = [item_errors(item) for item in items]
        valid_items = [
            item
            for item, errors in zip(items, errors_per_item, strict=True)
            if not errors
        ]
        invalid_count = len(items) - len(valid_items)
        if invalid_count:
            self._log.warning("invalid_items_excluded", count=invalid_count)

        results = self._batch_scorer.score_all(valid_items, filter_config)
        results_by_id = {r.item_id: r for r in results}

        scored: list[ScoredItem] = []
        for item, errors in zip(items, errors_per_item, strict=True):
            if errors:
                scored.append(
                    ScoredItem(
                        item=item,
                        reason=INVALID_REASON,
                        error="; ".join(errors),
                    )
                )
                continue

            result = results_by_id.get(item.id)
            if result is None:
                self._log.warning("item_unscored", item_id=item.id, title=item.title)
                scored.append(
                    ScoredItem(item=item, reason=UNSCORED_REASON, error=UNSCORED_REASON)
                )
                continue

            scored.append(
                ScoredItem(
                    item=item,
                    score=result.score,
                    reason=result.reason,
                    token_usage=result.token_usage,
                    error=result.error,
                )
            )

        filtered = apply_dynamic_threshold(scored, filter_config.threshold)
        stats = calculate_stats(
            scored,
            filtered,
            duration=self._clock() - started,
            pricing=self._pricing,
        )

        self._log.info(
            "orchestrator_completed",
            total=stats.total_news,
            valid=stats.valid_news,
            filtered=stats.filtered_count,
            filter_rate=round(stats.filter_rate, 1),
            average_score=round(stats.average_score, 2),
            duration_s=round(stats.duration, 2),
            total_tokens=stats.total_tokens,
            estimated_cost_usd=round(stats.estimated_cost_usd, 6),
        )
        return OrchestratorResult(scored=scored, filtered=filtered, stats=stats)
