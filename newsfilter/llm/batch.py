"""Concurrent scoring in sequential, bounded batches."""

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from newsfilter.config.schemas import FilterConfig
from newsfilter.items import Item
from newsfilter.llm.models import BatchScoreResult, ScoreResult
from newsfilter.llm.scorer import ScoringClient


logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 10
FAILED_REASON = "scoring failed"


class BatchScorer:
    """Scores items in batches of ``batch_size`` concurrent calls.

    Batches run one after another. Within a batch every call runs on its
    own worker thread and the batch waits for all of them; a failing call
    becomes a zero-score result instead of affecting its siblings.
    """

    def __init__(
        self,
        scoring_client: ScoringClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """Initialize the batch scorer.

        Args:
            scoring_client: Client scoring a single item.
            batch_size: Maximum concurrent scoring calls.

        Raises:
            ValueError: If batch_size is less than 1.
        """
        if batch_size < 1:
            msg = f"batch_size must be at least 1, got {batch_size}"
            raise ValueError(msg)
        self._scoring_client = scoring_client
        self._batch_size = batch_size
        self._log = logger.bind(component="llm", subcomponent="batch")

    @property
    def batch_size(self) -> int:
        """Get the batch size."""
        return self._batch_size

    def score_all(
        self,
        items: Sequence[Item],
        filter_config: FilterConfig,
    ) -> list[BatchScoreResult]:
        """Score every item.

        Args:
            items: Items to score.
            filter_config: Preferences passed to every call.

        Returns:
            One result per input item, in input order.
        """
        results: list[BatchScoreResult] = []
        batches = [
            items[i : i + self._batch_size]
            for i in range(0, len(items), self._batch_size)
        ]
        self._log.info(
            "batch_scoring_started",
            items=len(items),
            batches=len(batches),
            batch_size=self._batch_size,
        )

        for batch_idx, batch in enumerate(batches):
            batch_results = self._score_batch(batch, filter_config)
            failed = sum(1 for r in batch_results if r.error is not None)
            self._log.info(
                "batch_scored",
                batch=batch_idx + 1,
                batches=len(batches),
                items=len(batch),
                failed=failed,
            )
            results.extend(batch_results)

        return results

    def _score_batch(
        self,
        batch: Sequence[Item],
        filter_config: FilterConfig,
    ) -> list[BatchScoreResult]:
        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [
                executor.submit(self._scoring_client.score, item, filter_config)
                for item in batch
            ]
            return [
                self._settle(item, future)
                for item, future in zip(batch, futures, strict=True)
            ]

    def _settle(self, item: Item, future: Future[ScoreResult]) -> BatchScoreResult:
        try:
            result = future.result()
        except Exception as e:  # noqa: BLE001
            self._log.warning(
                "item_scoring_failed",
                item_id=item.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return BatchScoreResult(
                item_id=item.id,
                score=0.0,
                reason=FAILED_REASON,
                error=str(e) or type(e).__name__,
            )

        return BatchScoreResult(
            item_id=item.id,
            score=result.score,
            reason=result.reason,
            token_usage=result.token_usage,
        )
