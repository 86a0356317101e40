"""Unit tests for batch scoring."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from newsfilter.config.schemas import FilterConfig
from newsfilter.items import Item, TokenUsage
from newsfilter.llm import BatchScorer, ScoreResult
from newsfilter.llm.batch import FAILED_REASON
from tests.helpers.items import make_filter_config, make_item


def _scoring_client(fail_ids: frozenset[str] = frozenset()) -> MagicMock:
    def score(item: Item, filter_config: FilterConfig) -> ScoreResult:
        if item.id in fail_ids:
            msg = f"model refused {item.id}"
            raise RuntimeError(msg)
        return ScoreResult(
            score=float(len(item.id)),
            reason=f"reason {item.id}",
            token_usage=TokenUsage(total_tokens=10),
        )

    client = MagicMock()
    client.score.side_effect = score
    return client


class TestBatchScorer:
    """Tests for BatchScorer.score_all."""

    def test_results_in_input_order(self) -> None:
        """Results line up with the input items."""
        items = [make_item(f"item-{'x' * i}") for i in range(7)]
        scorer = BatchScorer(_scoring_client(), batch_size=3)

        results = scorer.score_all(items, make_filter_config())

        assert [r.item_id for r in results] == [i.id for i in items]
        assert [r.score for r in results] == [float(len(i.id)) for i in items]

    def test_failure_isolated(self) -> None:
        """One failing call yields a zero-score result, the rest succeed."""
        items = [make_item(f"item-{i}") for i in range(5)]
        scorer = BatchScorer(_scoring_client(frozenset({"item-2"})), batch_size=2)

        results = scorer.score_all(items, make_filter_config())

        assert len(results) == 5
        failed = [r for r in results if r.error is not None]
        assert len(failed) == 1
        assert failed[0].item_id == "item-2"
        assert failed[0].score == 0.0
        assert failed[0].reason == FAILED_REASON
        assert failed[0].error == "model refused item-2"
        assert failed[0].token_usage == TokenUsage()

    def test_one_failure_across_multiple_batches(self) -> None:
        """Every item gets exactly one result over several full batches."""
        items = [make_item(f"item-{i}") for i in range(23)]
        scorer = BatchScorer(_scoring_client(frozenset({"item-17"})), batch_size=10)

        results = scorer.score_all(items, make_filter_config())

        assert len(results) == 23
        assert [r.item_id for r in results if r.error] == ["item-17"]
        assert all(r.score > 0 for r in results if r.error is None)

    def test_empty_input(self) -> None:
        """No items means no calls."""
        client = _scoring_client()

        assert BatchScorer(client).score_all([], make_filter_config()) == []
        client.score.assert_not_called()

    def test_calls_within_batch_run_concurrently(self) -> None:
        """Every call of a full batch is in flight at the same time."""
        batch_size = 4
        barrier = threading.Barrier(batch_size, timeout=2)
        lock = threading.Lock()
        active = 0
        peak = 0

        def score(item: Item, filter_config: FilterConfig) -> ScoreResult:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            barrier.wait()
            with lock:
                active -= 1
            return ScoreResult(score=5.0, reason="r")

        client = MagicMock()
        client.score.side_effect = score
        items = [make_item(f"item-{i}") for i in range(2 * batch_size)]

        results = BatchScorer(client, batch_size=batch_size).score_all(
            items, make_filter_config()
        )

        assert [r.error for r in results] == [None] * len(items)
        assert peak == batch_size

    def test_batches_run_one_after_another(self) -> None:
        """No call of a batch starts before the previous batch settled."""
        batch_size = 3
        lock = threading.Lock()
        events: list[tuple[str, int]] = []

        def score(item: Item, filter_config: FilterConfig) -> ScoreResult:
            batch = int(item.id.removeprefix("item-")) // batch_size
            with lock:
                events.append(("start", batch))
            time.sleep(0.01 * (batch_size - batch))
            with lock:
                events.append(("end", batch))
            return ScoreResult(score=5.0, reason="r")

        client = MagicMock()
        client.score.side_effect = score
        items = [make_item(f"item-{i}") for i in range(3 * batch_size)]

        BatchScorer(client, batch_size=batch_size).score_all(
            items, make_filter_config()
        )

        assert len(events) == 2 * len(items)
        for batch in range(1, 3):
            first_start = events.index(("start", batch))
            previous_ends = [
                i for i, event in enumerate(events) if event == ("end", batch - 1)
            ]
            assert len(previous_ends) == batch_size
            assert max(previous_ends) < first_start

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_invalid_batch_size(self, batch_size: int) -> None:
        """Batch size must be positive."""
        with pytest.raises(ValueError, match="batch_size"):
            BatchScorer(MagicMock(), batch_size=batch_size)
