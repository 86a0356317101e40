"""Dynamic top-percentile threshold selection."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from newsfilter.config.schemas import ThresholdConfig
from newsfilter.items import ScoredItem


logger = structlog.get_logger()


@dataclass(frozen=True)
class ThresholdPlan:
    """How many valid items to keep.

    Attributes:
        min_count: Lower bound, at least 1.
        max_count: Upper bound, at least ``min_count``.
        target_count: Preferred count clamped into the bounds.
    """

    min_count: int
    max_count: int
    target_count: int


def build_threshold_plan(total_valid: int, config: ThresholdConfig) -> ThresholdPlan:
    """Compute selection bounds for a number of valid items.

    Args:
        total_valid: Number of valid scored items.
        config: Percentage bounds and preferred count.

    Returns:
        ThresholdPlan with ``target = clamp(preferred, min, max)``.
    """
    min_count = max(1, math.ceil(total_valid * config.min_percentage / 100))
    max_count = max(min_count, math.ceil(total_valid * config.max_percentage / 100))
    target_count = max(min_count, min(config.preferred_count, max_count))
    return ThresholdPlan(
        min_count=min_count,
        max_count=max_count,
        target_count=target_count,
    )


def apply_dynamic_threshold(
    scored: Sequence[ScoredItem],
    config: ThresholdConfig,
) -> list[ScoredItem]:
    """Select the top-scoring valid items and mark ``is_passed``.

    Valid items (no error, score above 0) are sorted by descending score;
    ties keep their input order. Every item in ``scored`` gets
    ``is_passed`` set to whether it was selected.

    Args:
        scored: All scored items of the run (mutated in place).
        config: Threshold bounds.

    Returns:
        Selected items, highest score first.
    """
    valid = [s for s in scored if s.is_valid]
    if not valid:
        logger.warning("threshold_no_valid_items", component="orchestrator")
        for s in scored:
            s.is_passed = False
        return []

    ranked = sorted(valid, key=lambda s: s.score, reverse=True)
    plan = build_threshold_plan(len(ranked), config)
    filtered = ranked[: plan.target_count]

    passed_ids = {s.item.id for s in filtered}
    for s in scored:
        s.is_passed = s.item.id in passed_ids

    logger.info(
        "threshold_applied",
        component="orchestrator",
        threshold=filtered[-1].score,
        selected=len(filtered),
        valid=len(ranked),
        min_count=plan.min_count,
        max_count=plan.max_count,
    )
    return filtered
