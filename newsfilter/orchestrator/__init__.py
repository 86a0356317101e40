"""Scoring orchestration, threshold selection and run statistics."""

from newsfilter.orchestrator.orchestrator import Orchestrator, OrchestratorResult
from newsfilter.orchestrator.stats import (
    RunStats,
    calculate_stats,
    empty_stats,
    estimate_cost,
)
from newsfilter.orchestrator.threshold import (
    ThresholdPlan,
    apply_dynamic_threshold,
    build_threshold_plan,
)


__all__ = [
    "Orchestrator",
    "OrchestratorResult",
    "RunStats",
    "ThresholdPlan",
    "apply_dynamic_threshold",
    "build_threshold_plan",
    "calculate_stats",
    "empty_stats",
    "estimate_cost",
]
