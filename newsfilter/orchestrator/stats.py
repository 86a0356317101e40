"""Run statistics and cost estimation."""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from newsfilter.config.schemas import PricingConfig
from newsfilter.items import ScoredItem


_TOKENS_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class RunStats:
    """Summary of one scoring run.

    Score statistics cover valid items only; token sums cover every
    scored item, failed ones contributing zero.
    """

    total_news: int = 0
    valid_news: int = 0
    filtered_count: int = 0
    filter_rate: float = 0.0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    duration: float = 0.0
    total_tokens: int = 0
    cache_hit_tokens: int = 0
    cache_hit_rate: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


def empty_stats() -> RunStats:
    """Stats of a run that scored nothing."""
    return RunStats()


def estimate_cost(
    input_tokens: int,
    output_tokens: int,
    cache_hit_tokens: int,
    pricing: PricingConfig,
) -> float:
    """Estimate the USD cost of a run.

    Cache-hit prompt tokens are billed at the cache-hit price and the
    remaining prompt tokens at the input price.

    Args:
        input_tokens: Prompt tokens, cache hits included.
        output_tokens: Completion tokens.
        cache_hit_tokens: Prompt tokens served from the cache.
        pricing: Prices per million tokens.

    Returns:
        Estimated cost in USD.
    """
    cache_miss_tokens = max(input_tokens - cache_hit_tokens, 0)
    cost = (
        cache_miss_tokens * pricing.input_per_million
        + cache_hit_tokens * pricing.cache_hit_per_million
        + output_tokens * pricing.output_per_million
    )
    return cost / _TOKENS_PER_MILLION


def calculate_stats(
    scored: Sequence[ScoredItem],
    filtered: Sequence[ScoredItem],
    duration: float,
    pricing: PricingConfig | None = None,
) -> RunStats:
    """Summarize a run.

    Args:
        scored: Every scored item.
        filtered: Items selected by the threshold.
        duration: Wall-clock seconds of the run.
        pricing: Prices for the cost estimate (defaults apply if omitted).

    Returns:
        RunStats for the run.
    """
    pricing = pricing or PricingConfig()
    valid_scores = [s.score for s in scored if s.is_valid]

    total_tokens = sum(s.token_usage.total_tokens for s in scored)
    cache_hit_tokens = sum(s.token_usage.cache_hit_tokens for s in scored)
    input_tokens = sum(s.token_usage.input_tokens for s in scored)
    output_tokens = sum(s.token_usage.output_tokens for s in scored)

    return RunStats(
        total_news=len(scored),
        valid_news=len(valid_scores),
        filtered_count=len(filtered),
        filter_rate=len(filtered) / len(scored) * 100 if scored else 0.0,
        average_score=sum(valid_scores) / len(valid_scores) if valid_scores else 0.0,
        highest_score=max(valid_scores, default=0.0),
        lowest_score=min(valid_scores, default=0.0),
        duration=duration,
        total_tokens=total_tokens,
        cache_hit_tokens=cache_hit_tokens,
        cache_hit_rate=cache_hit_tokens / total_tokens * 100 if total_tokens else 0.0,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        estimated_cost_usd=estimate_cost(
            input_tokens, output_tokens, cache_hit_tokens, pricing
        ),
    )
