"""Data models for completion calls and scoring results."""

from dataclasses import dataclass, field

from newsfilter.items import TokenUsage


@dataclass(frozen=True)
class Completion:
    """Text returned by one completion call.

    Attributes:
        content: Message content of the first choice.
        usage: Token usage reported by the provider.
        model: Model that produced the completion.
    """

    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""


@dataclass(frozen=True)
class ScoreResult:
    """Relevance score for one item.

    Attributes:
        score: Score clamped to [0, 10].
        reason: Model rationale.
        token_usage: Usage of the scoring call.
    """

    score: float
    reason: str
    token_usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class BatchScoreResult:
    """Outcome of scoring one item inside a batch.

    Attributes:
        item_id: Identifier of the scored item.
        score: Score, 0 on failure.
        reason: Model rationale, or a failure marker.
        token_usage: Usage of the call (zeros on failure).
        error: Failure message, None on success.
    """

    item_id: str
    score: float
    reason: str
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    error: str | None = None
