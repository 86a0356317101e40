"""LLM relevance scoring."""

from newsfilter.llm.batch import BatchScorer
from newsfilter.llm.client import ChatCompletionClient
from newsfilter.llm.errors import LlmApiError, LlmResponseError
from newsfilter.llm.models import BatchScoreResult, Completion, ScoreResult
from newsfilter.llm.protocols import CompletionClient
from newsfilter.llm.scorer import ScoringClient


__all__ = [
    "BatchScoreResult",
    "BatchScorer",
    "ChatCompletionClient",
    "Completion",
    "CompletionClient",
    "LlmApiError",
    "LlmResponseError",
    "ScoreResult",
    "ScoringClient",
]
