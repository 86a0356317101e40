"""Single-item relevance scoring."""

import math
import time
from collections.abc import Callable

import structlog

from newsfilter.config.schemas import FilterConfig
from newsfilter.items import Item
from newsfilter.llm.errors import LlmResponseError
from newsfilter.llm.json_utils import parse_json_object
from newsfilter.llm.models import ScoreResult
from newsfilter.llm.prompts import build_system_prompt, build_user_prompt
from newsfilter.llm.protocols import CompletionClient
from newsfilter.retry import RetryPolicy


logger = structlog.get_logger()

MIN_SCORE = 0.0
MAX_SCORE = 10.0


class ScoringClient:
    """Scores one item with exactly one completion.

    Transient failures (timeouts, 429, 5xx) are retried by the retry
    policy. Output without a numeric ``score`` and a non-empty ``reason``
    raises ``LlmResponseError``; scores outside [0, 10] are clamped.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the scoring client.

        Args:
            completion_client: Client issuing the completion call.
            retry_policy: Retry policy for transient failures.
            sleep: Sleep function used between retries.
        """
        self._completion_client = completion_client
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._log = logger.bind(component="llm", subcomponent="scorer")

    def score(self, item: Item, filter_config: FilterConfig) -> ScoreResult:
        """Score one item against the reader preferences.

        Args:
            item: Item to score.
            filter_config: Preferences and worked examples.

        Returns:
            ScoreResult with the clamped score, reason and token usage.

        Raises:
            LlmResponseError: If the model output is malformed.
            LlmApiError: If the API keeps failing or rejects the request.
        """
        system_prompt = build_system_prompt(filter_config)
        user_prompt = build_user_prompt(item)

        completion = self._retry_policy.execute(
            lambda: self._completion_client.complete(system_prompt, user_prompt),
            sleep=self._sleep,
        )

        data = parse_json_object(completion.content)
        if data is None:
            msg = "Model output is not a JSON object"
            raise LlmResponseError(msg)

        raw_score = data.get("score")
        if isinstance(raw_score, bool) or not isinstance(raw_score, int | float):
            msg = "Model output is missing a numeric score"
            raise LlmResponseError(msg)
        if isinstance(raw_score, float) and not math.isfinite(raw_score):
            msg = "Model output score is not a finite number"
            raise LlmResponseError(msg)

        reason = data.get("reason")
        if not isinstance(reason, str) or not reason.strip():
            msg = "Model output is missing a reason"
            raise LlmResponseError(msg)

        score = float(raw_score)
        if not MIN_SCORE <= score <= MAX_SCORE:
            self._log.warning(
                "score_out_of_range_clamped",
                item_id=item.id,
                raw_score=score,
            )
            score = max(MIN_SCORE, min(MAX_SCORE, score))

        self._log.debug(
            "item_scored",
            item_id=item.id,
            score=score,
            total_tokens=completion.usage.total_tokens,
        )
        return ScoreResult(
            score=score,
            reason=reason.strip(),
            token_usage=completion.usage,
        )
