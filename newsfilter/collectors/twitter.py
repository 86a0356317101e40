"""Twitter API v2 recent-search collector."""

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from http import HTTPStatus
from typing import Any

import httpx
import structlog

from newsfilter.collectors.constants import (
    DEFAULT_FALLBACK_QUERIES,
    MAX_RESULTS_PER_PAGE,
    MAX_SINCE_HOURS,
    MIN_RESULTS_PER_PAGE,
)
from newsfilter.collectors.errors import SourceApiError
from newsfilter.collectors.paginator import PaginatedCollector
from newsfilter.collectors.plans import FetchPlan, PlanDefaults, build_fetch_plans
from newsfilter.collectors.protocols import FetchedPage, PageRequest
from newsfilter.collectors.runner import PlanRunner
from newsfilter.config.schemas import TwitterSourceConfig
from newsfilter.items import Item, ItemSource, validate_items
from newsfilter.recency import RecencyWindow, to_datetime
from newsfilter.retry import RetryPolicy


logger = structlog.get_logger()

TWITTER_API_BASE_URL = "https://api.twitter.com"
RECENT_SEARCH_PATH = "/2/tweets/search/recent"
TWEET_URL_TEMPLATE = "https://twitter.com/{username}/status/{tweet_id}"

TWEET_FIELDS = "created_at,lang,source,public_metrics,referenced_tweets,entities"
USER_FIELDS = "username,name,profile_image_url,verified,description,location"
EXPANSIONS = "author_id"

MAX_SUMMARY_LENGTH = 400
MIN_SUMMARY_LENGTH = 10
MAX_TITLE_LENGTH = 120
TRUNCATED_TITLE_LENGTH = 117

_FATAL_STATUS_CODES = {HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN}

# Pictographic blocks, dingbats, variation selector and zero-width joiner
_EMOJI_PATTERN = re.compile(
    "["
    "\U0001f000-\U0001faff"
    "\U00002600-\U000027bf"
    "\U00002300-\U000023ff"
    "\U00002b00-\U00002bff"
    "\U0000fe0f"
    "\U0000200d"
    "]+"
)
_WHITESPACE_PATTERN = re.compile(r"\s+")


def sanitize_tweet_text(text: str | None) -> str:
    """Strip emoji and collapse whitespace.

    Args:
        text: Raw tweet text.

    Returns:
        Single-line text without pictographs.
    """
    without_emoji = _EMOJI_PATTERN.sub("", text or "")
    return _WHITESPACE_PATTERN.sub(" ", without_emoji).strip()


def build_tweet_url(username: str | None, tweet_id: str | None) -> str:
    """Build the public URL of a tweet, or an empty string without an id."""
    if not tweet_id:
        return ""
    return TWEET_URL_TEMPLATE.format(username=username or "unknown", tweet_id=tweet_id)


def compute_since_hours(recent_days: int) -> int:
    """Search window in hours, clamped to what recent search supports."""
    return max(1, min(recent_days * 24, MAX_SINCE_HOURS))


@dataclass(frozen=True)
class TweetRecord:
    """A raw tweet with its expanded author.

    Attributes:
        tweet: Tweet object from the ``data`` array.
        user: Matching user from ``includes.users``, if any.
    """

    tweet: dict[str, Any]
    user: dict[str, Any] | None = None


def _build_user_map(users: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {str(u["id"]): u for u in users if isinstance(u, dict) and u.get("id")}


class TwitterSearchSource:
    """Page source over the v2 recent-search endpoint."""

    def __init__(
        self,
        client: httpx.Client,
        bearer_token: str,
        start_time: datetime,
        base_url: str = TWITTER_API_BASE_URL,
    ) -> None:
        """Initialize the source.

        Args:
            client: HTTP client (carries the request timeout).
            bearer_token: App-only bearer token.
            start_time: Oldest creation time to search from.
            base_url: API base URL.
        """
        self._client = client
        self._bearer_token = bearer_token
        self._start_time = start_time
        self._url = f"{base_url.rstrip('/')}{RECENT_SEARCH_PATH}"
        self._log = logger.bind(component="collectors", subcomponent="twitter")

    def fetch_page(self, plan: FetchPlan, request: PageRequest) -> FetchedPage:
        """Fetch one page of search results.

        Raises:
            SourceApiError: Fatal on 401/403, recoverable when the API
                rejects ``max_results``.
            httpx.HTTPStatusError: For any other non-2xx response.
        """
        params: dict[str, str | int] = {
            "query": plan.query,
            "max_results": max(
                MIN_RESULTS_PER_PAGE, min(request.size, MAX_RESULTS_PER_PAGE)
            ),
            "start_time": self._start_time.astimezone(UTC).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            ),
            "tweet.fields": TWEET_FIELDS,
            "user.fields": USER_FIELDS,
            "expansions": EXPANSIONS,
        }
        if request.cursor:
            params["next_token"] = request.cursor

        self._log.debug(
            "search_page_requested",
            plan=plan.label,
            max_results=params["max_results"],
            has_cursor=request.cursor is not None,
        )
        response = self._client.get(
            self._url,
            params=params,
            headers={"Authorization": f"Bearer {self._bearer_token}"},
        )
        self._raise_for_api_error(response)

        payload = response.json()
        tweets = payload.get("data") or []
        users = _build_user_map((payload.get("includes") or {}).get("users") or [])
        meta = payload.get("meta") or {}

        return FetchedPage(
            records=[
                TweetRecord(tweet=t, user=users.get(str(t.get("author_id"))))
                for t in tweets
            ],
            next_cursor=meta.get("next_token"),
            total_available=meta.get("result_count"),
        )

    def _raise_for_api_error(self, response: httpx.Response) -> None:
        status = response.status_code
        if status in _FATAL_STATUS_CODES:
            msg = f"Twitter API rejected credentials (HTTP {status})"
            raise SourceApiError.fatal(msg, status_code=status)
        if status == HTTPStatus.BAD_REQUEST and "max_results" in response.text:
            msg = "Twitter API rejected max_results"
            raise SourceApiError.recoverable(msg, status_code=status)
        response.raise_for_status()

    def record_id(self, record: TweetRecord) -> str:
        """Return the tweet id."""
        return str(record.tweet.get("id", ""))

    def record_cursor(self, record: TweetRecord) -> str | None:
        """Recent search paginates by token only, so there is no fallback."""
        return None

    def normalize(self, record: TweetRecord, plan: FetchPlan) -> Item | None:
        """Convert a tweet into an Item, dropping tweets with too little text."""
        tweet = record.tweet
        user = record.user or {}

        summary = sanitize_tweet_text(tweet.get("text"))[:MAX_SUMMARY_LENGTH].strip()
        if len(summary) < MIN_SUMMARY_LENGTH:
            return None

        title = (
            f"{summary[:TRUNCATED_TITLE_LENGTH]}..."
            if len(summary) > MAX_TITLE_LENGTH
            else summary
        )
        username = user.get("username") or tweet.get("author_id")
        tweet_id = self.record_id(record)
        metrics = tweet.get("public_metrics") or {}

        return Item(
            id=tweet_id,
            title=title,
            summary=summary,
            url=build_tweet_url(username, tweet_id),
            source=ItemSource.TWITTER.value,
            created_at=to_datetime(tweet.get("created_at")) or datetime.now(UTC),
            metadata={
                "account_handle": plan.handle or username,
                "account_name": user.get("name") or plan.label,
                "author": user.get("name") or plan.label,
                "language": tweet.get("lang"),
                "query": plan.query,
                "tags": list(plan.tags),
                "type": plan.type.value,
                "metrics": metrics,
                "likes": metrics.get("like_count"),
                "comments": metrics.get("reply_count"),
                "retweets": metrics.get("retweet_count"),
                "quotes": metrics.get("quote_count"),
            },
        )


class TwitterCollector:
    """Collects recent tweets for the configured accounts or keywords."""

    def __init__(  # noqa: PLR0913
        self,
        config: TwitterSourceConfig,
        bearer_token: str | None,
        window: RecencyWindow,
        client: httpx.Client | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the collector.

        Args:
            config: Source configuration snapshot.
            bearer_token: API bearer token; collection is skipped without one.
            window: Shared recency window.
            client: HTTP client; one with the configured timeout is created
                per collection when omitted.
            retry_policy: Retry policy for page fetches.
            sleep: Sleep function used between retries.
        """
        self._config = config
        self._bearer_token = bearer_token
        self._window = window
        self._client = client
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._log = logger.bind(component="collectors", source="twitter")

    def _plan_defaults(self) -> PlanDefaults:
        search = self._config.search
        keywords = tuple(k for k in self._config.keywords if k.strip())
        return PlanDefaults(
            query_suffix=search.default_query_suffix.strip(),
            languages=tuple(lang for lang in search.default_languages if lang),
            account_limit=search.max_items_per_account,
            keyword_limit=search.max_items_per_keyword,
            fallback_keywords=keywords or DEFAULT_FALLBACK_QUERIES,
        )

    def collect(self, now: datetime | None = None) -> list[Item]:
        """Collect, window and validate tweets.

        Args:
            now: Reference time (defaults to now).

        Returns:
            Valid, recent items with duplicates removed.
        """
        if not self._config.enabled:
            self._log.info("source_disabled")
            return []
        if not self._bearer_token:
            self._log.warning("source_skipped_missing_token")
            return []

        if not self._config.enabled_accounts:
            self._log.info(
                "no_accounts_using_keywords",
                configured_keywords=len(self._config.keywords),
            )

        plans = build_fetch_plans(self._config.accounts, self._plan_defaults())
        if not plans:
            self._log.warning("source_skipped_no_plans")
            return []

        now = now or datetime.now(UTC)
        recent_days = self._window.get_recent_days()
        if recent_days * 24 > MAX_SINCE_HOURS:
            self._log.warning(
                "search_window_capped",
                recent_days=recent_days,
                max_hours=MAX_SINCE_HOURS,
            )
        start_time = now - timedelta(hours=compute_since_hours(recent_days))

        if self._client is not None:
            items = self._run_plans(self._client, plans, start_time)
        else:
            with httpx.Client(timeout=self._config.timeout_seconds) as client:
                items = self._run_plans(client, plans, start_time)

        partition = self._window.partition(items, now=now)
        if partition.outdated:
            self._log.info(
                "outdated_items_dropped",
                count=len(partition.outdated),
                recent_days=partition.recent_days,
            )

        validation = validate_items(partition.recent)
        if validation.invalid:
            self._log.warning("invalid_items_dropped", count=len(validation.invalid))

        self._log.info("source_collected", items=len(validation.valid))
        return validation.valid

    def _run_plans(
        self,
        client: httpx.Client,
        plans: list[FetchPlan],
        start_time: datetime,
    ) -> list[Item]:
        source = TwitterSearchSource(client, self._bearer_token or "", start_time)
        paginator = PaginatedCollector(
            source,
            retry_policy=self._retry_policy,
            max_page_size=self._config.search.max_results_per_page,
            sleep=self._sleep,
        )
        result = PlanRunner(paginator).run(plans, self._config.max_items)
        return result.items
