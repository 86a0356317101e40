"""Unit tests for the recent-search collector."""

from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from newsfilter.collectors import (
    FetchPlan,
    PageRequest,
    PlanType,
    SourceApiError,
    TwitterCollector,
    TwitterSearchSource,
)
from newsfilter.collectors.twitter import (
    TweetRecord,
    build_tweet_url,
    compute_since_hours,
    sanitize_tweet_text,
)
from newsfilter.config.schemas import TwitterAccount, TwitterSourceConfig
from newsfilter.recency import CollectionWindowProvider, RecencyWindow
from newsfilter.retry import RetryPolicy
from tests.helpers.time import FIXED_NOW


PLAN = FetchPlan(
    type=PlanType.ACCOUNT,
    label="OpenAI",
    query="from:openai -is:retweet",
    limit=10,
    handle="openai",
    tags=("lab",),
)
START_TIME = datetime(2017, 6, 6, tzinfo=FIXED_NOW.tzinfo)


def _tweet(
    tweet_id: str, text: str, created_at: str = "2017-06-12T20:00:00.000Z"
) -> dict[str, Any]:
    return {
        "id": tweet_id,
        "text": text,
        "author_id": "42",
        "created_at": created_at,
        "lang": "en",
        "public_metrics": {
            "like_count": 5,
            "reply_count": 1,
            "retweet_count": 2,
            "quote_count": 0,
        },
    }


def _payload(
    tweets: list[dict[str, Any]], next_token: str | None = None
) -> dict[str, Any]:
    meta: dict[str, Any] = {"result_count": len(tweets)}
    if next_token:
        meta["next_token"] = next_token
    return {
        "data": tweets,
        "includes": {"users": [{"id": "42", "username": "openai", "name": "OpenAI"}]},
        "meta": meta,
    }


class RecordingTransport:
    """Mock transport handler that records requests."""

    def __init__(self, respond: Any) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def _client(handler: RecordingTransport) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHelpers:
    """Tests for text and URL helpers."""

    def test_sanitize_strips_emoji_and_whitespace(self) -> None:
        """Pictographs are removed and whitespace collapsed."""
        text = "Big news 🚀  today\n\nok ✨"

        assert sanitize_tweet_text(text) == "Big news today ok"

    def test_sanitize_none(self) -> None:
        """Missing text becomes an empty string."""
        assert sanitize_tweet_text(None) == ""

    def test_build_tweet_url(self) -> None:
        """The URL uses the username, falling back to unknown."""
        assert build_tweet_url("openai", "1") == "https://twitter.com/openai/status/1"
        assert build_tweet_url(None, "1") == "https://twitter.com/unknown/status/1"
        assert build_tweet_url("openai", None) == ""

    @pytest.mark.parametrize(
        ("days", "hours"),
        [(1, 24), (3, 72), (7, 168), (30, 168)],
    )
    def test_compute_since_hours(self, days: int, hours: int) -> None:
        """The window is capped at seven days."""
        assert compute_since_hours(days) == hours


class TestTwitterSearchSource:
    """Tests for TwitterSearchSource."""

    def test_fetch_page_request(self) -> None:
        """Query parameters and the bearer token are sent."""
        handler = RecordingTransport(
            lambda _: httpx.Response(200, json=_payload([], next_token=None))
        )
        source = TwitterSearchSource(_client(handler), "token", START_TIME)

        source.fetch_page(PLAN, PageRequest(size=5, cursor="abc"))

        request = handler.requests[0]
        assert request.url.path == "/2/tweets/search/recent"
        assert request.headers["Authorization"] == "Bearer token"
        params = request.url.params
        assert params["query"] == "from:openai -is:retweet"
        assert params["max_results"] == "10"
        assert params["start_time"] == "2017-06-06T00:00:00Z"
        assert params["next_token"] == "abc"
        assert params["expansions"] == "author_id"

    def test_fetch_page_parses_payload(self) -> None:
        """Tweets are paired with their authors."""
        payload = _payload([_tweet("1", "First tweet text here")], next_token="n2")
        handler = RecordingTransport(lambda _: httpx.Response(200, json=payload))
        source = TwitterSearchSource(_client(handler), "token", START_TIME)

        page = source.fetch_page(PLAN, PageRequest(size=100))

        assert "next_token" not in handler.requests[0].url.params
        assert page.next_cursor == "n2"
        assert page.total_available == 1
        assert page.records[0].user == {
            "id": "42",
            "username": "openai",
            "name": "OpenAI",
        }

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors_are_fatal(self, status: int) -> None:
        """Credential rejections abort the plan."""
        handler = RecordingTransport(lambda _: httpx.Response(status, json={}))
        source = TwitterSearchSource(_client(handler), "token", START_TIME)

        with pytest.raises(SourceApiError) as exc_info:
            source.fetch_page(PLAN, PageRequest(size=100))

        assert not exc_info.value.is_recoverable
        assert exc_info.value.status_code == status

    def test_max_results_rejection_is_recoverable(self) -> None:
        """A 400 about max_results allows a smaller page."""
        message = "The `max_results` query parameter value is invalid"
        body = {"errors": [{"message": message}]}
        handler = RecordingTransport(lambda _: httpx.Response(400, json=body))
        source = TwitterSearchSource(_client(handler), "token", START_TIME)

        with pytest.raises(SourceApiError) as exc_info:
            source.fetch_page(PLAN, PageRequest(size=100))

        assert exc_info.value.is_recoverable

    def test_other_errors_raise_http_status_error(self) -> None:
        """Rate limits surface as HTTPStatusError for the retry policy."""
        handler = RecordingTransport(lambda _: httpx.Response(429, json={}))
        source = TwitterSearchSource(_client(handler), "token", START_TIME)

        with pytest.raises(httpx.HTTPStatusError):
            source.fetch_page(PLAN, PageRequest(size=100))

    def test_normalize(self) -> None:
        """A tweet becomes an item with author metadata."""
        source = TwitterSearchSource(MagicMock(), "token", START_TIME)
        record = TweetRecord(
            tweet=_tweet("99", "New model 🚀 released with open weights"),
            user={"id": "42", "username": "openai", "name": "OpenAI"},
        )

        item = source.normalize(record, PLAN)

        assert item is not None
        assert item.id == "99"
        assert item.title == "New model released with open weights"
        assert item.summary == item.title
        assert item.url == "https://twitter.com/openai/status/99"
        assert item.source == "Twitter"
        assert item.created_at == datetime(2017, 6, 12, 20, 0, tzinfo=FIXED_NOW.tzinfo)
        assert item.metadata["account_handle"] == "openai"
        assert item.metadata["author"] == "OpenAI"
        assert item.metadata["tags"] == ["lab"]
        assert item.metadata["type"] == "account"
        assert item.metadata["likes"] == 5
        assert item.metadata["retweets"] == 2

    def test_normalize_truncates_long_title(self) -> None:
        """Long text is cut to a 120 character title."""
        source = TwitterSearchSource(MagicMock(), "token", START_TIME)
        text = "word " * 100

        item = source.normalize(TweetRecord(tweet=_tweet("1", text)), PLAN)

        assert item is not None
        assert len(item.title) == 120
        assert item.title.endswith("...")
        assert len(item.summary) <= 400

    def test_normalize_drops_short_text(self) -> None:
        """Tweets with under ten characters of text are dropped."""
        source = TwitterSearchSource(MagicMock(), "token", START_TIME)

        assert source.normalize(TweetRecord(tweet=_tweet("1", "hi 🚀")), PLAN) is None

    def test_normalize_without_user(self) -> None:
        """Missing author expansion falls back to plan data."""
        source = TwitterSearchSource(MagicMock(), "token", START_TIME)
        record = TweetRecord(tweet=_tweet("1", "Something long enough"))

        item = source.normalize(record, PLAN)

        assert item is not None
        assert item.url == "https://twitter.com/42/status/1"
        assert item.metadata["author"] == "OpenAI"


class TestTwitterCollector:
    """Tests for TwitterCollector.collect."""

    @pytest.fixture
    def window(self) -> RecencyWindow:
        """Seven-day recency window."""
        return RecencyWindow(CollectionWindowProvider.fixed(7))

    @pytest.fixture
    def config(self) -> TwitterSourceConfig:
        """One account, no language split."""
        return TwitterSourceConfig(accounts=[TwitterAccount(handle="@openai")])

    def test_collect_end_to_end(
        self, config: TwitterSourceConfig, window: RecencyWindow
    ) -> None:
        """Pages are followed, old and short tweets dropped."""
        pages = {
            None: _payload(
                [
                    _tweet("1", "Fresh model release today"),
                    _tweet("2", "An old announcement here", "2017-05-01T00:00:00Z"),
                ],
                next_token="t2",
            ),
            "t2": _payload([_tweet("3", "ok")]),
        }

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json=pages[request.url.params.get("next_token")]
            )

        handler = RecordingTransport(respond)
        collector = TwitterCollector(
            config,
            "token",
            window,
            client=_client(handler),
            retry_policy=RetryPolicy(max_retries=0),
        )

        items = collector.collect(now=FIXED_NOW)

        assert [i.id for i in items] == ["1"]
        assert len(handler.requests) == 2
        first = handler.requests[0].url.params
        assert first["query"] == "from:openai -is:retweet"
        assert first["max_results"] == "10"
        assert first["start_time"] == "2017-06-06T00:00:00Z"

    def test_keyword_fallback(self, window: RecencyWindow) -> None:
        """Without accounts the configured keywords are searched."""
        handler = RecordingTransport(lambda _: httpx.Response(200, json={"meta": {}}))
        collector = TwitterCollector(
            TwitterSourceConfig(keywords=["LLM", "open source"]),
            "token",
            window,
            client=_client(handler),
        )

        assert collector.collect(now=FIXED_NOW) == []
        query = handler.requests[0].url.params["query"]
        assert query == '(LLM OR "open source") -is:retweet'

    def test_failed_plan_yields_no_items(
        self, config: TwitterSourceConfig, window: RecencyWindow
    ) -> None:
        """A rejected token ends the plan without raising."""
        handler = RecordingTransport(lambda _: httpx.Response(401, json={}))
        collector = TwitterCollector(config, "bad", window, client=_client(handler))

        assert collector.collect(now=FIXED_NOW) == []
        assert len(handler.requests) == 1

    def test_missing_token_skips(
        self, config: TwitterSourceConfig, window: RecencyWindow
    ) -> None:
        """No token means no requests."""
        handler = RecordingTransport(lambda _: httpx.Response(200, json={}))
        collector = TwitterCollector(config, None, window, client=_client(handler))

        assert collector.collect(now=FIXED_NOW) == []
        assert handler.requests == []

    def test_disabled_source_skips(self, window: RecencyWindow) -> None:
        """A disabled source is not collected."""
        handler = RecordingTransport(lambda _: httpx.Response(200, json={}))
        config = TwitterSourceConfig(enabled=False)
        collector = TwitterCollector(config, "token", window, client=_client(handler))

        assert collector.collect(now=FIXED_NOW) == []
        assert handler.requests == []
