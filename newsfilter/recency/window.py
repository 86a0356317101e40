"""Recency window: cutoff computation and recent/outdated partitioning."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, Generic, TypeVar

import structlog
from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, ValidationError


logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_RECENT_DAYS = 7
MAX_RECENT_DAYS = 30

WindowLoader = Callable[[], Mapping[str, Any] | None]


class RecencyWindowConfig(BaseModel):
    """How many days back an item still counts as recent."""

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    recent_days: Annotated[int, Field(ge=1, le=MAX_RECENT_DAYS)] = DEFAULT_RECENT_DAYS


def _no_config() -> None:
    return None


class CollectionWindowProvider:
    """Lazily loads and caches the recency window configuration.

    The loader runs at most once until ``reset()`` is called. A loader
    that raises, returns nothing, or returns an invalid value leaves the
    default window of 7 days in the cache.
    """

    def __init__(self, loader: WindowLoader = _no_config) -> None:
        """Initialize the provider.

        Args:
            loader: Callable returning the raw ``{"recent_days": ...}`` mapping,
                or None when no configuration exists.
        """
        self._loader = loader
        self._cached: RecencyWindowConfig | None = None
        self._log = logger.bind(component="recency", subcomponent="provider")

    @classmethod
    def fixed(cls, recent_days: int) -> "CollectionWindowProvider":
        """Create a provider that always yields the given window."""
        return cls(lambda: {"recent_days": recent_days})

    def get(self) -> RecencyWindowConfig:
        """Return the cached configuration, loading it on first use."""
        if self._cached is not None:
            return self._cached

        try:
            raw = self._loader()
        except Exception as exc:  # noqa: BLE001
            self._log.warning("collection_window_load_failed", error=str(exc))
            raw = None

        config: RecencyWindowConfig | None = None
        if raw is not None:
            try:
                config = RecencyWindowConfig.model_validate(dict(raw))
            except ValidationError as exc:
                self._log.warning(
                    "collection_window_invalid",
                    error_count=exc.error_count(),
                    errors=[err["msg"] for err in exc.errors()],
                )

        if config is None:
            config = RecencyWindowConfig()
            self._log.info("collection_window_default", recent_days=config.recent_days)
        else:
            self._log.info("collection_window_loaded", recent_days=config.recent_days)

        self._cached = config
        return config

    def reset(self) -> None:
        """Drop the cached configuration (test harness use)."""
        self._cached = None


@dataclass
class RecencyPartition(Generic[T]):
    """Result of splitting a collection by the recency cutoff."""

    recent: list[T] = field(default_factory=list)
    outdated: list[T] = field(default_factory=list)
    recent_days: int = DEFAULT_RECENT_DAYS
    cutoff: datetime = field(default_factory=lambda: datetime.now(UTC))


def to_datetime(value: object) -> datetime | None:
    """Coerce a timestamp-like value into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), epoch milliseconds
    and date strings. Anything else, including unparsable strings, yields
    None.

    Args:
        value: Raw timestamp value.

    Returns:
        Aware datetime, or None when the value has no usable timestamp.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.parse(value)
        except (ValueError, TypeError, OverflowError):
            return None
        return parsed.replace(tzinfo=UTC) if parsed.tzinfo is None else parsed
    return None


def _created_at(item: Any) -> object:
    return getattr(item, "created_at", None)


class RecencyWindow:
    """Computes the recency cutoff and partitions timestamped items."""

    def __init__(self, provider: CollectionWindowProvider) -> None:
        """Initialize the window.

        Args:
            provider: Source of the cached window configuration.
        """
        self._provider = provider

    def get_recent_days(self) -> int:
        """Get the configured number of recent days."""
        return self._provider.get().recent_days

    def get_cutoff(self, now: datetime | None = None) -> datetime:
        """Get the oldest timestamp still considered recent.

        Args:
            now: Reference time (defaults to the current UTC time).

        Returns:
            ``now - recent_days`` days.
        """
        now = now or datetime.now(UTC)
        return now - timedelta(days=self.get_recent_days())

    def partition(
        self,
        items: Iterable[T],
        extract_timestamp: Callable[[T], object] = _created_at,
        now: datetime | None = None,
    ) -> RecencyPartition[T]:
        """Split items into recent and outdated.

        Items without a usable timestamp are kept as recent so that valid
        content is never dropped silently.

        Args:
            items: Items to classify.
            extract_timestamp: Returns the raw timestamp of an item.
            now: Reference time (defaults to the current UTC time).

        Returns:
            RecencyPartition with both groups, the window and the cutoff.
        """
        recent_days = self.get_recent_days()
        cutoff = self.get_cutoff(now)
        result: RecencyPartition[T] = RecencyPartition(
            recent_days=recent_days, cutoff=cutoff
        )

        for item in items:
            timestamp = to_datetime(extract_timestamp(item))
            if timestamp is None or timestamp >= cutoff:
                result.recent.append(item)
            else:
                result.outdated.append(item)

        return result
