"""Shared recency window used by every collector."""

from newsfilter.recency.window import (
    DEFAULT_RECENT_DAYS,
    MAX_RECENT_DAYS,
    CollectionWindowProvider,
    RecencyPartition,
    RecencyWindow,
    RecencyWindowConfig,
    to_datetime,
)


__all__ = [
    "DEFAULT_RECENT_DAYS",
    "MAX_RECENT_DAYS",
    "CollectionWindowProvider",
    "RecencyPartition",
    "RecencyWindow",
    "RecencyWindowConfig",
    "to_datetime",
]
