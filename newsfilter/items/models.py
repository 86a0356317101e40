"""Data models for collected and scored items."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ItemSource(str, Enum):
    """Sources an item may originate from."""

    AIBASE = "AIBase"
    TWITTER = "Twitter"
    FEISHU = "Feishu"
    WECHAT = "WeChat"
    ZHISHI = "Zhishi"


def _new_item_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Item(BaseModel):
    """A normalized unit of content produced by a collector.

    Field types are deliberately loose: structural rules (lengths, URL
    shape, known source) are checked by ``validate_items`` so that an
    invalid item can still be represented and reported instead of failing
    at construction time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=_new_item_id)
    title: str = ""
    summary: str = ""
    url: str = ""
    source: str = ""
    created_at: datetime | None = None
    fetched_at: datetime = Field(default_factory=_utc_now)
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting reported by one scoring call.

    Attributes:
        input_tokens: Prompt tokens.
        output_tokens: Completion tokens.
        cache_hit_tokens: Prompt tokens served from the provider cache.
        cache_miss_tokens: Prompt tokens not served from the cache.
        total_tokens: Total tokens billed for the call.
    """

    input_tokens: int = 0
    output_tokens: int = 0
    cache_hit_tokens: int = 0
    cache_miss_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_usage(cls, usage: dict[str, Any] | None) -> "TokenUsage":
        """Build from an OpenAI-style ``usage`` object, defaulting to 0.

        Args:
            usage: Raw usage mapping from the completion response.

        Returns:
            TokenUsage with missing fields set to zero.
        """
        usage = usage or {}
        return cls(
            input_tokens=int(usage.get("prompt_tokens") or 0),
            output_tokens=int(usage.get("completion_tokens") or 0),
            cache_hit_tokens=int(usage.get("prompt_cache_hit_tokens") or 0),
            cache_miss_tokens=int(usage.get("prompt_cache_miss_tokens") or 0),
            total_tokens=int(usage.get("total_tokens") or 0),
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cache_hit_tokens": self.cache_hit_tokens,
            "cache_miss_tokens": self.cache_miss_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class ScoredItem:
    """An Item with its scoring annotation.

    Attributes:
        item: The scored item.
        score: Relevance score in [0, 10].
        reason: Free-text rationale from the model.
        token_usage: Usage of the scoring call (zeros when none was made).
        error: Failure message when the item could not be scored.
        is_passed: Whether the item survived threshold selection.
    """

    item: Item
    score: float = 0.0
    reason: str = ""
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    error: str | None = None
    is_passed: bool = False

    @property
    def is_valid(self) -> bool:
        """Check if the item has a usable score."""
        return self.error is None and self.score > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "item": self.item.to_dict(),
            "score": self.score,
            "reason": self.reason,
            "token_usage": self.token_usage.to_dict(),
            "error": self.error,
            "is_passed": self.is_passed,
        }
