"""Source configuration schema for the recent-search collector."""

from typing import Annotated

from pydantic import Field, field_validator

from newsfilter.config.schemas.base import StrictBaseModel


class TwitterAccount(StrictBaseModel):
    """An account whose posts are collected.

    Attributes:
        handle: Account handle, with or without a leading ``@``.
        display_name: Label used in logs and item metadata.
        query: Custom search query replacing ``from:<handle>``.
        languages: Per-account language split (overrides the defaults).
        tags: Tags copied into item metadata.
        enabled: Disabled accounts are skipped.
    """

    handle: str
    display_name: str | None = None
    query: str | None = None
    languages: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    enabled: bool = True

    @field_validator("handle")
    @classmethod
    def strip_handle(cls, v: str) -> str:
        """Drop the leading ``@`` and surrounding whitespace."""
        return v.strip().removeprefix("@").strip()


class TwitterSearchSettings(StrictBaseModel):
    """Search tuning shared by every plan.

    Attributes:
        default_query_suffix: Appended to every generated query.
        default_languages: Languages every plan is split into.
        max_results_per_page: Upper bound on one page request.
        max_items_per_account: Quota of each account plan.
        max_items_per_keyword: Quota of the keyword fallback plan.
    """

    default_query_suffix: str = "-is:retweet"
    default_languages: list[str] = Field(default_factory=list)
    max_results_per_page: Annotated[int, Field(ge=10, le=100)] = 100
    max_items_per_account: int | None = None
    max_items_per_keyword: int | None = None


class TwitterSourceConfig(StrictBaseModel):
    """Recent-search source configuration.

    Attributes:
        enabled: Whether the source is collected at all.
        accounts: Accounts to follow.
        keywords: Fallback keywords used when no account is enabled.
        search: Search tuning.
        max_items: Global item cap for the whole source.
        timeout_seconds: Per-request timeout.
    """

    enabled: bool = True
    accounts: list[TwitterAccount] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    search: TwitterSearchSettings = Field(default_factory=TwitterSearchSettings)
    max_items: Annotated[int, Field(ge=0)] = 50
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = 30.0

    @property
    def enabled_accounts(self) -> list[TwitterAccount]:
        """Accounts that are enabled and have a handle."""
        return [a for a in self.accounts if a.enabled and a.handle]
