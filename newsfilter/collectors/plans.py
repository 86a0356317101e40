"""Fetch plan building and quota allocation.

A plan is one search query with its own item quota. Accounts produce one
plan per language; when no account is enabled, the fallback keywords are
OR-joined into keyword plans instead.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog

from newsfilter.collectors.constants import (
    DEFAULT_FALLBACK_QUERIES,
    DEFAULT_MAX_ITEMS_PER_ACCOUNT,
    DEFAULT_QUERY_SUFFIX,
    FALLBACK_PLAN_LABEL,
    MAX_ITEMS_PER_PLAN,
)
from newsfilter.config.schemas import TwitterAccount


logger = structlog.get_logger()


class PlanType(str, Enum):
    """Kind of query a plan runs."""

    ACCOUNT = "account"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class FetchPlan:
    """One query to paginate, with its quota.

    Attributes:
        type: Account or keyword plan.
        label: Human-readable name used in logs and metadata.
        query: Full search query, language clause included.
        limit: Maximum items this plan may contribute.
        handle: Account handle (account plans only).
        language: Language code the query is restricted to, if any.
        tags: Tags copied into item metadata.
    """

    type: PlanType
    label: str
    query: str
    limit: int
    handle: str | None = None
    language: str | None = None
    tags: tuple[str, ...] = ()

    @property
    def usage_key(self) -> str:
        """Key under which quota usage is shared across language plans."""
        if self.type == PlanType.ACCOUNT:
            return f"account:{self.handle}"
        return f"keyword:{self.label}"


@dataclass(frozen=True)
class PlanDefaults:
    """Run-wide defaults applied while building plans.

    Attributes:
        query_suffix: Appended to generated account and keyword queries.
        languages: Default language split.
        account_limit: Quota of each account plan.
        keyword_limit: Quota of each keyword plan (account limit when unset).
        fallback_keywords: Keywords used when no account is enabled.
    """

    query_suffix: str = DEFAULT_QUERY_SUFFIX
    languages: tuple[str, ...] = ()
    account_limit: int | None = None
    keyword_limit: int | None = None
    fallback_keywords: tuple[str, ...] = field(default=DEFAULT_FALLBACK_QUERIES)


def clamp_plan_limit(value: int | None, fallback: int) -> int:
    """Clamp a configured per-plan limit into ``[1, MAX_ITEMS_PER_PLAN]``.

    Args:
        value: Configured limit, or None.
        fallback: Limit used when nothing usable is configured.

    Returns:
        The clamped limit.
    """
    limit = fallback if value is None else value
    return max(1, min(limit, MAX_ITEMS_PER_PLAN))


def append_language(query: str, language: str | None) -> str:
    """Restrict a query to a language.

    Appends `` lang:<language>`` unless no language is given or the query
    already contains that clause. Whitespace around the query and the
    language is trimmed.

    Args:
        query: Search query.
        language: Language code, or None.

    Returns:
        The query with at most one language clause for ``language``.
    """
    trimmed = query.strip()
    lang = (language or "").strip()
    if not lang:
        return trimmed

    clause = f"lang:{lang}"
    if clause in trimmed:
        return trimmed
    return f"{trimmed} {clause}".strip()


def _join_query(*parts: str) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def _quote_keyword(keyword: str) -> str:
    stripped = keyword.strip()
    if " " in stripped:
        return f'"{stripped}"'
    return stripped


def _account_plans(
    account: TwitterAccount,
    defaults: PlanDefaults,
    limit: int,
) -> list[FetchPlan]:
    base_query = account.query or _join_query(
        f"from:{account.handle}", defaults.query_suffix
    )
    languages: Sequence[str | None] = (
        account.languages or list(defaults.languages) or [None]
    )
    return [
        FetchPlan(
            type=PlanType.ACCOUNT,
            label=account.display_name or account.handle,
            query=append_language(base_query, lang),
            limit=limit,
            handle=account.handle,
            language=lang,
            tags=tuple(account.tags),
        )
        for lang in languages
    ]


def _keyword_plans(defaults: PlanDefaults, limit: int) -> list[FetchPlan]:
    keywords = [k for k in defaults.fallback_keywords if k.strip()]
    if not keywords:
        return []

    joined = " OR ".join(_quote_keyword(k) for k in keywords)
    base_query = _join_query(f"({joined})", defaults.query_suffix)
    languages: Sequence[str | None] = list(defaults.languages) or [None]
    return [
        FetchPlan(
            type=PlanType.KEYWORD,
            label=FALLBACK_PLAN_LABEL,
            query=append_language(base_query, lang),
            limit=limit,
            language=lang,
        )
        for lang in languages
    ]


def build_fetch_plans(
    accounts: Iterable[TwitterAccount],
    defaults: PlanDefaults,
) -> list[FetchPlan]:
    """Build the ordered list of plans for one run.

    Args:
        accounts: Configured accounts (disabled or handle-less ones skipped).
        defaults: Suffix, languages, limits and fallback keywords.

    Returns:
        Account plans in configuration order, or keyword plans when no
        account is usable.
    """
    account_limit = clamp_plan_limit(
        defaults.account_limit, DEFAULT_MAX_ITEMS_PER_ACCOUNT
    )
    keyword_limit = clamp_plan_limit(defaults.keyword_limit, account_limit)

    plans: list[FetchPlan] = []
    for account in accounts:
        if not account.enabled or not account.handle:
            continue
        plans.extend(_account_plans(account, defaults, account_limit))

    if not plans:
        plans = _keyword_plans(defaults, keyword_limit)

    logger.debug(
        "fetch_plans_built",
        component="collectors",
        subcomponent="plans",
        plan_count=len(plans),
        account_limit=account_limit,
        keyword_limit=keyword_limit,
    )
    return plans


def compute_global_budget(
    plans: Sequence[FetchPlan],
    configured_total_limit: int | None,
) -> int:
    """Compute the item cap for a whole run.

    The configured cap never shrinks the budget below what the plans
    themselves ask for.

    Args:
        plans: Plans of the run.
        configured_total_limit: Configured global cap, if any.

    Returns:
        ``max(configured, sum of plan limits)`` for a positive configured
        cap, else the sum of plan limits.
    """
    plan_total = sum(plan.limit for plan in plans)
    if configured_total_limit is not None and configured_total_limit > 0:
        return max(configured_total_limit, plan_total)
    return plan_total
