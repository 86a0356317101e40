"""Structural validation of items before scoring."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import urlparse

import structlog

from newsfilter.items.constants import (
    SUMMARY_MAX_LENGTH,
    SUMMARY_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    URL_SCHEMES,
)
from newsfilter.items.models import Item, ItemSource


logger = structlog.get_logger()

_VALID_SOURCES = frozenset(source.value for source in ItemSource)


@dataclass(frozen=True)
class InvalidItem:
    """An item that failed validation, with the reasons."""

    item: Item
    errors: list[str]


@dataclass
class ValidationResult:
    """Items split into valid and invalid."""

    valid: list[Item] = field(default_factory=list)
    invalid: list[InvalidItem] = field(default_factory=list)


def item_errors(item: Item) -> list[str]:
    """List every structural problem with an item.

    Args:
        item: Item to check.

    Returns:
        Error messages; empty when the item is valid.
    """
    errors: list[str] = []

    if not item.title:
        errors.append("title is required")
    elif not TITLE_MIN_LENGTH <= len(item.title) <= TITLE_MAX_LENGTH:
        errors.append(
            f"title length must be {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters"
        )

    if not item.summary:
        errors.append("summary is required")
    elif not SUMMARY_MIN_LENGTH <= len(item.summary) <= SUMMARY_MAX_LENGTH:
        errors.append(
            f"summary length must be {SUMMARY_MIN_LENGTH}-{SUMMARY_MAX_LENGTH} "
            f"characters (got {len(item.summary)})"
        )

    if not item.url:
        errors.append("url is required")
    else:
        parsed = urlparse(item.url)
        if parsed.scheme not in URL_SCHEMES or not parsed.netloc:
            errors.append("url is not a valid http(s) URL")

    if item.source not in _VALID_SOURCES:
        errors.append(f"source must be one of: {', '.join(sorted(_VALID_SOURCES))}")

    if item.created_at is None:
        errors.append("created_at is required")

    return errors


def validate_items(items: Iterable[Item]) -> ValidationResult:
    """Split items into valid and invalid.

    Args:
        items: Items to validate.

    Returns:
        ValidationResult preserving input order within each group.
    """
    result = ValidationResult()

    for item in items:
        errors = item_errors(item)
        if errors:
            result.invalid.append(InvalidItem(item=item, errors=errors))
            logger.debug(
                "item_invalid",
                item_id=item.id,
                title=item.title[:80],
                errors=errors,
            )
        else:
            result.valid.append(item)

    return result
