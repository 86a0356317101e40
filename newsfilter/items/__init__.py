"""Normalized content items shared by collectors and the scoring pipeline."""

from newsfilter.items.models import Item, ItemSource, ScoredItem, TokenUsage
from newsfilter.items.validation import InvalidItem, ValidationResult, validate_items


__all__ = [
    "InvalidItem",
    "Item",
    "ItemSource",
    "ScoredItem",
    "TokenUsage",
    "ValidationResult",
    "validate_items",
]
