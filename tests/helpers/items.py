"""Item factories for tests."""

from datetime import timedelta
from typing import Any

from newsfilter.config.schemas import FilterConfig, FilterExample
from newsfilter.items import Item
from tests.helpers.time import FIXED_NOW


def make_item(item_id: str = "item-1", **overrides: Any) -> Item:
    """Create a valid item, overriding any field."""
    fields: dict[str, Any] = {
        "id": item_id,
        "title": f"Model release {item_id}",
        "summary": f"A new open model was released today ({item_id}).",
        "url": f"https://example.com/news/{item_id}",
        "source": "Twitter",
        "created_at": FIXED_NOW - timedelta(hours=1),
        "fetched_at": FIXED_NOW,
    }
    fields.update(overrides)
    return Item(**fields)


def make_filter_config(**overrides: Any) -> FilterConfig:
    """Create a minimal valid filter configuration."""
    fields: dict[str, Any] = {
        "positive_examples": [
            FilterExample(
                title="Coding agent update",
                summary="A popular coding agent shipped a major update.",
                reason="AI coding news",
            )
        ],
        "negative_examples": [
            FilterExample(
                title="Sponsored webinar",
                summary="Register now for our marketing webinar series.",
            )
        ],
    }
    fields.update(overrides)
    return FilterConfig(**fields)
