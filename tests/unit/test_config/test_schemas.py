"""Unit tests for configuration schemas."""

import pytest
from pydantic import ValidationError

from newsfilter.config import (
    FilterExample,
    ThresholdConfig,
    TwitterAccount,
    TwitterSearchSettings,
    TwitterSourceConfig,
)


class TestThresholdConfig:
    """Tests for ThresholdConfig."""

    def test_defaults(self) -> None:
        """Defaults are 10%, 30% and 15 items."""
        config = ThresholdConfig()

        assert config.min_percentage == 10
        assert config.max_percentage == 30
        assert config.preferred_count == 15

    def test_min_above_max_rejected(self) -> None:
        """min_percentage may not exceed max_percentage."""
        with pytest.raises(ValidationError, match="min_percentage"):
            ThresholdConfig(min_percentage=40, max_percentage=30)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_percentage": -1},
            {"max_percentage": 101},
            {"preferred_count": 0},
        ],
    )
    def test_out_of_range(self, kwargs: dict[str, float]) -> None:
        """Percentages are 0-100 and preferred_count at least 1."""
        with pytest.raises(ValidationError):
            ThresholdConfig(**kwargs)


class TestFilterExample:
    """Tests for FilterExample."""

    def test_summary_too_short(self) -> None:
        """Example summaries need at least 10 characters."""
        with pytest.raises(ValidationError):
            FilterExample(title="Title", summary="short")


class TestTwitterConfig:
    """Tests for the recent-search source schema."""

    def test_handle_strips_at_sign(self) -> None:
        """Leading @ and whitespace are removed."""
        assert TwitterAccount(handle="  @OpenAI ").handle == "OpenAI"

    def test_enabled_accounts_skips_disabled_and_empty(self) -> None:
        """Disabled and handle-less accounts are not enabled."""
        config = TwitterSourceConfig(
            accounts=[
                TwitterAccount(handle="a"),
                TwitterAccount(handle="b", enabled=False),
                TwitterAccount(handle="@"),
            ]
        )

        assert [a.handle for a in config.enabled_accounts] == ["a"]

    def test_page_size_bounds(self) -> None:
        """Pages are 10-100 records."""
        with pytest.raises(ValidationError):
            TwitterSearchSettings(max_results_per_page=5)
        with pytest.raises(ValidationError):
            TwitterSearchSettings(max_results_per_page=101)

    def test_rejects_unknown_keys(self) -> None:
        """Typos in configuration are caught."""
        with pytest.raises(ValidationError):
            TwitterSourceConfig.model_validate({"max_itemz": 3})
