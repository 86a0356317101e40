"""Unit tests for prompt building."""

from newsfilter.config.schemas import FilterExample
from newsfilter.llm.prompts import build_system_prompt, build_user_prompt
from tests.helpers.items import make_filter_config, make_item


class TestBuildSystemPrompt:
    """Tests for build_system_prompt."""

    def test_examples_numbered(self) -> None:
        """Every example gets a numbered block with its reason."""
        config = make_filter_config(
            positive_examples=[
                FilterExample(title="First", summary="First positive summary"),
                FilterExample(
                    title="Second", summary="Second positive summary", reason="Why"
                ),
            ]
        )

        prompt = build_system_prompt(config)

        assert "### Positive Example 1\nTitle: First" in prompt
        assert "Reason: Matches reader preferences" in prompt
        assert "### Positive Example 2\nTitle: Second" in prompt
        assert "Reason: Why" in prompt
        assert "### Negative Example 1\nTitle: Sponsored webinar" in prompt
        assert "Reason: Does not match reader preferences" in prompt

    def test_keywords_section(self) -> None:
        """Keywords are listed only when configured."""
        keywords_config = make_filter_config(keywords=["LLM", "agents"])
        with_keywords = build_system_prompt(keywords_config)
        without = build_system_prompt(make_filter_config())

        assert "**Topics of interest**: LLM, agents" in with_keywords
        assert "Topics of interest" not in without

    def test_output_format(self) -> None:
        """The prompt asks for a JSON object with score and reason."""
        prompt = build_system_prompt(make_filter_config())

        assert '{"score": 7.5, "reason":' in prompt


class TestBuildUserPrompt:
    """Tests for build_user_prompt."""

    def test_contains_title_and_summary(self) -> None:
        """Title and summary are embedded."""
        item = make_item("x", title="Headline", summary="Body text for the item.")

        prompt = build_user_prompt(item)

        assert "**Title**: Headline" in prompt
        assert "**Summary**: Body text for the item." in prompt
