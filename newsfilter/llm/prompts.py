"""Prompt templates for item relevance scoring."""

from newsfilter.config.schemas import FilterConfig, FilterExample
from newsfilter.items import Item


_SYSTEM_TEMPLATE = """You are a news scoring assistant. Score each AI news item from 0 to 10 \
against the reader preferences below.

## Scoring Rubric

**High (8-10)**:
- Widely followed AI headlines (major model launches, flagship product events)
- News about AI coding tools (editor and agent releases, notable updates)
- Major AI industry moves (launch events, strategic announcements)
- Items the reader can act on (free model quotas, sign-up credits)

**Medium (5-7)**:
- AI news of moderate interest, minor industry events
- Small AI coding tool updates without standout features

**Low (0-4)**:
- Non-AI news
- Items the reader gains nothing from
- Advertising and marketing
{keywords_section}
## Reader Preferences

{positive_section}

{negative_section}

## Output Format

Respond with a JSON object only:
{{"score": 7.5, "reason": "Short rationale (50-100 words)"}}"""

_USER_TEMPLATE = """Score the following news item:

**Title**: {title}

**Summary**: {summary}

Apply the rubric and reader preferences from the system prompt."""


def _format_examples(
    examples: list[FilterExample],
    label: str,
    default_reason: str,
) -> str:
    if not examples:
        return f"### {label}\nNone"

    blocks = [
        f"### {label} {i}\n"
        f"Title: {example.title}\n"
        f"Summary: {example.summary}\n"
        f"Reason: {example.reason or default_reason}\n"
        for i, example in enumerate(examples, start=1)
    ]
    return "\n".join(blocks)


def build_system_prompt(filter_config: FilterConfig) -> str:
    """Build the scoring instruction context.

    Args:
        filter_config: Reader preferences with worked examples.

    Returns:
        System prompt text.
    """
    keywords_section = ""
    if filter_config.keywords:
        keywords_section = (
            "\n**Topics of interest**: " + ", ".join(filter_config.keywords) + "\n"
        )

    return _SYSTEM_TEMPLATE.format(
        keywords_section=keywords_section,
        positive_section=_format_examples(
            filter_config.positive_examples,
            "Positive Example",
            "Matches reader preferences",
        ),
        negative_section=_format_examples(
            filter_config.negative_examples,
            "Negative Example",
            "Does not match reader preferences",
        ),
    )


def build_user_prompt(item: Item) -> str:
    """Build the prompt for one item.

    Args:
        item: Item to score.

    Returns:
        User prompt text.
    """
    return _USER_TEMPLATE.format(title=item.title, summary=item.summary)
