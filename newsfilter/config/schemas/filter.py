"""Filter rules schema: scoring examples and threshold selection."""

from typing import Annotated

from pydantic import Field, model_validator

from newsfilter.config.schemas.base import StrictBaseModel


class FilterExample(StrictBaseModel):
    """A worked example shown to the scoring model.

    Attributes:
        title: Example headline.
        summary: Example summary.
        reason: Why the example is (or is not) wanted.
    """

    title: Annotated[str, Field(min_length=1, max_length=200)]
    summary: Annotated[str, Field(min_length=10, max_length=500)]
    reason: str | None = None


class ThresholdConfig(StrictBaseModel):
    """Dynamic threshold selection bounds.

    Attributes:
        min_percentage: Lower bound on the kept share of valid items.
        max_percentage: Upper bound on the kept share of valid items.
        preferred_count: Desired number of kept items.
    """

    min_percentage: Annotated[float, Field(ge=0.0, le=100.0)] = 10.0
    max_percentage: Annotated[float, Field(ge=0.0, le=100.0)] = 30.0
    preferred_count: Annotated[int, Field(ge=1)] = 15

    @model_validator(mode="after")
    def validate_percentage_order(self) -> "ThresholdConfig":
        """Ensure min_percentage does not exceed max_percentage."""
        if self.min_percentage > self.max_percentage:
            msg = "min_percentage must not exceed max_percentage"
            raise ValueError(msg)
        return self


class FilterConfig(StrictBaseModel):
    """Preferences the scoring model judges items against.

    Attributes:
        positive_examples: Items the reader wants (at least 1).
        negative_examples: Items the reader does not want (at least 1).
        keywords: Topics of interest listed in the scoring prompt.
        threshold: Dynamic threshold bounds.
    """

    positive_examples: Annotated[list[FilterExample], Field(min_length=1)]
    negative_examples: Annotated[list[FilterExample], Field(min_length=1)]
    keywords: list[str] = Field(default_factory=list)
    threshold: ThresholdConfig = Field(default_factory=ThresholdConfig)
