"""Scoring run configuration schema."""

from typing import Annotated

from pydantic import Field

from newsfilter.config.schemas.base import StrictBaseModel


class PricingConfig(StrictBaseModel):
    """Scoring model prices in USD per million tokens."""

    input_per_million: Annotated[float, Field(ge=0.0)] = 0.27
    output_per_million: Annotated[float, Field(ge=0.0)] = 1.10
    cache_hit_per_million: Annotated[float, Field(ge=0.0)] = 0.027


class ScoringConfig(StrictBaseModel):
    """Batching and cost accounting for the scoring phase.

    Attributes:
        batch_size: Items scored concurrently per batch.
        pricing: Token prices used for the cost estimate.
    """

    batch_size: Annotated[int, Field(ge=1, le=100)] = 10
    pricing: PricingConfig = Field(default_factory=PricingConfig)
