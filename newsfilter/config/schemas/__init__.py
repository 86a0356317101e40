"""Configuration schemas."""

from newsfilter.config.schemas.base import StrictBaseModel
from newsfilter.config.schemas.filter import (
    FilterConfig,
    FilterExample,
    ThresholdConfig,
)
from newsfilter.config.schemas.scoring import PricingConfig, ScoringConfig
from newsfilter.config.schemas.sources import (
    TwitterAccount,
    TwitterSearchSettings,
    TwitterSourceConfig,
)


__all__ = [
    "FilterConfig",
    "FilterExample",
    "PricingConfig",
    "ScoringConfig",
    "StrictBaseModel",
    "ThresholdConfig",
    "TwitterAccount",
    "TwitterSearchSettings",
    "TwitterSourceConfig",
]
