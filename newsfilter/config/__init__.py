"""Configuration loading and schemas."""

from newsfilter.config.loader import ConfigLoader, ConfigValidationError
from newsfilter.config.schemas import (
    FilterConfig,
    FilterExample,
    PricingConfig,
    ScoringConfig,
    ThresholdConfig,
    TwitterAccount,
    TwitterSearchSettings,
    TwitterSourceConfig,
)


__all__ = [
    "ConfigLoader",
    "ConfigValidationError",
    "FilterConfig",
    "FilterExample",
    "PricingConfig",
    "ScoringConfig",
    "ThresholdConfig",
    "TwitterAccount",
    "TwitterSearchSettings",
    "TwitterSourceConfig",
]
