"""News ingestion, LLM relevance scoring and top-percentile selection."""

__version__ = "0.1.0"
