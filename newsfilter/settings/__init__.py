"""Application settings loading."""

from .app import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL, AppSettings, get_settings


__all__ = ["DEFAULT_LLM_BASE_URL", "DEFAULT_LLM_MODEL", "AppSettings", "get_settings"]
