"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LLM_BASE_URL = "https://api.deepseek.com"
DEFAULT_LLM_MODEL = "deepseek-chat"


class AppSettings(BaseSettings):
    """Secrets and LLM tuning read from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    deepseek_api_key: str | None = Field(
        default=None, validation_alias="DEEPSEEK_API_KEY"
    )
    llm_base_url: str = Field(
        default=DEFAULT_LLM_BASE_URL, validation_alias="LLM_BASE_URL"
    )
    llm_model: str = Field(default=DEFAULT_LLM_MODEL, validation_alias="LLM_MODEL")
    llm_max_tokens: int = Field(default=500, ge=1, validation_alias="LLM_MAX_TOKENS")
    llm_temperature: float = Field(
        default=0.7, ge=0.0, le=2.0, validation_alias="LLM_TEMPERATURE"
    )
    llm_timeout_seconds: float = Field(
        default=60.0, gt=0.0, validation_alias="LLM_TIMEOUT_SECONDS"
    )
    twitter_bearer_token: str | None = Field(
        default=None, validation_alias="TWITTER_BEARER_TOKEN"
    )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
