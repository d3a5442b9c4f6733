"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - anthropic_max_retries defaults to 0: provider failures surface to the user,
      who re-triggers; transport retries are opt-in
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_model: str = "claude-sonnet-4-5"
    anthropic_max_tokens: int = 8_000
    anthropic_max_retries: int = 0
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000

    # Layout
    default_viewport_height: float = 800

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("default_viewport_height")
    @classmethod
    def viewport_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("default_viewport_height must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
