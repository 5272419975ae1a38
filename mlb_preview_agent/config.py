"""Configuration management for the MLB preview agent.

Settings are loaded from environment variables (and an optional .env file)
using pydantic-settings. Every field has a default, so the agent can start
without any configuration; only the LLM API key for the selected provider is
checked, when the completion client is built.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Team of interest defaults to the San Francisco Giants (MLB team id 137).
    Timeouts and TTLs are in seconds.
    """

    # Upstream sports data
    mlb_api_base: str = Field(default="https://statsapi.mlb.com/api/v1")
    user_agent: str = Field(default="mlb-preview-agent/1.0")
    api_timeout: float = Field(default=10.0, gt=0, le=60)
    stats_cache_ttl: int = Field(
        default=300,
        ge=0,
        description="Seconds a sports API response stays in the read-through cache"
    )

    # Team of interest
    team_id: int = Field(default=137)
    team_name: str = Field(default="San Francisco Giants")
    team_short_name: str = Field(default="Giants")
    team_abbreviation: str = Field(default="SF")

    # Preview result cache
    enable_caching: bool = Field(default=True)
    preview_cache_ttl: int = Field(default=1800, ge=0)

    # LLM provider
    llm_provider: Literal["anthropic", "openai"] = Field(default="anthropic")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o")
    llm_timeout: float = Field(default=60.0, gt=0, le=600)

    # Published per-million-token rates used for cost estimates (USD)
    anthropic_input_cost_per_mtok: float = Field(default=3.0, ge=0)
    anthropic_output_cost_per_mtok: float = Field(default=15.0, ge=0)
    openai_input_cost_per_mtok: float = Field(default=10.0, ge=0)
    openai_output_cost_per_mtok: float = Field(default=30.0, ge=0)

    # Resilience
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0)
    breaker_failure_threshold: int = Field(default=5, ge=1)
    breaker_reset_timeout: float = Field(default=60.0, ge=0)

    # Logging
    log_mode: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance with validated configuration

    Raises:
        ValidationError: If an environment value fails validation
    """
    return Settings()
