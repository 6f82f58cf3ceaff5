# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to the enrichment credential, rate limits, paths and logging config

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="SEINFELD_TONIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
        populate_by_name=True,
    )

    # Enrichment service
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("SEINFELD_TONIGHT_OPENAI_API_KEY", "OPENAI_API_KEY", "openai_api_key"),
        description="Credential for the classification service; enrichment is skipped when empty",
    )
    openai_model: str = Field(default="gpt-4o-mini", description="Chat completion model used for enrichment")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="Base URL of the completion API")
    enrichment_temperature: float = Field(default=0.0, description="Sampling temperature for enrichment calls")

    # Enrichment budget and rate limiting
    enrich_all: bool = Field(default=False, description="Enrich every record, ignoring the per-kind caps")
    quote_enrich_limit: int = Field(default=120, ge=0, description="Enrich only the first N quotes of a run")
    episode_enrich_limit: int | None = Field(
        default=None, ge=0, description="Enrich only the first N episodes of a run (None means uncapped)"
    )
    episode_delay: float = Field(default=0.25, ge=0.0, description="Seconds to wait between episode calls")
    quote_delay: float = Field(default=0.2, ge=0.0, description="Seconds to wait between quote enrichment calls")
    page_delay: float = Field(default=0.15, ge=0.0, description="Seconds to wait between season page harvests")
    enrichment_max_attempts: int = Field(default=4, ge=1, description="Attempt budget for network-level failures")
    enrichment_backoff: float = Field(default=0.3, ge=0.0, description="Linear backoff step between attempts")

    # Retrieval
    request_timeout: float = Field(default=30.0, gt=0.0, description="HTTP timeout in seconds")
    user_agent: str = Field(default="seinfeld-tonight/1.0 (episode and quote scraper)")

    # Data locations
    data_dir: Path = Field(default=Path("data"), description="Directory the datasets are written to")
    topics_file: Path = Field(default=Path("data/topics.json"), description="Ordered JSON array of topic labels")

    scrape_debug: bool = Field(default=False, description="Emit parser diagnostics")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.

    Returns:
        Config: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Config: A fresh configuration instance
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance
