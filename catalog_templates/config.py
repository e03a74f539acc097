"""Configuration management using Pydantic Settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_TEMPLATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Bundle rendering
    render_concurrency: int = Field(default=4, ge=1, le=64)

    # Output
    output_format: Literal["json", "yaml"] = "yaml"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
