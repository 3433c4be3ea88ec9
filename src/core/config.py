"""Configuration management for plane-bulk."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Fuzzy Matching Configuration
    fuzzy_min_score: int = Field(default=60, description="Minimum fuzzy match score (0-100)")
    fuzzy_max_results: int = Field(
        default=10, description="Maximum number of ranked matches shown when searching (0 = unlimited)"
    )

    # Bulk Update Configuration
    bulk_max_concurrency: int = Field(
        default=1, description="Number of simultaneous update calls during a bulk update (1-5)"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Score bounds
    MIN_SCORE: int = 0
    MAX_SCORE: int = 100

    # Score assigned to plain substring hits when fuzzy matching finds nothing
    SUBSTRING_FALLBACK_SCORE: int = 50

    # Bulk update
    MAX_BULK_CONCURRENCY: int = 5

    # Preview rendering
    PREVIEW_TITLE_WIDTH: int = 50


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
