"""Configuration management for rewardkit."""

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

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/rewardkit.db", description="SQLite database file path")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")

    # Pagination
    default_per_page: int = Field(default=50, description="Default page size for list queries")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Goal validation
    GOAL_TITLE_MIN_LENGTH: int = 2
    GOAL_TITLE_MAX_LENGTH: int = 100

    # Task validation
    TASK_DURATION_CHOICES: tuple[int, ...] = (5, 15, 30, 60, 120)  # minutes
    TASK_DUE_TIME_PATTERN: str = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"  # "HH:MM"

    # Logfire
    SERVICE_NAME: str = "rewardkit"
    SERVICE_VERSION: str = "0.1.0"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
