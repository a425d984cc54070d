"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_TIME_RANGES = ("3m", "6m", "12m", "24m")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OPSBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")

    # Engine defaults
    default_chart_range: str = Field(
        default="12m", description="Trailing window for trend charts"
    )
    default_table_range: str = Field(
        default="24m", description="Trailing window for monthly tables"
    )
    leaderboard_limit: int = Field(
        default=20, ge=1, le=500, description="Entities shown per leaderboard"
    )
    default_alert_threshold: float = Field(
        default=10.0,
        ge=0.0,
        description="Percent change that triggers drift/pacing alerts (0 = show all)",
    )

    # Development
    dev_mode: bool = Field(default=True, description="Development mode")
    testing: bool = Field(default=False, description="Testing mode")

    @field_validator("default_chart_range", "default_table_range")
    @classmethod
    def validate_time_range(cls, v: str) -> str:
        """Ensure time ranges use the dashboard's range tokens."""
        v = v.strip().lower()
        if v not in VALID_TIME_RANGES:
            raise ValueError(
                f"Time range must be one of: {', '.join(VALID_TIME_RANGES)}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()
