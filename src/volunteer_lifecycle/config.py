"""Configuration management for the volunteer application lifecycle engine."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VOLUNTEER_",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # Interview Configuration
    default_interview_duration_minutes: int = Field(
        30, ge=1, description="Interview length used when none is given"
    )
    reschedule_reason_max_length: int = Field(
        200, ge=1, description="Maximum length of a reschedule reason"
    )

    # Matching Configuration
    strong_match_threshold: float = Field(
        70.0, ge=0, le=100, description="Factor score counted as a strong match"
    )


# Global settings instance
settings = Settings()
