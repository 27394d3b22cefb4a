"""Configuration settings for the Currency Converter API."""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    # External rate provider
    rate_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    rate_api_timeout_ms: int = 5000

    # Logging
    log_level: str = "INFO"

    @field_validator("api_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port numbers are in valid range."""
        if not 1 <= v <= 65535:
            msg = "Port must be between 1 and 65535"
            raise ValueError(msg)
        return v

    @field_validator("rate_api_base_url")
    @classmethod
    def validate_rate_api_base_url(cls, v: str) -> str:
        """Validate the rate provider URL and drop any trailing slash."""
        if not v:
            msg = "Rate API base URL cannot be empty"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("rate_api_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout values."""
        if v <= 0:
            msg = "Rate API timeout must be positive"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is a standard logging level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level


# Global settings instance
settings = Settings()
