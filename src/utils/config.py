"""
Configuration management for ATS Assist.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
DATA_DIR = ROOT_DIR / "data"


class BackendSettings(BaseSettings):
    """Hosted backend (serverless functions) configuration."""

    model_config = SettingsConfigDict(env_prefix="BACKEND_")

    url: str = "http://localhost:54321"
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    assistant_function: str = "ai-assistant"
    timeout: float = 60.0

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the project URL so endpoint paths can be appended."""
        return v.rstrip("/")

    @property
    def assistant_endpoint(self) -> str:
        """Full URL of the AI assistant function."""
        return f"{self.url}/functions/v1/{self.assistant_function}"

    @property
    def bearer_token(self) -> Optional[str]:
        """Session token when signed in, public API key otherwise."""
        return self.access_token or self.api_key


class AssistantSettings(BaseSettings):
    """AI assistant chat configuration."""

    model_config = SettingsConfigDict(env_prefix="ASSISTANT_")

    # Number of prior messages sent along with each question
    history_limit: int = Field(default=10, ge=0)

    session_directory: Path = DATA_DIR / "sessions"

    # Fallback block recovery needs at least this much prose
    min_recovered_block_length: int = Field(default=50, ge=1)

    max_follow_ups: int = Field(default=3, ge=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "ats_assist.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "ATS Assist"
    version: str = "0.1.0"
    description: str = "Recruitment assistant toolkit"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    backend: BackendSettings = Field(default_factory=BackendSettings)
    assistant: AssistantSettings = Field(default_factory=AssistantSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
