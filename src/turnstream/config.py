"""Configuration management for turnstream."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from turnstream.errors import ApiKeyNotConfiguredError

DEFAULT_MODEL = "gemini-live-2.5-flash-preview"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TURNSTREAM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Live API
    api_key: str | None = Field(None, description="API key for the Live API")
    model: str = Field(default=DEFAULT_MODEL, description="Live model name")
    host: str = Field(default="generativelanguage.googleapis.com", description="Live API host")
    response_modality: Literal["TEXT", "AUDIO"] = Field(default="TEXT", description="Modality requested from the model")
    system_instruction: str | None = Field(None, description="System instruction sent in the setup message")
    connect_timeout_seconds: float = Field(default=10.0, description="Time allowed for setupComplete")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ApiKeyNotConfiguredError("TURNSTREAM_API_KEY is not set")
        return self.api_key


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment and apply non-empty overrides."""
    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
