"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

SUPPORTED_LANGUAGES = ("en", "es")


class Settings(BaseSettings):
    """Console settings loaded from environment variables."""

    show_api_url: str = "http://localhost:5000/api"
    request_timeout_seconds: float = 10.0
    photo_poll_interval_seconds: float = 3.0
    countdown_seconds: int = 200
    countdown_tick_seconds: float = 1.0
    default_language: str = "es"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_language(raw: str | None) -> str | None:
    """Normalize a language code, returning None when unsupported."""
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    if cleaned in SUPPORTED_LANGUAGES:
        return cleaned
    return None
