"""Settings for the API routes and the dashboard gateway, via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Read from environment variables, then from a local .env file.

    Missing API keys are not an error here; the routes that need a key
    reject requests until it is configured.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Notion
    notion_api_key: str = ""
    notion_timeout_ms: int = 60_000

    # Gemini
    gemini_api_key: str = ""
    gemini_timeout_ms: int = 60_000
    stt_base_prompt: str = ""  # vocabulary hints for transcription

    # Dashboard gateway
    dashboard_base_url: str = "http://localhost:8080"

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Build settings on first use so importing the package never reads the environment."""
    return Settings()
