"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Generative language API
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Document store (Firestore REST)
    firebase_api_key: str = ""
    firebase_project_id: str = ""
    firebase_auth_domain: str = ""
    firestore_base_url: str = "https://firestore.googleapis.com/v1"

    # Local config blob
    config_path: Path = Path.home() / ".shn_canvas" / "config.json"

    # Extraction pacing (seconds)
    interactive_batch_delay_seconds: float = 2.0
    batch_delay_seconds: float = 0.5
    default_batch_size: int = 10

    # Outbound HTTP
    http_timeout_seconds: float = 120.0

    # UI
    backend_url: str = "http://localhost:8000"

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
