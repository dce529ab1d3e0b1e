from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"
    base_url: str = "http://localhost:8000"
    cors_allow_origins: list[str] = ["*"]

    merge_max_days_apart: int = 7
    duplicate_proximity_days: int = 3

    max_upload_bytes: int = 10 * 1024 * 1024

    document_ai_enabled: bool = False
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    document_ai_timeout_seconds: float = 20.0
    document_ai_max_chars: int = 12000


settings = Settings()
