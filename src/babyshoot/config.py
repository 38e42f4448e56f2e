"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    astria_api_key: str
    astria_base_url: str = "https://api.astria.ai"
    astria_base_tune_id: int = 1504944
    astria_model_type: str = "lora"
    astria_token: str = "ohwx"
    astria_class_name: str = "person"
    astria_webhook_secret: str | None = None
    public_base_url: str | None = None
    cron_secret: str
    internal_api_key: str | None = None
    storage_bucket: str = "generated-images"
    store_generated_images: bool = True
    model_reuse_days: int = 30
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_bearer_tokens(*secrets: str | None) -> set[str]:
    """Return accepted Authorization header values for the given secrets."""
    tokens: set[str] = set()
    for secret in secrets:
        if secret is None:
            continue
        cleaned = secret.strip()
        if cleaned:
            tokens.add(f"Bearer {cleaned}")
    return tokens
