"""Configuration management using pydantic-settings."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GCP settings (required)
    gcp_project_id: str
    vertex_ai_location: str = "global"

    # Object storage (S3-compatible)
    blob_bucket: str
    blob_endpoint_url: str = ""
    blob_region: str = "us-east-1"
    blob_access_key_id: str = ""
    blob_secret_access_key: str = ""
    blob_public_base_url: str = ""
    blob_public_read: bool = True

    # Image generation
    image_provider: Literal["openai", "gemini"] = "openai"
    openai_api_key: str = ""
    openai_edit_model: str = "gpt-image-1"
    openai_generate_model: str = "dall-e-3"
    generate_image_size: str = "1024x1024"
    yearbook_generation_mode: Literal["edit", "generate"] = "generate"

    # Document store
    firestore_config_collection: str = "variant_configs"
    firestore_response_collection_suffix: str = "_responses"

    # Submission limits
    max_upload_bytes: int = 10 * 1024 * 1024
    http_timeout_seconds: float = 60.0

    # CORS
    frontend_origin: str = "http://localhost:3000"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
