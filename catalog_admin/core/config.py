"""Application configuration."""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    # YAML catalog written on startup when the collections are empty
    seed_file: Optional[str] = None

    # Admin dashboard
    admin_password: str
    session_ttl_hours: int = 24

    # Restaurant (public artifact header)
    restaurant_name: str = "Restaurant"
    restaurant_description: str = ""
    restaurant_email: str = ""
    restaurant_phone: str = ""
    restaurant_address: str = ""

    # Published artifacts
    artifact_dir: str = "published"
    public_base_url: str = "http://localhost:8000/published"

    # Translations
    default_language: str = "en"
    supported_languages: List[str] = ["es", "de", "nl", "fr", "it", "pt"]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
