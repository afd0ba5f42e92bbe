"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Object storage (Supabase-compatible REST API)
    storage_url: str = "http://localhost:54321"
    storage_bucket: str = "application-files"
    storage_service_key: str = ""
    signed_url_expiry_seconds: int = 3600

    # Auth provider
    auth_url: str = "http://localhost:54321"
    auth_api_key: str = ""

    # Application
    app_name: str = "Hireflow API"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    page_size: int = 10
    http_timeout_seconds: float = 10.0

    # CORS
    frontend_cors_origin: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
