"""Application configuration and environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Book Store Service"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Snapshot storage
    db_file: str = "db.json"
    create_if_missing: bool = True
    serialize_writes: bool = False  # Off keeps the plain read-modify-write cycle

    # Aggregations
    recommendation_count: int = 3
    top_authors_limit: int = 5

    model_config = SettingsConfigDict(
        env_prefix="BOOK_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

