"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "MediaVault"
    # Public origin used for synthesized image/stream URLs; request origin when unset
    app_url: str | None = None
    cors_allow_origins: list[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 8000

    # Session
    login_code: str
    session_secret_key: str
    session_max_age_days: int = 7

    @field_validator("session_secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Ensure secret key is strong enough."""
        if len(v) < 32:
            raise ValueError("SESSION_SECRET_KEY must be at least 32 characters long")
        return v

    # Databases
    movies_database_url: str = "sqlite+aiosqlite:///./data/movies.db"
    manga_database_url: str = "sqlite+aiosqlite:///./data/manga.db"

    # Object storage
    storage_backend: Literal["s3", "local"] = "s3"
    s3_endpoint_url: str | None = None
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_region: str = "auto"
    local_storage_root: Path = Path("./data/buckets")

    movies_assets_bucket: str | None = None
    manga_bucket: str | None = None
    static_files_bucket: str | None = None

    movie_assets_base_prefix: str = ""
    manga_base_prefix: str = ""
    actor_thumbs_subfolder: str = "actor_thumbs"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
