"""
Configuration and settings for the media board backend.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Generated upload URLs are always built from this base, never from the
    # incoming request host.
    public_base_url: str = Field(default="http://localhost:3000")

    # Flat record files live in data_dir, uploaded files in upload_dir.
    data_dir: str = Field(default=".")
    upload_dir: str = Field(default="uploads")

    # Size ceilings
    media_max_bytes: int = Field(default=200 * MIB)
    sound_max_bytes: int = Field(default=10 * MIB)
    max_body_bytes: int = Field(default=10 * MIB)

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Development toggles
    use_in_memory_store: bool = Field(default=False)

    log_level: str = Field(default="INFO")

    def upload_url(self, filename: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/uploads/{filename}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
