"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (OVERLAY_*)."""

    model_config = SettingsConfigDict(
        env_prefix="OVERLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Engine presets and per-entity overrides
    config_path: str = "overlay.yaml"

    # Snapshot persistence (one JSON file per entity); empty disables storage
    snapshot_dir: str = "data/snapshots"
    autosave: bool = True

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
