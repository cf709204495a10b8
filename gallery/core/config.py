"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gallery.images.validation import (
    ALLOWED_FORMATS,
    MAX_FILE_SIZE,
    MAX_IMAGES_PER_CARD,
)
from gallery.images.compression import COMPRESSION_QUALITY, MAX_DIMENSION


class Settings(BaseSettings):
    """Application settings loaded from environment variables and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App Info
    app_name: str = "Card Gallery API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8400
    workers: int = 1

    # Database
    data_folder: str = "./data"
    db_file: str = "gallery.db"

    @property
    def database_url(self) -> str:
        """SQLite database URL."""
        db_path = Path(self.data_folder) / self.db_file
        return f"sqlite+aiosqlite:///{db_path}"

    # Blob storage
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")
    storage_root: str = "./data/blobs"
    public_base_url: str = Field(
        default="http://localhost:8400/blobs",
        alias="PUBLIC_BASE_URL",
    )
    storage_http_url: str | None = Field(default=None, alias="STORAGE_HTTP_URL")
    storage_http_token: str | None = Field(default=None, alias="STORAGE_HTTP_TOKEN")

    # Image policy
    max_images_per_card: int = MAX_IMAGES_PER_CARD
    max_file_size: int = MAX_FILE_SIZE
    allowed_formats: list[str] = list(ALLOWED_FORMATS)
    compression_quality: float = COMPRESSION_QUALITY
    max_dimension: int = MAX_DIMENSION

    # Optional YAML file overriding the image policy
    gallery_cfg_path: str | None = Field(default=None, alias="GALLERY_CFG_PATH")

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @field_validator("storage_backend", mode="before")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        """Lower-case the backend name and reject unknown ones."""
        v = str(v).strip().lower()
        if v not in ("local", "http", "memory"):
            raise ValueError(f"Unknown storage backend: {v}")
        return v

    @field_validator("public_base_url", "storage_http_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Remove trailing slash so paths can be joined with '/'."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v


class GalleryConfig:
    """Image policy overrides loaded from a YAML file."""

    def __init__(self, config_path: str | None = None):
        self._config: dict[str, Any] = {}
        if config_path:
            self.load(config_path)

    def load(self, config_path: str) -> None:
        """Load configuration from YAML file."""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                self._config = yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key."""
        return self._config.get(key, default)

    def apply(self, settings: Settings) -> Settings:
        """Return a copy of settings with the policy keys from the file applied."""
        policy_keys = (
            "max_images_per_card",
            "max_file_size",
            "compression_quality",
            "max_dimension",
        )
        overrides = {k: self._config[k] for k in policy_keys if k in self._config}
        if not overrides:
            return settings
        return settings.model_copy(update=overrides)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    if settings.gallery_cfg_path:
        settings = GalleryConfig(settings.gallery_cfg_path).apply(settings)
    return settings
