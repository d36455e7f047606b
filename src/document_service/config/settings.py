"""Settings module using pydantic-settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service Configuration
    service_name: str = Field(default="document-service")
    environment: str = Field(default="development")
    port: int = Field(default=3000)
    host: str = Field(default="0.0.0.0")

    # Storage Configuration
    data_dir: str = Field(default="./data")
    snapshot_file: str = Field(default="documents.json")
    upload_dir: Optional[str] = Field(
        default="./uploads",
        description="Where raw uploads are archived; unset to skip archiving"
    )
    static_dir: str = Field(default="./static")

    # Upload Configuration
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}

    @property
    def snapshot_path(self) -> Path:
        return Path(self.data_dir) / self.snapshot_file

    @property
    def upload_path(self) -> Optional[Path]:
        return Path(self.upload_dir) if self.upload_dir else None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
