"""
Centralized configuration management.

Settings are read from environment variables (a local .env is loaded by main)
and validated once.
"""
import os
import logging
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Application settings with validation."""

    # Uploads
    upload_dir: str = Field(default="uploads", min_length=1, description="Directory for uploaded raw files")
    max_file_size_mb: int = Field(default=50, ge=1, le=1000, description="Maximum upload size in MB")
    max_file_rows: int = Field(default=1000000, ge=1, description="Maximum rows in an uploaded file")
    max_file_columns: int = Field(default=1000, ge=1, description="Maximum columns in an uploaded file")

    # Rate limiting on the upload endpoint
    rate_limit_per_minute: int = Field(default=30, ge=1, le=1000, description="Upload rate limit per minute per IP")

    request_timeout_seconds: int = Field(default=120, ge=1, le=3600, description="Request timeout in seconds")

    allowed_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Optional directory with a static frontend served at /
    static_dir: Optional[str] = Field(default=None, description="Static frontend directory")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got '{v}'")
        return v.upper()

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "50")),
            max_file_rows=int(os.getenv("MAX_FILE_ROWS", "1000000")),
            max_file_columns=int(os.getenv("MAX_FILE_COLUMNS", "1000")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
            request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT_SECONDS", "120")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            static_dir=os.getenv("STATIC_DIR") or None,
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings from the environment (used by tests)."""
    global _settings
    _settings = None
    return get_settings()
