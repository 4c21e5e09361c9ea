"""
BaseDrop Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local use, so the service runs
    with no configuration at all. Attributes are grouped by concern.
    """

    # ── File Storage ──────────────────────────────────────────────────────
    # What: Directory holding uploaded images, served under /image
    image_dir: str = Field(default="./image")

    # What: Directory holding the per-TH category files (baseth<N>.json)
    base_dir: str = Field(default="./base")

    # What: Maximum accepted upload size in bytes
    # Default: 5MB = 5 * 1024 * 1024 = 5242880
    # Valid range: 1KB to 50MB
    max_file_size: int = Field(default=5_242_880, ge=1024, le=52_428_800)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # What: Root logger verbosity
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # IMAGE_DIR and image_dir both work
    }


# Singleton instance, imported throughout the application
settings = Settings()
