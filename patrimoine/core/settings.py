"""Application settings with environment variable support.

Uses pydantic-settings for typed configuration validation.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: Optional[str] = Field(default=None, description="Logging level, LOGLEVEL or INFO when unset")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    log_to_file: bool = Field(default=False, description="Also write a rotating log file")
    log_dir: str = Field(default="logs", description="Directory of the log file")

    # Export
    export_dir: str = Field(default="results", description="Root directory of CSV exports")

    # Performance
    max_workers: Optional[int] = Field(default=None, ge=1, description="Monte-Carlo worker processes")

    # Fiscal model
    fiscal_config_path: Optional[str] = Field(
        default=None, description="JSON fiscal model; packaged defaults when unset"
    )

    model_config = {
        "env_prefix": "PATRIMOINE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
