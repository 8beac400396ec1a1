"""Study log configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings

STORAGE_KEY = "studyLogsV2"


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "STUDYLOG_",
    }

    # Storage
    storage_backend: Literal["memory", "file", "sql", "redis"] = "file"
    storage_key: str = STORAGE_KEY
    storage_path: Path = Path("study_log.json")
    database_url: str = "sqlite:///study_log.db"
    redis_url: str = "redis://localhost:6379"

    # Calendar / review
    timezone: str = "local"
    week_start: Literal["sunday", "monday"] = "sunday"
    max_review_offset: int = 30

    # Import / wipe safety net, disabled when unset
    auto_backup_dir: Optional[Path] = None

    # HTTP API
    host: str = "0.0.0.0"
    port: int = 8000


settings = Settings()
