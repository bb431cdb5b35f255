"""
config.py
Environment-based settings (.env or process environment) and logging setup.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dashboard settings, read from YENG_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="YENG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend
    API_URL: str = "http://localhost:3000"
    REQUEST_TIMEOUT: float = 15.0

    # Local client storage (auth token only)
    STORAGE_FILE: str = str(Path(__file__).with_name("yeng_admin.db"))

    LOG_LEVEL: str = "INFO"

    @property
    def api_base(self) -> str:
        return self.API_URL.rstrip("/")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
