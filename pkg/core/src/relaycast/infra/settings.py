"""
Application settings for Relaycast.

This module defines process-wide configuration using Pydantic BaseSettings.
The engine never reads these directly; the CLI wires them into the engine.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..config import defaults


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")  # console|json
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    # Encoder process
    ffmpeg_bin: str = Field(default=defaults.FFMPEG_BIN, alias="FFMPEG_BIN")
    placeholder_path: str = Field(default=defaults.PLACEHOLDER_PATH, alias="PLACEHOLDER_PATH")

    # Retry / lifecycle timing
    max_retry_attempts: int = Field(default=defaults.MAX_RETRY_ATTEMPTS, alias="MAX_RETRY_ATTEMPTS")
    retry_base_delay: float = Field(default=defaults.RETRY_BASE_DELAY, alias="RETRY_BASE_DELAY")
    advance_delay: float = Field(default=defaults.ADVANCE_DELAY, alias="ADVANCE_DELAY")
    stop_grace_seconds: float = Field(default=defaults.STOP_GRACE_SECONDS, alias="STOP_GRACE_SECONDS")
    restart_pause_seconds: float = Field(
        default=defaults.RESTART_PAUSE_SECONDS, alias="RESTART_PAUSE_SECONDS"
    )

    # Destination
    ingest_url: str = Field(default="", alias="RELAY_INGEST_URL")
    stream_key: str = Field(default="", alias="RELAY_STREAM_KEY")
    backup_url: str = Field(default="", alias="RELAY_BACKUP_URL")
    platform_name: str = Field(default=defaults.PLATFORM_NAME, alias="RELAY_PLATFORM_NAME")

    # Queue
    catalog_path: str = Field(default="", alias="RELAY_CATALOG_PATH")
    loop: bool = Field(default=False, alias="RELAY_LOOP")

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("RELAYCAST_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


def load_settings() -> Settings:
    """Build settings from the environment and the nearest .env file."""
    env_file = _resolve_env_file()
    return Settings(_env_file=env_file) if env_file else Settings()  # type: ignore[call-arg]


# Global settings instance (load from best-effort .env discovery)
settings = load_settings()
