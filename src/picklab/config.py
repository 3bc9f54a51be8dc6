"""Environment-driven configuration helpers for PickLab."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./picklab.db")

    # Display-only shortcut; the remote store enforces authorization on its own.
    admin_email: str = Field(default="", validation_alias="PICKLAB_ADMIN_EMAIL")

    slip_cache_key: str = Field(default="picklab_betting_slip")
    slip_cache_dir: Path = Field(default=Path(".picklab_cache"))
    slip_flush_delay_ms: int = Field(default=1000, ge=0)
    slip_max_sessions: int = Field(default=256, ge=1)

    default_decimal_odds: float = Field(default=1.85, ge=1.01)
    default_stake: float = Field(default=1000.0, ge=0.0)

    picklab_api_key: str = Field(default="", validation_alias="PICKLAB_API_KEY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_api_access_key() -> str:
    key = os.getenv("PICKLAB_API_KEY") or get_settings().picklab_api_key
    if not key:
        raise RuntimeError(
            "PICKLAB_API_KEY is not configured. Set it in your environment or .env file."
        )
    return key
