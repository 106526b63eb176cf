"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/merknad/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class ImageSettings(BaseModel):
    """Image intake: downscale target, lossy output format and size ceiling.

    ``max_encoded_bytes`` is calibrated against the size *estimate* from
    ``image_intake.estimate_encoded_size``, not against exact byte counts.
    """

    target_width: int = Field(default=600, gt=0)
    output_format: Literal["JPEG", "WEBP"] = "JPEG"
    quality: int = Field(default=75, ge=1, le=100)
    max_encoded_bytes: int = Field(default=5_000_000, gt=0)


class EditorSettings(BaseModel):
    """Comment editor behaviour."""

    # Passive paste detection only notifies unless this is switched on.
    auto_correct_on_change: bool = False
    clipboard_timeout: float = 5.0
    height: str = "200px"
    language: Literal["nb-NO", "en-US"] = "nb-NO"


class AppConfig(BaseModel):
    """Application runtime configuration."""

    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    log_dir: Path = Path("logs")


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``IMAGE__TARGET_WIDTH``, ``EDITOR__AUTO_CORRECT_ON_CHANGE``,
    ``APP__PORT``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    image: ImageSettings = ImageSettings()
    editor: EditorSettings = EditorSettings()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
