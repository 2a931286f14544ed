"""
Configuration for the feed fetcher.

Settings resolve in order: explicit overrides (CLI flags or request payload),
``FETCHER_*`` environment variables, then the defaults below. The resulting
``FetcherConfig`` is passed explicitly to every orchestrator and worker.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.shared.utils.config_validator import (
    ConfigurationError,
    require_directory,
    validate_bool_env,
    validate_int_env,
)

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_DIR = "/var/opt/timescroll/img"
DEFAULT_FEED_INTERVAL_MINUTES = 30
DEFAULT_WORKERS = 3
DEFAULT_IMAGE_BATCH_SIZE = 30
DEFAULT_IMAGE_WIDTH = 460
DEFAULT_IMAGE_HEIGHT = 160
DEFAULT_USER_AGENT = "Timescroll-Fetcher/1.0"


class FetcherConfig(BaseModel):
    """Operational configuration for one fetcher process."""

    image_dir: Path = Field(default=Path(DEFAULT_IMAGE_DIR), description="Directory receiving cropped images")
    feed_interval_minutes: int = Field(default=DEFAULT_FEED_INTERVAL_MINUTES, ge=1, le=1440)
    run_once: bool = Field(default=False)
    feed_workers: int = Field(default=DEFAULT_WORKERS, ge=1, le=16)
    image_workers: int = Field(default=DEFAULT_WORKERS, ge=1, le=16)
    image_batch_size: int = Field(default=DEFAULT_IMAGE_BATCH_SIZE, ge=1, le=500)
    image_width: int = Field(default=DEFAULT_IMAGE_WIDTH, ge=1, le=4096)
    image_height: int = Field(default=DEFAULT_IMAGE_HEIGHT, ge=1, le=4096)
    http_timeout_seconds: int = Field(default=30, ge=5, le=300)
    max_retries: int = Field(default=2, ge=0, le=10)
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)

    @field_validator("user_agent")
    @classmethod
    def _strip_user_agent(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("user_agent must be a non-empty string")
        return cleaned

    @property
    def feed_interval_seconds(self) -> int:
        return self.feed_interval_minutes * 60

    def image_path(self, filename: str) -> Path:
        """Return the on-disk location for an image filename."""

        return self.image_dir / filename

    def snapshot(self) -> Dict[str, object]:
        """Return a serialisable snapshot for reporting."""

        return self.model_dump(mode="json")


class StoreSettings(BaseModel):
    """Table layout of the Supabase-backed content store."""

    profile_table: str = Field(default="profiles")
    item_table: str = Field(default="items")
    follower_table: str = Field(default="followers")
    item_on_conflict: str = Field(default="id")


_ENV_INT_SETTINGS = {
    "feed_interval_minutes": ("FETCHER_FEED_INTERVAL", DEFAULT_FEED_INTERVAL_MINUTES),
    "feed_workers": ("FETCHER_FEED_WORKERS", DEFAULT_WORKERS),
    "image_workers": ("FETCHER_IMAGE_WORKERS", DEFAULT_WORKERS),
    "image_batch_size": ("FETCHER_IMAGE_BATCH_SIZE", DEFAULT_IMAGE_BATCH_SIZE),
    "image_width": ("FETCHER_IMAGE_WIDTH", DEFAULT_IMAGE_WIDTH),
    "image_height": ("FETCHER_IMAGE_HEIGHT", DEFAULT_IMAGE_HEIGHT),
    "http_timeout_seconds": ("FETCHER_HTTP_TIMEOUT", 30),
    "max_retries": ("FETCHER_MAX_RETRIES", 2),
}


def build_fetcher_config(overrides: Optional[Dict[str, Any]] = None) -> FetcherConfig:
    """
    Build the fetcher configuration from overrides and the environment.

    Args:
        overrides: Explicit values; ``None`` entries fall through to the environment

    Returns:
        Validated FetcherConfig

    Raises:
        ConfigurationError: If an environment value or override is invalid
    """
    overrides = {key: value for key, value in (overrides or {}).items() if value is not None}

    values: Dict[str, Any] = {
        "image_dir": os.getenv("FETCHER_IMAGE_DIR", DEFAULT_IMAGE_DIR),
        "run_once": validate_bool_env("FETCHER_RUN_ONCE", False),
        "user_agent": os.getenv("FETCHER_USER_AGENT", DEFAULT_USER_AGENT),
    }
    for key, (env_name, default) in _ENV_INT_SETTINGS.items():
        if key not in overrides:
            values[key] = validate_int_env(env_name, default=default)

    values.update(overrides)

    try:
        config = FetcherConfig(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid fetcher configuration: {exc}") from exc

    logger.debug("Fetcher configuration: %s", config.snapshot())
    return config


def build_store_settings() -> StoreSettings:
    """Read optional table name overrides from the environment."""

    return StoreSettings(
        profile_table=os.getenv("FETCHER_PROFILE_TABLE", "profiles"),
        item_table=os.getenv("FETCHER_ITEM_TABLE", "items"),
        follower_table=os.getenv("FETCHER_FOLLOWER_TABLE", "followers"),
    )


def check_environment(config: FetcherConfig) -> None:
    """
    Verify the runtime environment before any network activity.

    Raises:
        ConfigurationError: If the image directory is missing or not a directory
    """
    require_directory(config.image_dir, "image directory")
