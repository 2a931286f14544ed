"""Configuration management for the feed fetcher."""

from .loader import (
    FetcherConfig,
    StoreSettings,
    build_fetcher_config,
    build_store_settings,
    check_environment,
)

__all__ = [
    "FetcherConfig",
    "StoreSettings",
    "build_fetcher_config",
    "build_store_settings",
    "check_environment",
]
