"""Supabase client construction for the content store."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from supabase import Client, ClientOptions, create_client

from src.shared.utils.config_validator import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupabaseConfig:
    """Project URL, API key and schema of the Supabase content store."""

    url: str
    key: str
    schema: str = "public"

    @classmethod
    def from_env(cls) -> "SupabaseConfig":
        """Read ``SUPABASE_URL``, ``SUPABASE_KEY`` and ``SUPABASE_SCHEMA``.

        Raises:
            ConfigurationError: If the URL or key is unset
        """
        missing = [name for name in ("SUPABASE_URL", "SUPABASE_KEY") if not os.getenv(name)]
        if missing:
            raise ConfigurationError(f"Missing Supabase settings: {', '.join(missing)}")
        return cls(
            url=os.environ["SUPABASE_URL"],
            key=os.environ["SUPABASE_KEY"],
            schema=os.getenv("SUPABASE_SCHEMA") or "public",
        )


def get_supabase_client(config: Optional[SupabaseConfig] = None) -> Client:
    """Create a Supabase client scoped to the configured schema."""

    config = config or SupabaseConfig.from_env()
    logger.debug("Creating Supabase client for %s (schema: %s)", config.url, config.schema)
    return create_client(config.url, config.key, options=ClientOptions(schema=config.schema))
