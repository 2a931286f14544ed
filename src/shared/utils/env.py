"""Environment variable loading utilities.

Loads ``.env`` files so that Supabase credentials and ``FETCHER_*`` settings
can live next to the checkout instead of the shell profile.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _candidate_env_files(env_file: Optional[str]) -> List[Path]:
    if env_file:
        env_path = Path(env_file)
        return [env_path] if env_path.exists() else []

    # Closest first; without override the first file to set a variable wins
    current = Path.cwd()
    paths = []
    for directory in [current, *current.parents]:
        candidate = directory / ".env"
        if candidate.exists():
            paths.append(candidate)
    return paths


def load_env(env_file: Optional[str] = None, override: bool = False) -> List[Path]:
    """Load environment variables from .env files.

    Args:
        env_file: Path to .env file. If None, searches for .env in current
                 directory and parent directories.
        override: Whether to override existing environment variables.

    Returns:
        The files that were found, closest first.
    """
    env_paths = _candidate_env_files(env_file)

    if not env_paths:
        logger.debug("No .env file found, using system environment")
        return []

    for path in (reversed(env_paths) if override else env_paths):
        load_dotenv(path, override=override)
        logger.debug(f"Loaded environment from {path}")

    return env_paths
