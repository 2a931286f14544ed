"""
Configuration validation utilities.

Validates environment variables and filesystem paths with clear error messages.
"""

import os
from pathlib import Path
from typing import Optional, Union


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_int_env(name: str, default: Optional[int] = None, min_value: Optional[int] = None,
                     max_value: Optional[int] = None) -> int:
    """
    Validate an integer environment variable.

    Args:
        name: Environment variable name
        default: Default value if not set
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        The validated integer value

    Raises:
        ConfigurationError: If the value is invalid
    """
    value_str = os.getenv(name)

    if not value_str:
        if default is None:
            raise ConfigurationError(f"Missing required integer environment variable: {name}")
        return default

    try:
        value = int(value_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid integer value for {name}: '{value_str}'\n"
            f"Expected an integer value."
        )

    if min_value is not None and value < min_value:
        raise ConfigurationError(
            f"Value for {name} ({value}) is below minimum allowed value ({min_value})"
        )

    if max_value is not None and value > max_value:
        raise ConfigurationError(
            f"Value for {name} ({value}) exceeds maximum allowed value ({max_value})"
        )

    return value


def validate_bool_env(name: str, default: bool = False) -> bool:
    """
    Validate a boolean environment variable.

    Accepts: true, false, yes, no, 1, 0 (case-insensitive)

    Args:
        name: Environment variable name
        default: Default value if not set

    Returns:
        The validated boolean value

    Raises:
        ConfigurationError: If the value is invalid
    """
    value_str = os.getenv(name)

    if not value_str:
        return default

    value_lower = value_str.lower()

    if value_lower in ("true", "yes", "1"):
        return True
    elif value_lower in ("false", "no", "0"):
        return False
    else:
        raise ConfigurationError(
            f"Invalid boolean value for {name}: '{value_str}'\n"
            f"Expected one of: true, false, yes, no, 1, 0"
        )


def require_directory(path: Union[str, Path], description: str = "directory") -> Path:
    """
    Require a filesystem path to exist and be a directory.

    Args:
        path: Path to check
        description: Human readable name used in error messages

    Returns:
        The path as a Path object

    Raises:
        ConfigurationError: If the path is missing, unreadable, or not a directory
    """
    directory = Path(path)

    try:
        is_dir = directory.is_dir()
        exists = is_dir or directory.exists()
    except OSError as exc:
        raise ConfigurationError(f"Could not stat {description} {directory}: {exc}") from exc

    if not exists:
        raise ConfigurationError(f"Could not open {description} {directory}: no such file or directory")

    if not is_dir:
        raise ConfigurationError(f"{description.capitalize()} is not a directory: {directory}")

    return directory
