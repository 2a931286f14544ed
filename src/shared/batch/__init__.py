"""Shared batch processing infrastructure.

Usage:
    from src.shared.batch import retry_on_network_error
"""

from .retry import retry_on_network_error

__all__ = ["retry_on_network_error"]
