"""Utility helpers for the feed fetcher."""

from .client import HttpClient

__all__ = ["HttpClient"]
