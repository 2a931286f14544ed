"""Content store access for the feed fetcher."""

from .store import BaseStore, SupabaseStore

__all__ = ["BaseStore", "SupabaseStore"]
