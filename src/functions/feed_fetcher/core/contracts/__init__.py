"""Data contracts for the feed fetcher."""

from .item import Item
from .profile import Follower, Profile
from .results import FeedFetchResult, FetchStatus, ImageFetchResult

__all__ = [
    "FeedFetchResult",
    "FetchStatus",
    "Follower",
    "ImageFetchResult",
    "Item",
    "Profile",
]
