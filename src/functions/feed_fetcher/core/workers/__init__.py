"""Concurrent fetch workers for both pipeline stages."""

from .feed_worker import FeedFetchWorker, feed_fetch_pool, items_from_feed
from .image_worker import ImageFetchWorker, image_fetch_pool, image_filename
from .pool import BaseWorker, WorkerPool

__all__ = [
    "BaseWorker",
    "FeedFetchWorker",
    "ImageFetchWorker",
    "WorkerPool",
    "feed_fetch_pool",
    "image_fetch_pool",
    "image_filename",
    "items_from_feed",
]
