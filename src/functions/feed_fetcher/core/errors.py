"""Exception hierarchy for the feed fetcher.

Worker-side errors are never raised across thread boundaries; they are
captured into the job's result and inspected by the coordinator.
"""

from __future__ import annotations

from typing import Optional


class FetcherError(Exception):
    """Base class for all feed fetcher errors."""


class TransportError(FetcherError):
    """HTTP or network failure while retrieving a feed or page."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status_code = status_code


class ParseError(FetcherError):
    """Feed document could not be parsed into entries."""


class ImageNotFoundError(FetcherError):
    """No usable candidate image was found for a page."""


class ImageWriteError(FetcherError):
    """Cropped image could not be encoded or written to disk."""


class StoreError(FetcherError):
    """Persistence layer failure."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
