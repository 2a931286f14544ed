"""Typed per-job results emitted by the worker pools."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .item import Item
from .profile import Profile


class FetchStatus(str, Enum):
    """Outcome of a single fetch job."""

    OK = "ok"
    EMPTY = "empty"
    PARSE_ERROR = "parse_error"
    TRANSPORT_ERROR = "transport_error"
    NOT_FOUND = "not_found"
    WRITE_ERROR = "write_error"
    FAILED = "failed"


@dataclass(slots=True)
class FeedFetchResult:
    """Outcome of fetching and parsing one profile's feed.

    ``items`` is ``None`` only when the feed could not be retrieved at all;
    an unparseable feed yields an empty list so it still counts as processed.
    """

    profile: Profile
    status: FetchStatus
    items: Optional[List[Item]] = None
    error: Optional[BaseException] = None

    @property
    def processed(self) -> bool:
        return self.items is not None

    @property
    def ok(self) -> bool:
        return self.status in (FetchStatus.OK, FetchStatus.EMPTY)


@dataclass(slots=True)
class ImageFetchResult:
    """Outcome of backfilling one item's image."""

    item: Item
    status: FetchStatus
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK
