"""
Feed fetch worker.

Retrieves one profile's feed per job and turns every entry into an ``Item``.
Transport failures yield a result without items; parse failures yield an
empty item list so the profile still counts as processed.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import FetcherConfig
from ..contracts import FeedFetchResult, FetchStatus, Item, Profile
from ..errors import ParseError, TransportError
from ..feeds import ParsedFeed, parse_feed
from ..identifiers import content_id
from ..utils import HttpClient
from .pool import BaseWorker, WorkerPool

logger = logging.getLogger(__name__)


def items_from_feed(pid: str, feed: Optional[ParsedFeed]) -> List[Item]:
    """Map parsed feed entries to items owned by ``pid``."""

    if feed is None:
        return []
    return [
        Item(
            id=content_id(entry.id),
            pid=pid,
            event=entry.when,
            text=entry.title,
            link=entry.link,
            image=entry.image,
        )
        for entry in feed.items
    ]


def build_http_client(config: FetcherConfig) -> HttpClient:
    return HttpClient(
        user_agent=config.user_agent,
        timeout=config.http_timeout_seconds,
        max_retries=config.max_retries,
    )


class FeedFetchWorker(BaseWorker[Profile, FeedFetchResult]):
    """Fetches and parses feeds for the feed poll."""

    def __init__(
        self,
        worker_id: int,
        config: FetcherConfig,
        http_client: Optional[HttpClient] = None,
    ) -> None:
        super().__init__(worker_id)
        self.config = config
        self.http_client = http_client or build_http_client(config)

    def process(self, profile: Profile) -> FeedFetchResult:
        logger.info("Feed worker %d processing feed %s", self.worker_id, profile.feed_url)

        try:
            body = self.http_client.get_feed(profile.feed_url)
        except TransportError as exc:
            logger.warning("Feed worker %d got http error %s", self.worker_id, exc)
            return FeedFetchResult(profile=profile, status=FetchStatus.TRANSPORT_ERROR, items=None, error=exc)

        try:
            feed = parse_feed(body)
        except ParseError as exc:
            logger.warning("Feed worker %d could not parse %s: %s", self.worker_id, profile.feed_url, exc)
            return FeedFetchResult(profile=profile, status=FetchStatus.PARSE_ERROR, items=[], error=exc)

        items = items_from_feed(profile.pid, feed)
        status = FetchStatus.OK if items else FetchStatus.EMPTY
        return FeedFetchResult(profile=profile, status=status, items=items)

    def failure(self, profile: Profile, exc: BaseException) -> FeedFetchResult:
        return FeedFetchResult(profile=profile, status=FetchStatus.FAILED, items=None, error=exc)

    def close(self) -> None:
        self.http_client.close()


def feed_fetch_pool(config: FetcherConfig) -> WorkerPool[Profile, FeedFetchResult]:
    """Build the feed fetch pool sized from ``config``."""

    return WorkerPool(
        "feed",
        config.feed_workers,
        lambda worker_id: FeedFetchWorker(worker_id, config),
    )
