"""
Feed document parsing.

Wraps ``feedparser`` so the rest of the fetcher only sees ``ParsedFeed`` and
``ParsedFeedItem`` values. RSS, Atom and RDF documents are all accepted.
"""

from __future__ import annotations

import calendar
import logging
import time
from dataclasses import dataclass, field
from datetime import timezone
from typing import Any, List, Mapping, Optional

import feedparser
from dateutil import parser as date_parser

from ..errors import ParseError

logger = logging.getLogger(__name__)

# Prevent memory issues with huge feeds
MAX_ENTRIES_TO_PROCESS = 1000

_DATE_FIELDS = ("published", "updated", "created")


@dataclass(slots=True)
class ParsedFeedItem:
    """One entry as the feed describes it."""

    id: str
    title: str = ""
    link: str = ""
    image: str = ""
    when: int = 0


@dataclass(slots=True)
class ParsedFeed:
    """A parsed feed document."""

    title: str = ""
    items: List[ParsedFeedItem] = field(default_factory=list)


def parse_feed(content: bytes, *, fetched_at: Optional[int] = None) -> ParsedFeed:
    """
    Parse a raw feed document.

    Args:
        content: Response body of the feed URL
        fetched_at: Epoch seconds used for entries that carry no date
            (defaults to now)

    Returns:
        ParsedFeed with one ParsedFeedItem per entry (possibly none)

    Raises:
        ParseError: If the body is empty or is not a feed document
    """
    if not content:
        raise ParseError("Empty feed document")

    try:
        feed = feedparser.parse(content)
    except Exception as e:  # feedparser guards most errors itself
        raise ParseError(f"Feed parser failed: {e}") from e

    entries = list(getattr(feed, "entries", None) or [])
    if not entries:
        if getattr(feed, "bozo", False):
            raise ParseError(f"Malformed feed: {getattr(feed, 'bozo_exception', 'unknown error')}")
        if not getattr(feed, "version", ""):
            raise ParseError("Document is not a recognised feed format")

    if getattr(feed, "bozo", False):
        logger.warning(f"Feed parsing warnings: {getattr(feed, 'bozo_exception', 'Unknown')}")

    fallback_when = int(time.time()) if fetched_at is None else fetched_at
    items = [
        _parse_entry(entry, fallback_when)
        for entry in entries[:MAX_ENTRIES_TO_PROCESS]
    ]

    title = feed.feed.get("title", "") if getattr(feed, "feed", None) else ""
    return ParsedFeed(title=title or "", items=items)


def _parse_entry(entry: Mapping[str, Any], fallback_when: int) -> ParsedFeedItem:
    link = entry.get("link") or ""
    title = entry.get("title") or ""
    return ParsedFeedItem(
        id=entry.get("id") or link or title,
        title=title,
        link=link,
        image=_entry_image(entry),
        when=_entry_timestamp(entry, fallback_when),
    )


def _entry_timestamp(entry: Mapping[str, Any], fallback_when: int) -> int:
    for date_field in _DATE_FIELDS:
        parsed = entry.get(f"{date_field}_parsed")
        if parsed:
            try:
                return calendar.timegm(parsed)
            except (TypeError, ValueError, OverflowError):
                continue

    # feedparser leaves *_parsed empty for formats it does not know
    for date_field in _DATE_FIELDS:
        raw = entry.get(date_field)
        if not raw:
            continue
        try:
            parsed_date = date_parser.parse(raw)
        except (ValueError, TypeError, OverflowError):
            continue
        if parsed_date.tzinfo is None:
            parsed_date = parsed_date.replace(tzinfo=timezone.utc)
        return int(parsed_date.timestamp())

    return fallback_when


def _entry_image(entry: Mapping[str, Any]) -> str:
    """Return a feed-supplied image URL, if the entry carries one."""

    for thumb in entry.get("media_thumbnail") or []:
        if thumb.get("url"):
            return thumb["url"]

    for media in entry.get("media_content") or []:
        url = media.get("url")
        if url and (media.get("medium") == "image" or (media.get("type") or "").startswith("image/")):
            return url

    for link in entry.get("links") or []:
        if link.get("rel") == "enclosure" and (link.get("type") or "").startswith("image/") and link.get("href"):
            return link["href"]

    image = entry.get("image")
    if isinstance(image, Mapping) and image.get("href"):
        return image["href"]

    return ""
