"""Feed document parsing."""

from .parser import ParsedFeed, ParsedFeedItem, parse_feed

__all__ = ["ParsedFeed", "ParsedFeedItem", "parse_feed"]
