"""Profile and follower records read from the content store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(slots=True)
class Profile:
    """A followable, feed-driven source."""

    pid: str
    feed_url: str
    follower_count: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        """Build a profile from a store row, tolerating loose column types."""

        try:
            follower_count = int(row.get("follower_count") or 0)
        except (TypeError, ValueError):
            follower_count = 0
        return cls(
            pid=str(row["pid"]),
            feed_url=str(row.get("feed_url") or ""),
            follower_count=max(0, follower_count),
        )


@dataclass(slots=True, frozen=True)
class Follower:
    """The following side of a follow edge."""

    pid: str
