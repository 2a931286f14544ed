"""
Test doubles and sample documents for the feed fetcher tests.

Provides feed documents, an in-memory content store and fake HTTP
collaborators so the pipelines can run without network or Supabase access.
"""

from __future__ import annotations

import io
from typing import Dict, List, Optional, Set, Tuple, Union

from PIL import Image

from src.functions.feed_fetcher.core.contracts import Follower, Item, Profile
from src.functions.feed_fetcher.core.db import BaseStore
from src.functions.feed_fetcher.core.errors import StoreError, TransportError

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Example Blog</title>
    <link>https://blog.example.com/</link>
    <description>Posts</description>
    <item>
      <guid>https://blog.example.com/?p=1</guid>
      <title>First post</title>
      <link>https://blog.example.com/first</link>
      <pubDate>Mon, 06 Sep 2021 16:45:00 +0000</pubDate>
      <media:thumbnail url="https://cdn.example.com/first.jpg" />
    </item>
    <item>
      <guid>https://blog.example.com/?p=2</guid>
      <title>Second post</title>
      <link>https://blog.example.com/second</link>
      <pubDate>Tue, 07 Sep 2021 08:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>
"""

SAMPLE_ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>urn:example:feed</id>
  <updated>2021-09-06T16:45:00Z</updated>
  <entry>
    <id>urn:example:entry:1</id>
    <title>Atom entry</title>
    <link rel="alternate" href="https://atom.example.com/entry-1" />
    <link rel="enclosure" type="image/png" href="https://atom.example.com/entry-1.png" />
    <updated>2021-09-06T16:45:00Z</updated>
  </entry>
</feed>
"""

# No guid and no date: the link becomes the source id, the fetch time the event
UNDATED_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Undated</title>
    <item>
      <title>No date here</title>
      <link>https://undated.example.com/post</link>
    </item>
  </channel>
</rss>
"""

EMPTY_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Quiet</title>
    <link>https://quiet.example.com/</link>
  </channel>
</rss>
"""

NOT_A_FEED = b"this is not a feed <<<"


def png_bytes(width: int = 640, height: int = 360, color: str = "navy") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, url: str, content: bytes = b"", content_type: str = "text/html"):
        self.url = url
        self.content = content
        self.headers = {"Content-Type": content_type}

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", "replace")


Body = Union[bytes, FakeResponse, Exception]


class FakeHttpClient:
    """Serves canned bodies by URL; unknown URLs fail like a 404."""

    def __init__(self, bodies: Optional[Dict[str, Body]] = None):
        self.bodies = dict(bodies or {})
        self.requested: List[str] = []
        self.closed = False

    def _lookup(self, url: str) -> Body:
        self.requested.append(url)
        body = self.bodies.get(url)
        if body is None:
            raise TransportError(url, "HTTP 404 error", status_code=404)
        if isinstance(body, Exception):
            raise body
        return body

    def get_feed(self, url: str) -> bytes:
        body = self._lookup(url)
        return body.content if isinstance(body, FakeResponse) else body

    def get(self, url: str, **kwargs) -> FakeResponse:
        body = self._lookup(url)
        if isinstance(body, FakeResponse):
            return body
        return FakeResponse(url, body, "application/octet-stream")

    def get_page(self, url: str) -> FakeResponse:
        return self.get(url)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class FakePicker:
    """Returns a fixed image (or raises) for every page."""

    def __init__(self, image: Optional[Image.Image] = None, error: Optional[Exception] = None):
        self.image = image
        self.error = error
        self.pages: List[str] = []
        self.http_client = FakeHttpClient()

    def pick(self, page_url: str) -> Optional[Image.Image]:
        self.pages.append(page_url)
        if self.error is not None:
            raise self.error
        return self.image


class FakePool:
    """Stands in for a WorkerPool and yields precomputed results."""

    def __init__(self, results):
        self.results = list(results)
        self.jobs = None

    def run(self, jobs):
        self.jobs = list(jobs)
        return iter(self.results)


class FakeStore(BaseStore):
    """In-memory content store recording every call in order."""

    def __init__(
        self,
        profiles: Optional[List[Profile]] = None,
        followers: Optional[Dict[str, List[str]]] = None,
        items: Optional[List[Item]] = None,
        fail: Optional[Set[str]] = None,
    ):
        self.profiles = list(profiles or [])
        self.edges: Set[Tuple[str, str]] = {
            (follower, pid) for pid, names in (followers or {}).items() for follower in names
        }
        self.items: Dict[str, Item] = {item.id: item for item in items or []}
        self.fail = set(fail or ())
        self.calls: List[Tuple[str, ...]] = []

    def _maybe_fail(self, operation: str, *key: str) -> None:
        self.calls.append((operation, *key))
        if operation in self.fail or ":".join((operation, *key)) in self.fail:
            raise StoreError(operation, "simulated failure")

    def calls_named(self, operation: str) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def list_feed_driven_profiles(self) -> List[Profile]:
        self._maybe_fail("list_feed_driven_profiles")
        return [profile for profile in self.profiles if profile.feed_url]

    def select_items_needing_images(self, limit: int) -> List[Item]:
        self._maybe_fail("select_items_needing_images")
        pending = [item for item in self.items.values() if not item.image]
        return pending[:limit]

    def upsert_item(self, item: Item) -> None:
        self._maybe_fail("upsert_item", item.id)
        stored = self.items.get(item.id)
        image = item.image or (stored.image if stored else "")
        self.items[item.id] = Item(item.id, item.pid, item.event, item.text, item.link, image)

    def update_item(self, item: Item) -> None:
        self._maybe_fail("update_item", item.id)
        self.items[item.id] = item

    def list_followers(self, pid: str, limit: int, offset: int = 0) -> List[Follower]:
        self._maybe_fail("list_followers", pid)
        if limit <= 0:
            return []
        names = sorted(follower for follower, followed in self.edges if followed == pid)
        return [Follower(name) for name in names[offset:offset + limit]]

    def follow(self, follower_pid: str, pid: str) -> None:
        self._maybe_fail("follow", follower_pid, pid)
        self.edges.add((follower_pid, pid))

    def unfollow(self, follower_pid: str, pid: str) -> None:
        self._maybe_fail("unfollow", follower_pid, pid)
        self.edges.discard((follower_pid, pid))
