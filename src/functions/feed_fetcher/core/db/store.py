"""
Content store used by the orchestrators.

``BaseStore`` is the contract the pipelines rely on; ``SupabaseStore`` is the
production implementation on top of three tables:

* ``profiles``  (pid, feed_url, follower_count)
* ``items``     (id, pid, event, text, link, image, image_checked_at)
* ``followers`` (follower_pid, pid, followed_at)

Only the coordinating thread of an orchestrator talks to the store.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from src.shared.batch.retry import retry_on_network_error
from src.shared.db.connection import SupabaseConfig, get_supabase_client

from ..config import StoreSettings
from ..contracts import Follower, Item, Profile
from ..errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseStore(ABC):
    """Persistence operations needed by the fetch pipelines.

    Every method raises ``StoreError`` on failure.
    """

    @abstractmethod
    def list_feed_driven_profiles(self) -> List[Profile]:
        """Return every profile that has a feed URL to poll."""

    @abstractmethod
    def select_items_needing_images(self, limit: int) -> List[Item]:
        """Return up to ``limit`` items that have no image and are due a backfill attempt."""

    @abstractmethod
    def upsert_item(self, item: Item) -> None:
        """Insert or overwrite ``item`` keyed by ``item.id``.

        A stored image is never replaced by an empty one.
        """

    @abstractmethod
    def update_item(self, item: Item) -> None:
        """Write back an item after a backfill attempt, successful or not."""

    @abstractmethod
    def list_followers(self, pid: str, limit: int, offset: int = 0) -> List[Follower]:
        """Return up to ``limit`` followers of ``pid`` starting at ``offset``."""

    @abstractmethod
    def follow(self, follower_pid: str, pid: str) -> None:
        """Create the edge ``follower_pid -> pid``.

        The new edge is positioned as the most recent in the follower's
        timeline; the feed poll's unfollow/re-follow relies on this.
        """

    @abstractmethod
    def unfollow(self, follower_pid: str, pid: str) -> None:
        """Remove the edge ``follower_pid -> pid`` if present."""


class SupabaseStore(BaseStore):
    """Supabase-backed content store."""

    def __init__(
        self,
        settings: Optional[StoreSettings] = None,
        *,
        client: Any = None,
        config: Optional[SupabaseConfig] = None,
        max_retries: int = 3,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.settings = settings or StoreSettings()
        self._client = client
        self._config = config
        self._max_retries = max_retries
        self._clock = clock

    @property
    def client(self):
        """Return the underlying Supabase client, creating it on demand."""

        if self._client is None:
            self._client = get_supabase_client(self._config)
        return self._client

    def _table(self, name: str):
        return self.client.table(name)

    def _execute(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return retry_on_network_error(func, max_retries=self._max_retries)
        except Exception as exc:
            logger.debug("Store operation %s failed: %s", operation, exc)
            raise StoreError(operation, str(exc)) from exc

    def _now(self) -> str:
        return self._clock().isoformat()

    def list_feed_driven_profiles(self) -> List[Profile]:
        response = self._execute(
            "list_feed_driven_profiles",
            lambda: self._table(self.settings.profile_table)
            .select("pid,feed_url,follower_count")
            .neq("feed_url", "")
            .execute(),
        )
        profiles: List[Profile] = []
        for row in getattr(response, "data", None) or []:
            if not isinstance(row, dict) or not row.get("pid") or not row.get("feed_url"):
                continue
            profiles.append(Profile.from_row(row))
        return profiles

    def select_items_needing_images(self, limit: int) -> List[Item]:
        if limit <= 0:
            return []
        response = self._execute(
            "select_items_needing_images",
            lambda: self._table(self.settings.item_table)
            .select("id,pid,event,text,link,image")
            .or_("image.is.null,image.eq.")
            .is_("image_checked_at", "null")
            .order("event", desc=True)
            .limit(limit)
            .execute(),
        )
        return [Item.from_row(row) for row in getattr(response, "data", None) or [] if isinstance(row, dict)]

    def upsert_item(self, item: Item) -> None:
        payload = item.to_dict()
        if not payload["image"]:
            # Leave any previously backfilled image in place
            payload.pop("image")
        self._execute(
            "upsert_item",
            lambda: self._table(self.settings.item_table)
            .upsert(payload, on_conflict=self.settings.item_on_conflict)
            .execute(),
        )

    def update_item(self, item: Item) -> None:
        # image_checked_at takes the item out of the backfill queue whatever the outcome
        payload: Dict[str, Any] = {"image_checked_at": self._now()}
        if item.image:
            payload["image"] = item.image
        self._execute(
            "update_item",
            lambda: self._table(self.settings.item_table)
            .update(payload)
            .eq("id", item.id)
            .execute(),
        )

    def list_followers(self, pid: str, limit: int, offset: int = 0) -> List[Follower]:
        if limit <= 0:
            return []
        response = self._execute(
            "list_followers",
            lambda: self._table(self.settings.follower_table)
            .select("follower_pid")
            .eq("pid", pid)
            .order("followed_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute(),
        )
        return [
            Follower(pid=str(row["follower_pid"]))
            for row in getattr(response, "data", None) or []
            if isinstance(row, dict) and row.get("follower_pid")
        ]

    def follow(self, follower_pid: str, pid: str) -> None:
        payload = {"follower_pid": follower_pid, "pid": pid, "followed_at": self._now()}
        self._execute(
            "follow",
            lambda: self._table(self.settings.follower_table)
            .upsert(payload, on_conflict="follower_pid,pid")
            .execute(),
        )

    def unfollow(self, follower_pid: str, pid: str) -> None:
        self._execute(
            "unfollow",
            lambda: self._table(self.settings.follower_table)
            .delete()
            .eq("follower_pid", follower_pid)
            .eq("pid", pid)
            .execute(),
        )
