"""
Feed poll orchestrator.

Loads every feed-driven profile, fans the feeds out to the feed fetch pool and
applies the reorder-safe update for each completed feed as its result is
drained. All store mutations happen on the coordinating thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import FetcherConfig
from ..contracts import FeedFetchResult, Profile
from ..db import BaseStore
from ..errors import StoreError
from ..monitoring import ErrorHandler, FeedPollSummary
from ..workers import WorkerPool, feed_fetch_pool

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReorderOutcome:
    """What the reorder-safe update did for one profile."""

    applied: bool = False
    items_upserted: int = 0
    followers_reordered: int = 0
    store_failures: int = 0


def apply_reorder_safe_update(
    store: BaseStore,
    result: FeedFetchResult,
    errors: Optional[ErrorHandler] = None,
) -> ReorderOutcome:
    """
    Persist a feed's items and bump the profile in its followers' timelines.

    The sequence is: snapshot followers, unfollow each, upsert every item,
    re-follow each. Re-created follow edges land at the most recent position,
    which is what moves the profile to the top of follower timelines; it runs
    whenever the feed produced an item list, even an empty one.

    A failed follower snapshot aborts before anything is mutated. Individual
    unfollow, upsert and follow failures are logged and skipped, so a profile
    can end up with some followers not re-followed.

    Args:
        store: Content store
        result: Drained feed fetch result
        errors: Optional error collector

    Returns:
        ReorderOutcome describing what was applied
    """
    errors = errors or ErrorHandler()
    outcome = ReorderOutcome()
    if result.items is None:
        return outcome

    profile: Profile = result.profile

    try:
        followers = store.list_followers(profile.pid, profile.follower_count, 0)
    except StoreError as exc:
        logger.error("Could not snapshot followers of %s, skipping update: %s", profile.pid, exc)
        errors.record(profile.pid, "list_followers", exc)
        outcome.store_failures += 1
        return outcome

    outcome.applied = True

    for follower in followers:
        try:
            store.unfollow(follower.pid, profile.pid)
        except StoreError as exc:
            logger.warning("Unfollow %s -> %s failed: %s", follower.pid, profile.pid, exc)
            errors.record(f"{follower.pid}->{profile.pid}", "unfollow", exc)
            outcome.store_failures += 1

    for item in result.items:
        try:
            store.upsert_item(item)
            outcome.items_upserted += 1
        except StoreError as exc:
            logger.warning("Upsert of item %s for %s failed: %s", item.id, profile.pid, exc)
            errors.record(item.id, "upsert_item", exc)
            outcome.store_failures += 1

    for follower in followers:
        try:
            store.follow(follower.pid, profile.pid)
            outcome.followers_reordered += 1
        except StoreError as exc:
            logger.warning("Re-follow %s -> %s failed: %s", follower.pid, profile.pid, exc)
            errors.record(f"{follower.pid}->{profile.pid}", "follow", exc)
            outcome.store_failures += 1

    return outcome


class FeedPollOrchestrator:
    """Drives one feed poll across all feed-driven profiles."""

    def __init__(
        self,
        store: BaseStore,
        config: FetcherConfig,
        pool: Optional[WorkerPool] = None,
    ) -> None:
        self.store = store
        self.config = config
        self.pool = pool or feed_fetch_pool(config)

    def run(self) -> FeedPollSummary:
        """Poll every feed once and return the run summary."""

        logger.info("Refreshing feeds")
        summary = FeedPollSummary()
        errors = ErrorHandler()

        try:
            profiles = self.store.list_feed_driven_profiles()
        except StoreError as exc:
            logger.error("Could not load feed-driven profiles: %s", exc)
            errors.record("profiles", "list_feed_driven_profiles", exc)
            summary.store_failures += 1
            summary.finish(errors.as_dict())
            return summary

        summary.profiles_total = len(profiles)
        logger.info("%d feeds to poll", len(profiles))

        for result in self.pool.run(profiles):
            pid = result.profile.pid
            summary.statuses[result.status.value] += 1

            if result.error is not None:
                logger.warning("Error processing feed for %s: %s", pid, result.error)
                errors.record(pid, f"fetch_{result.status.value}", result.error)
            if result.items is not None:
                logger.info("Found %d items in feed for %s", len(result.items), pid)
                summary.items_found += len(result.items)

            outcome = apply_reorder_safe_update(self.store, result, errors)
            if outcome.applied:
                summary.profiles_updated += 1
            else:
                summary.profiles_skipped += 1
            summary.items_upserted += outcome.items_upserted
            summary.followers_reordered += outcome.followers_reordered
            summary.store_failures += outcome.store_failures

        summary.finish(errors.as_dict())
        logger.info(
            "Feed poll complete: %d/%d profiles updated, %d items upserted in %.2fs",
            summary.profiles_updated,
            summary.profiles_total,
            summary.items_upserted,
            summary.duration_seconds or 0.0,
        )
        return summary
