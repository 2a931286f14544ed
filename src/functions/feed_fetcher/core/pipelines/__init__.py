"""Orchestrators for the feed poll, the image backfill and the loop driving them."""

from .feed_poll import FeedPollOrchestrator, ReorderOutcome, apply_reorder_safe_update
from .image_backfill import ImageBackfillOrchestrator
from .scheduler import CycleResult, SchedulingLoop

__all__ = [
    "CycleResult",
    "FeedPollOrchestrator",
    "ImageBackfillOrchestrator",
    "ReorderOutcome",
    "SchedulingLoop",
    "apply_reorder_safe_update",
]
