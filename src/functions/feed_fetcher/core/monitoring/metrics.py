"""Per-run summaries for the feed poll and image backfill."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunSummary:
    """Timing and error bookkeeping shared by both orchestrators."""

    started_at: datetime = field(default_factory=_utc_now)
    finished_at: Optional[datetime] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def finish(self, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        """Mark the run as finished and attach recorded errors."""
        self.finished_at = _utc_now()
        if errors is not None:
            self.errors = errors

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        data = dict(vars(self))
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, Counter):
                data[key] = dict(value)
        data["duration_seconds"] = self.duration_seconds
        return data


@dataclass
class FeedPollSummary(RunSummary):
    """Outcome of one feed poll run."""

    profiles_total: int = 0
    profiles_updated: int = 0
    profiles_skipped: int = 0
    statuses: Counter = field(default_factory=Counter)
    items_found: int = 0
    items_upserted: int = 0
    followers_reordered: int = 0
    store_failures: int = 0


@dataclass
class ImageBackfillSummary(RunSummary):
    """Outcome of one image backfill run."""

    items_selected: int = 0
    images_written: int = 0
    statuses: Counter = field(default_factory=Counter)
    items_updated: int = 0
    store_failures: int = 0
