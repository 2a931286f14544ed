"""
Scheduling loop.

Each cycle runs the feed poll and then one image backfill batch, strictly
sequentially; a failure in one stage never stops the other. The first cycle
starts immediately and later cycles start on a fixed interval measured from
the first one. A cycle that overruns the interval makes the loop skip the
missed ticks rather than run cycles back to back.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..config import FetcherConfig
from ..monitoring import FeedPollSummary, ImageBackfillSummary
from .feed_poll import FeedPollOrchestrator
from .image_backfill import ImageBackfillOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one feed poll plus image backfill cycle."""

    cycle: int
    feed_poll: Optional[FeedPollSummary] = None
    image_backfill: Optional[ImageBackfillSummary] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "success": self.success,
            "errors": dict(self.errors),
            "feed_poll": self.feed_poll.to_dict() if self.feed_poll else None,
            "image_backfill": self.image_backfill.to_dict() if self.image_backfill else None,
        }


class SchedulingLoop:
    """Runs fetch cycles immediately and then every ``feed_interval_minutes``."""

    def __init__(
        self,
        feed_poll: FeedPollOrchestrator,
        image_backfill: ImageBackfillOrchestrator,
        config: FetcherConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.feed_poll = feed_poll
        self.image_backfill = image_backfill
        self.config = config
        self._sleep = sleep
        self._clock = clock
        self._cycles = 0

    def run_cycle(self) -> CycleResult:
        """Run the feed poll, then the image backfill.

        A stage that raises is logged and recorded; the other stage still runs.
        """

        self._cycles += 1
        result = CycleResult(cycle=self._cycles)
        logger.info("Starting fetch cycle %d", result.cycle)

        try:
            result.feed_poll = self.feed_poll.run()
        except Exception as exc:
            logger.exception("Feed poll failed in cycle %d", result.cycle)
            result.errors["feed_poll"] = str(exc)

        try:
            result.image_backfill = self.image_backfill.run()
        except Exception as exc:
            logger.exception("Image backfill failed in cycle %d", result.cycle)
            result.errors["image_backfill"] = str(exc)

        return result

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Run cycles until the process is stopped.

        Args:
            max_cycles: Stop after this many cycles (``None`` runs forever)

        Returns:
            Number of cycles that were run
        """
        interval = float(self.config.feed_interval_seconds)
        next_tick = self._clock()
        ran = 0

        while True:
            self.run_cycle()
            ran += 1

            if self.config.run_once:
                logger.info("Run once requested, exiting")
                return ran
            if max_cycles is not None and ran >= max_cycles:
                return ran

            next_tick += interval
            now = self._clock()
            if now >= next_tick:
                missed = int((now - next_tick) // interval) + 1
                logger.warning("Fetch cycle overran the interval, skipping %d tick(s)", missed)
                next_tick += missed * interval

            wait = next_tick - now
            logger.info("Next fetch cycle in %.0fs", wait)
            self._sleep(wait)
