"""CLI entry point for the feed fetcher.

Polls every feed-driven profile and backfills item images, immediately and
then every ``--feedinterval`` minutes, or once with ``--runonce``.
``--debugfeed URL`` only prints the parsed entries of a single feed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

PROJECT_ROOT = Path(__file__).resolve().parents[4]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging
from src.functions.feed_fetcher.core.config import (
    FetcherConfig,
    build_fetcher_config,
    build_store_settings,
    check_environment,
)
from src.functions.feed_fetcher.core.db import BaseStore, SupabaseStore
from src.functions.feed_fetcher.core.errors import FetcherError
from src.functions.feed_fetcher.core.feeds import parse_feed
from src.functions.feed_fetcher.core.pipelines import (
    FeedPollOrchestrator,
    ImageBackfillOrchestrator,
    SchedulingLoop,
)
from src.functions.feed_fetcher.core.workers.feed_worker import build_http_client

LOG = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll content feeds and backfill item images.")
    parser.add_argument("--images", help="Directory receiving cropped item images")
    parser.add_argument("--feedinterval", type=int, help="Minutes between feed polls")
    parser.add_argument("--runonce", action="store_true", help="Run one poll and backfill cycle, then exit")
    parser.add_argument("--debugfeed", metavar="URL", help="Print the parsed entries of one feed and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def debug_feed(url: str, config: FetcherConfig, out: Optional[TextIO] = None) -> int:
    """Fetch and parse ``url``, printing every entry as the feed describes it."""

    out = out or sys.stdout
    LOG.info("Debugging feed %s", url)

    with build_http_client(config) as http_client:
        try:
            feed = parse_feed(http_client.get_feed(url))
        except FetcherError as exc:
            LOG.error("Could not read feed %s: %s", url, exc)
            return 1

    for entry in feed.items:
        out.write(f"--Item ({entry.id})\n")
        out.write(f"  Title: {entry.title}\n")
        out.write(f"  Link:  {entry.link}\n")
        out.write(f"  Image: {entry.image}\n")
    return 0


def build_loop(config: FetcherConfig, store: BaseStore) -> SchedulingLoop:
    return SchedulingLoop(
        FeedPollOrchestrator(store, config),
        ImageBackfillOrchestrator(store, config),
        config,
    )


def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_env()
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        config = build_fetcher_config(
            {
                "image_dir": args.images,
                "feed_interval_minutes": args.feedinterval,
                "run_once": True if args.runonce else None,
            }
        )
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return 1

    if args.debugfeed:
        return debug_feed(args.debugfeed, config)

    try:
        check_environment(config)
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return 1

    LOG.info("Image directory: %s", config.image_dir)

    store = SupabaseStore(build_store_settings())
    loop = build_loop(config, store)
    try:
        loop.run()
    except KeyboardInterrupt:
        LOG.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution entry
    sys.exit(run())
