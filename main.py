"""Deployment wrapper for the feed fetcher Cloud Function."""

from __future__ import annotations

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.functions.feed_fetcher.functions.main import feed_fetcher

__all__ = ["feed_fetcher"]
