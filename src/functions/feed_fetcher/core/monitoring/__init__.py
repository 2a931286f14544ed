"""Run monitoring for the feed fetcher."""

from .error_handler import ErrorHandler, RecordedError
from .metrics import FeedPollSummary, ImageBackfillSummary, RunSummary

__all__ = ["ErrorHandler", "FeedPollSummary", "ImageBackfillSummary", "RecordedError", "RunSummary"]
