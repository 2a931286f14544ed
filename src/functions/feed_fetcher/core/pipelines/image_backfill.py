"""
Image backfill orchestrator.

Selects a bounded batch of items without images, runs them through the image
fetch pool and writes every item back, whether or not an image was found, so
that retry policy lives entirely in the store's selection.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import FetcherConfig
from ..db import BaseStore
from ..errors import StoreError
from ..monitoring import ErrorHandler, ImageBackfillSummary
from ..workers import WorkerPool, image_fetch_pool

logger = logging.getLogger(__name__)


class ImageBackfillOrchestrator:
    """Drives one image backfill batch."""

    def __init__(
        self,
        store: BaseStore,
        config: FetcherConfig,
        pool: Optional[WorkerPool] = None,
    ) -> None:
        self.store = store
        self.config = config
        self._pool = pool

    @property
    def pool(self) -> WorkerPool:
        if self._pool is None:
            self._pool = image_fetch_pool(self.config)
        return self._pool

    def run(self) -> ImageBackfillSummary:
        """Backfill up to ``config.image_batch_size`` images."""

        logger.info("Fetching images")
        summary = ImageBackfillSummary()
        errors = ErrorHandler()

        try:
            items = self.store.select_items_needing_images(self.config.image_batch_size)
        except StoreError as exc:
            logger.error("Could not select items needing images: %s", exc)
            errors.record("items", "select_items_needing_images", exc)
            summary.store_failures += 1
            summary.finish(errors.as_dict())
            return summary

        summary.items_selected = len(items)
        logger.info("%d images need to be fetched", len(items))

        if items:
            for result in self.pool.run(items):
                item = result.item
                summary.statuses[result.status.value] += 1

                if result.ok:
                    logger.info("Found image %s for %s", item.image, item.id)
                    summary.images_written += 1
                else:
                    logger.warning("Error processing images for %s: %s", item.id, result.error)
                    if result.error is not None:
                        errors.record(item.id, f"image_{result.status.value}", result.error)

                try:
                    self.store.update_item(item)
                    summary.items_updated += 1
                except StoreError as exc:
                    logger.error("Could not write back item %s: %s", item.id, exc)
                    errors.record(item.id, "update_item", exc)
                    summary.store_failures += 1

        summary.finish(errors.as_dict())
        logger.info(
            "Image backfill complete: %d/%d images written",
            summary.images_written,
            summary.items_selected,
        )
        return summary
