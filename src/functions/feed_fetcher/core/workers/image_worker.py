"""
Image fetch worker.

Picks a representative image from an item's linked page, crops it to the
thumbnail footprint and writes it as ``<image_dir>/<item id>.png``. The item's
``image`` field is only set once the file is safely on disk.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from ..config import FetcherConfig
from ..contracts import FetchStatus, ImageFetchResult, Item
from ..errors import ImageNotFoundError, ImageWriteError, TransportError
from ..images import ImagePicker, crop_to_fit
from .feed_worker import build_http_client
from .pool import BaseWorker, WorkerPool

logger = logging.getLogger(__name__)

IMAGE_EXTENSION = "png"

Cropper = Callable[[Image.Image, int, int], Image.Image]


def image_filename(item_id: str) -> str:
    return f"{item_id}.{IMAGE_EXTENSION}"


def write_png(image: Image.Image, path: Path) -> None:
    """Encode ``image`` as PNG at ``path`` without exposing a partial file."""

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        image.save(tmp_path, format="PNG")
        os.replace(tmp_path, path)
    except (OSError, ValueError) as exc:
        tmp_path.unlink(missing_ok=True)
        raise ImageWriteError(f"Could not write {path}: {exc}") from exc


class ImageFetchWorker(BaseWorker[Item, ImageFetchResult]):
    """Backfills one item's image per job."""

    def __init__(
        self,
        worker_id: int,
        config: FetcherConfig,
        picker: Optional[ImagePicker] = None,
        cropper: Cropper = crop_to_fit,
    ) -> None:
        super().__init__(worker_id)
        self.config = config
        self.picker = picker or ImagePicker(build_http_client(config))
        self.cropper = cropper

    def process(self, item: Item) -> ImageFetchResult:
        logger.info("Image worker %d processing item %s", self.worker_id, item.id)

        try:
            image = self.picker.pick(item.link)
        except TransportError as exc:
            error = ImageNotFoundError(f"Could not fetch page {item.link}: {exc}")
            return ImageFetchResult(item=item, status=FetchStatus.NOT_FOUND, error=error)

        if image is None:
            error = ImageNotFoundError(f"No candidate image found on {item.link}")
            return ImageFetchResult(item=item, status=FetchStatus.NOT_FOUND, error=error)

        cropped = self.cropper(image, self.config.image_width, self.config.image_height)

        filename = image_filename(item.id)
        try:
            write_png(cropped, self.config.image_path(filename))
        except ImageWriteError as exc:
            logger.warning("Image worker %d: %s", self.worker_id, exc)
            return ImageFetchResult(item=item, status=FetchStatus.WRITE_ERROR, error=exc)

        item.image = filename
        return ImageFetchResult(item=item, status=FetchStatus.OK)

    def failure(self, item: Item, exc: BaseException) -> ImageFetchResult:
        return ImageFetchResult(item=item, status=FetchStatus.FAILED, error=exc)

    def close(self) -> None:
        self.picker.http_client.close()


def image_fetch_pool(config: FetcherConfig) -> WorkerPool[Item, ImageFetchResult]:
    """Build the image fetch pool sized from ``config``."""

    return WorkerPool(
        "image",
        config.image_workers,
        lambda worker_id: ImageFetchWorker(worker_id, config),
    )
