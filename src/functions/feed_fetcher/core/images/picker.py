"""Representative image selection for a linked page.

Candidates come from the page's social metadata first (``og:image``,
``twitter:image``, ``image_src``) and then from ``<img>`` tags ordered by
their declared size. The first candidate that downloads, decodes and meets
the minimum dimensions wins.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError

from ..errors import TransportError
from ..utils import HttpClient

logger = logging.getLogger(__name__)

META_IMAGE_KEYS = (
    "og:image:secure_url",
    "og:image:url",
    "og:image",
    "twitter:image",
    "twitter:image:src",
)

IRRELEVANCE_TERMS = {
    "logo",
    "icon",
    "sprite",
    "avatar",
    "badge",
    "pixel",
    "spacer",
    "blank",
    "placeholder",
    "tracking",
}

IMAGE_ACCEPT = "image/avif, image/webp, image/png, image/jpeg, image/*;q=0.8"

MIN_WIDTH = 200
MIN_HEIGHT = 100
MAX_CANDIDATES = 8


class ImagePicker:
    """Selects a representative raster image for a page URL."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        min_width: int = MIN_WIDTH,
        min_height: int = MIN_HEIGHT,
        max_candidates: int = MAX_CANDIDATES,
    ) -> None:
        self.http_client = http_client
        self.min_width = min_width
        self.min_height = min_height
        self.max_candidates = max_candidates

    def pick(self, page_url: str) -> Optional[Image.Image]:
        """Return the best candidate image for ``page_url`` or ``None``.

        Raises:
            TransportError: If the page itself cannot be fetched
        """
        response = self.http_client.get_page(page_url)
        base_url = response.url or page_url

        content_type = (response.headers.get("Content-Type") or "").lower()
        if content_type.startswith("image/"):
            # The link points straight at an image
            return self._decode(response.content, base_url)

        candidates = find_candidate_urls(response.text, base_url)
        logger.debug("Found %d image candidates on %s", len(candidates), base_url)

        for url in candidates[: self.max_candidates]:
            image = self._download(url)
            if image is not None:
                logger.debug("Picked %s (%dx%d) for %s", url, image.width, image.height, page_url)
                return image
        return None

    def _download(self, url: str) -> Optional[Image.Image]:
        try:
            response = self.http_client.get(url, accept=IMAGE_ACCEPT)
        except TransportError as exc:
            logger.debug("Skipping candidate %s: %s", url, exc)
            return None
        return self._decode(response.content, url)

    def _decode(self, content: bytes, url: str) -> Optional[Image.Image]:
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            logger.debug("Skipping undecodable candidate %s: %s", url, exc)
            return None

        if image.width < self.min_width or image.height < self.min_height:
            logger.debug("Skipping small candidate %s (%dx%d)", url, image.width, image.height)
            return None
        return image


def find_candidate_urls(html: str, base_url: str) -> List[str]:
    """Return absolute candidate image URLs for a page, best first."""

    soup = BeautifulSoup(html or "", "lxml")
    urls: List[str] = []

    for key in META_IMAGE_KEYS:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag and tag.get("content"):
            urls.append(tag["content"].strip())

    link = soup.find("link", rel="image_src")
    if link and link.get("href"):
        urls.append(link["href"].strip())

    urls.extend(src for _, src in sorted(_img_candidates(soup.find_all("img")), key=lambda c: -c[0]))

    resolved = []
    for url in urls:
        absolute = urljoin(base_url, url)
        if urlparse(absolute).scheme in ("http", "https") and not _looks_irrelevant(absolute):
            resolved.append(absolute)
    return list(dict.fromkeys(resolved))


def _img_candidates(tags: Iterable) -> Iterable[Tuple[int, str]]:
    for tag in tags:
        src = tag.get("src") or tag.get("data-src") or tag.get("data-lazy-src")
        if not src or src.startswith("data:"):
            continue
        width, height = _dimension(tag.get("width")), _dimension(tag.get("height"))
        if (width is not None and width <= 1) or (height is not None and height <= 1):
            continue
        # Undeclared sizes rank below declared large images but above tiny ones
        area = (width or MIN_WIDTH) * (height or MIN_HEIGHT)
        yield area, src.strip()


def _dimension(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip().rstrip("px"))
    except ValueError:
        return None


def _looks_irrelevant(url: str) -> bool:
    path = urlparse(url).path.lower()
    return any(term in path for term in IRRELEVANCE_TERMS)
