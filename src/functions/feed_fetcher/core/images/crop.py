"""Salience-aware cropping to the thumbnail footprint."""

from __future__ import annotations

import smartcrop
from PIL import Image


def crop_to_fit(image: Image.Image, width: int, height: int) -> Image.Image:
    """Smart-crop ``image`` to the target aspect ratio and resize to ``width``x``height``.

    Images smaller than the target are upscaled first so the crop window always
    fits inside them.
    """
    img = image.convert("RGB")

    scale = max(width / img.width, height / img.height)
    if scale > 1:
        img = img.resize(
            (max(width, round(img.width * scale)), max(height, round(img.height * scale))),
            Image.LANCZOS,
        )

    result = smartcrop.SmartCrop().crop(img, width, height)
    crop = result["top_crop"]
    x, y, w, h = crop["x"], crop["y"], crop["width"], crop["height"]
    return img.crop((x, y, x + w, y + h)).resize((width, height), Image.LANCZOS)
