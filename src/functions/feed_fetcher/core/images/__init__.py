"""Image selection and cropping for the backfill stage."""

from .crop import crop_to_fit
from .picker import ImagePicker, find_candidate_urls

__all__ = ["ImagePicker", "crop_to_fit", "find_candidate_urls"]
