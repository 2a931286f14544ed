"""Content identifiers for feed entries."""

from __future__ import annotations

import hashlib


def content_id(source_id: str) -> str:
    """Return the stable item id for a feed entry's own identifier.

    The digest is the hex MD5 of the UTF-8 encoded source id, so the same
    entry always maps to the same 32-character key and re-ingestion upserts
    instead of duplicating. Unpaired surrogates are encoded rather than
    rejected so the function never fails.
    """
    data = (source_id or "").encode("utf-8", "surrogatepass")
    return hashlib.md5(data).hexdigest()
