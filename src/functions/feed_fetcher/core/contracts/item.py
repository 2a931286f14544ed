"""Content item contract shared by both fetch stages."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(slots=True)
class Item:
    """One piece of ingested content.

    ``id`` is the content identifier of the feed's own entry id and doubles as
    the store's upsert key. ``image`` holds a filename (or a feed-supplied
    seed) and stays empty until the image backfill succeeds.
    """

    id: str
    pid: str
    event: int
    text: str = ""
    link: str = ""
    image: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Item":
        return cls(
            id=str(row["id"]),
            pid=str(row.get("pid") or ""),
            event=int(row.get("event") or 0),
            text=row.get("text") or "",
            link=row.get("link") or "",
            image=row.get("image") or "",
        )
