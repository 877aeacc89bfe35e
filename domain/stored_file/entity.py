"""Domain entity representing a file held in the storage directory."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class StoredFile:
    """A stored artifact. Identity is the generated file name; never updated in place."""

    name: str
    size: int
    modified_at: datetime
    content_type: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "modified_at", _ensure_utc(self.modified_at))

    def with_url(self, url: str) -> "StoredFile":
        return replace(self, url=url)

    def sort_key(self) -> tuple[float, str]:
        # newest first, then by name
        return (-self.modified_at.timestamp(), self.name)
