"""Events describing a streamed multipart upload, independent of the web framework."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class PartStarted:
    field_name: str
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return bool(self.filename)


@dataclass
class PartData:
    data: bytes


@dataclass
class PartFinished:
    pass


UploadEvent = Union[PartStarted, PartData, PartFinished]
