"""Application-owned storage port abstraction (hexagonal architecture).

Defines the minimal methods the stored-file use cases need so that the
application layer does not depend on infrastructure details.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Optional, Protocol, runtime_checkable


@dataclass
class ObjectInfo:
    key: str
    size: int
    modified_at: Optional[datetime]
    content_type: Optional[str] = None


@runtime_checkable
class UploadSink(Protocol):
    """Streamed upload target; content is published only by ``commit``."""

    async def write(self, chunk: bytes) -> None: ...

    async def commit(self) -> ObjectInfo: ...

    async def abort(self) -> None: ...


@runtime_checkable
class StoragePort(Protocol):
    async def open_upload(self, key: str) -> UploadSink: ...

    async def list_objects(self) -> list[ObjectInfo]: ...

    async def get_object(self, key: str) -> ObjectInfo: ...

    async def delete(self, key: str) -> bool: ...

    def iter_content(self, key: str) -> AsyncIterator[bytes]: ...
