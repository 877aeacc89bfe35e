"""Storage provider protocol definitions."""
from typing import Protocol, AsyncIterator, Optional, runtime_checkable

from .models import StorageObject, WriteResult


@runtime_checkable
class StorageWriter(Protocol):
    """Streamed write into storage; nothing is visible under ``key`` until commit."""

    key: str
    bytes_written: int

    async def write(self, chunk: bytes) -> None:
        """Append a chunk."""
        ...

    async def commit(self) -> WriteResult:
        """Publish the written bytes under the final key."""
        ...

    async def abort(self) -> None:
        """Discard everything written so far. Safe to call more than once."""
        ...


@runtime_checkable
class StorageProvider(Protocol):
    """Core storage provider protocol for duck typing."""

    async def open_writer(self, key: str) -> StorageWriter:
        """Start a streamed upload for ``key``."""
        ...

    async def stream_download(
        self,
        key: str,
        chunk_size: Optional[int] = None
    ) -> AsyncIterator[bytes]:
        """Stream file content."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete file; False when it did not exist."""
        ...

    async def list_objects(self) -> list[StorageObject]:
        """List top-level objects."""
        ...

    async def get_metadata(self, key: str) -> StorageObject:
        """Get file metadata."""
        ...

    async def health_check(self) -> bool:
        """Check storage connectivity and permissions."""
        ...
