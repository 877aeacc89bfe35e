"""Infrastructure adapter that implements the application StoragePort
by delegating to the concrete StorageProvider and translating models
and errors.
"""
from __future__ import annotations

from typing import AsyncIterator, Optional

from application.ports.storage import ObjectInfo, StoragePort, UploadSink
from domain.common.exceptions import (
    InvalidFileNameException,
    StorageFailureException,
    StoredFileNotFoundException,
)
from infrastructure.external.storage import (
    NotFoundError,
    StorageError,
    StorageObject,
    StorageProvider,
    StorageWriter,
    ValidationError,
)


def _to_info(obj: StorageObject) -> ObjectInfo:
    return ObjectInfo(
        key=obj.key,
        size=obj.size,
        modified_at=obj.last_modified,
        content_type=obj.content_type,
    )


def _translate(exc: StorageError, key: Optional[str], operation: str) -> Exception:
    if isinstance(exc, NotFoundError):
        return StoredFileNotFoundException(key)
    if isinstance(exc, ValidationError):
        return InvalidFileNameException(key or "", reason="Invalid file name")
    return StorageFailureException(f"Storage {operation} failed", operation=operation)


class _WriterSink(UploadSink):
    def __init__(self, writer: StorageWriter):
        self._writer = writer

    async def write(self, chunk: bytes) -> None:
        try:
            await self._writer.write(chunk)
        except StorageError as e:
            raise _translate(e, self._writer.key, "write") from e

    async def commit(self) -> ObjectInfo:
        try:
            result = await self._writer.commit()
        except StorageError as e:
            raise _translate(e, self._writer.key, "commit") from e
        return ObjectInfo(
            key=result.key,
            size=result.size,
            modified_at=None,
            content_type=result.content_type,
        )

    async def abort(self) -> None:
        await self._writer.abort()


class StorageProviderPortAdapter(StoragePort):
    def __init__(self, provider: StorageProvider):
        self.provider = provider

    async def open_upload(self, key: str) -> UploadSink:
        try:
            writer = await self.provider.open_writer(key)
        except StorageError as e:
            raise _translate(e, key, "open") from e
        return _WriterSink(writer)

    async def list_objects(self) -> list[ObjectInfo]:
        try:
            objects = await self.provider.list_objects()
        except StorageError as e:
            raise _translate(e, None, "list") from e
        return [_to_info(obj) for obj in objects]

    async def get_object(self, key: str) -> ObjectInfo:
        try:
            obj = await self.provider.get_metadata(key)
        except StorageError as e:
            raise _translate(e, key, "stat") from e
        return _to_info(obj)

    async def delete(self, key: str) -> bool:
        try:
            return await self.provider.delete(key)
        except StorageError as e:
            raise _translate(e, key, "delete") from e

    async def iter_content(self, key: str) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.provider.stream_download(key):
                yield chunk
        except StorageError as e:
            raise _translate(e, key, "read") from e
