"""Application layer orchestration for the stored file lifecycle.

Owns the intake pipeline (extension check, name generation, streamed size
enforcement) plus listing and deletion over the storage port.
"""
from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, Optional

from application.dto import StoredFileDTO, UploadResponseDTO
from application.ports.storage import ObjectInfo, StoragePort, UploadSink
from application.ports.upload import PartData, PartFinished, PartStarted, UploadEvent
from core.config import UploadConfig
from core.logging_config import get_logger
from domain.common.exceptions import (
    BusinessException,
    FileTooLargeException,
    InvalidFileNameException,
    MalformedUploadException,
    NoFileUploadedException,
    StoredFileNotFoundException,
    UnsupportedFileTypeException,
)
from domain.stored_file import (
    StoredFile,
    generate_storage_name,
    is_allowed_extension,
    validate_storage_name,
)

logger = get_logger(__name__)

UPLOAD_FIELD = "file"


class StoredFileService:
    """Use cases over the flat upload directory."""

    def __init__(self, config: UploadConfig, storage: StoragePort):
        self._config = config
        self._storage = storage

    # ------------------------------------------------------------------
    # Intake rules
    # ------------------------------------------------------------------
    def validate_extension(self, filename: str) -> None:
        if not is_allowed_extension(filename, self._config.allowed_extensions):
            raise UnsupportedFileTypeException(filename, allowed=list(self._config.allowed_extensions))

    def generate_storage_name(self, original_filename: str) -> str:
        return generate_storage_name(original_filename)

    def enforce_size_limit(self, byte_count: int) -> None:
        if byte_count > self._config.max_file_size:
            raise FileTooLargeException(
                max_size=self._config.max_file_size,
                max_size_human=self._config.max_file_size_raw,
                size=byte_count,
            )

    def check_declared_size(self, content_length: Optional[int], overhead: int = 0) -> None:
        """Reject up front when the declared body cannot fit.

        ``overhead`` is the allowance for multipart framing around the file.
        """
        if content_length is None:
            return
        if content_length - overhead > self._config.max_file_size:
            raise FileTooLargeException(
                max_size=self._config.max_file_size,
                max_size_human=self._config.max_file_size_raw,
            )

    def public_url(self, name: str) -> str:
        return self._config.public_url(name)

    # ------------------------------------------------------------------
    # Use cases
    # ------------------------------------------------------------------
    async def store_upload(
        self,
        events: AsyncIterable[UploadEvent],
        field_name: str = UPLOAD_FIELD,
    ) -> UploadResponseDTO:
        """Consume a streamed multipart body and store its single file part.

        The file is only published after the whole body has been read; any
        failure (validation, size, disconnect, cancellation) discards it.
        """
        sink: Optional[UploadSink] = None
        storage_name: Optional[str] = None
        original_name: Optional[str] = None
        in_file_part = False
        received = 0
        committed = False

        try:
            async for event in events:
                if isinstance(event, PartStarted):
                    in_file_part = False
                    if event.field_name != field_name or not event.is_file:
                        continue
                    if sink is not None:
                        raise MalformedUploadException("Only one file may be uploaded per request")
                    original_name = event.filename or ""
                    self.validate_extension(original_name)
                    storage_name = self.generate_storage_name(original_name)
                    sink = await self._storage.open_upload(storage_name)
                    in_file_part = True
                elif isinstance(event, PartData):
                    if not in_file_part or sink is None:
                        continue
                    received += len(event.data)
                    self.enforce_size_limit(received)
                    await sink.write(event.data)
                elif isinstance(event, PartFinished):
                    in_file_part = False

            if sink is None or storage_name is None:
                raise NoFileUploadedException(field_name)

            info = await sink.commit()
            committed = True
        except BusinessException as exc:
            logger.info(
                "upload_rejected",
                reason=exc.error_type,
                original_filename=original_name,
                received=received,
            )
            raise
        except BaseException as exc:
            logger.warning(
                "upload_aborted",
                original_filename=original_name,
                received=received,
                error_type=type(exc).__name__,
            )
            raise
        finally:
            if sink is not None and not committed:
                await sink.abort()

        logger.info(
            "file_stored",
            file=info.key,
            original_filename=original_name,
            size=info.size,
        )
        return UploadResponseDTO(file=info.key, url=self.public_url(info.key))

    async def list_files(self) -> list[StoredFileDTO]:
        """Full directory scan on every call: filter, attach URLs, newest first."""
        objects = await self._storage.list_objects()
        stored = [self._to_entity(obj) for obj in objects if self.is_listable(obj.key)]
        stored.sort(key=StoredFile.sort_key)
        return [StoredFileDTO.from_entity(item) for item in stored]

    async def get_file(self, name: str) -> StoredFile:
        """Look up a servable file (allowed extension, regular file).

        Retrieval is public, so malformed names are reported as missing
        rather than as a client error.
        """
        try:
            name = self._check_name(name)
        except InvalidFileNameException:
            raise StoredFileNotFoundException(name) from None
        info = await self._storage.get_object(name)
        return self._to_entity(info)

    def iter_content(self, name: str) -> AsyncIterator[bytes]:
        return self._storage.iter_content(name)

    async def delete_file(self, name: str) -> None:
        name = self._check_name(name)
        deleted = await self._storage.delete(name)
        if not deleted:
            raise StoredFileNotFoundException(name)
        logger.info("file_deleted", file=name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def is_listable(self, name: str) -> bool:
        """Single rule for what listing shows and retrieval and delete accept.

        Upload temp files end in ``.part`` and never qualify.
        """
        return is_allowed_extension(name, self._config.allowed_extensions)

    def _check_name(self, name: str) -> str:
        name = validate_storage_name(name)
        if not self.is_listable(name):
            raise StoredFileNotFoundException(name)
        return name

    def _to_entity(self, info: ObjectInfo) -> StoredFile:
        stored = StoredFile(
            name=info.key,
            size=info.size,
            modified_at=info.modified_at,
            content_type=info.content_type,
        )
        return stored.with_url(self.public_url(info.key))
