"""Local file system storage provider implementation."""
import stat as stat_module
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles
import aiofiles.os

from core.logging_config import get_logger
from ..base import StorageProvider
from ..config import StorageConfig
from ..models import StorageObject, WriteResult
from ..exceptions import StorageError, NotFoundError
from ..utils import guess_content_type, safe_join

logger = get_logger(__name__)

TEMP_PREFIX = "."
TEMP_SUFFIX = ".part"


class LocalFileWriter:
    """Writes into a hidden temp file next to the target, renamed on commit.

    Temp files start with a dot and end in ``.part``, so they never match an
    allowed image extension and are neither listed nor served.
    """

    def __init__(self, base_path: Path, key: str, final_path: Path):
        self.key = key
        self.bytes_written = 0
        self._final_path = final_path
        self._tmp_path = base_path / f"{TEMP_PREFIX}{uuid.uuid4().hex}{TEMP_SUFFIX}"
        self._file = None
        self._finished = False

    async def open(self) -> "LocalFileWriter":
        try:
            # "x" refuses to clobber an existing file
            self._file = await aiofiles.open(self._tmp_path, "xb")
        except OSError as e:
            raise StorageError(f"Failed to open temp file for {self.key}: {e}") from e
        return self

    async def write(self, chunk: bytes) -> None:
        if self._finished or self._file is None:
            raise StorageError(f"Writer for {self.key} is closed")
        try:
            await self._file.write(chunk)
        except OSError as e:
            raise StorageError(f"Failed to write {self.key}: {e}") from e
        self.bytes_written += len(chunk)

    async def commit(self) -> WriteResult:
        if self._finished:
            raise StorageError(f"Writer for {self.key} is closed")
        try:
            await self._close_file()
            await aiofiles.os.replace(self._tmp_path, self._final_path)
        except OSError as e:
            await self.abort()
            raise StorageError(f"Failed to store {self.key}: {e}") from e
        self._finished = True
        logger.info("local_write_committed", key=self.key, size=self.bytes_written)
        return WriteResult(
            key=self.key,
            size=self.bytes_written,
            content_type=guess_content_type(self.key),
        )

    async def abort(self) -> None:
        if self._finished:
            return
        self._finished = True
        with suppress(OSError):
            await self._close_file()
        with suppress(FileNotFoundError):
            await aiofiles.os.remove(self._tmp_path)
        logger.info("local_write_aborted", key=self.key, bytes_written=self.bytes_written)

    async def _close_file(self) -> None:
        if self._file is not None:
            f, self._file = self._file, None
            await f.close()


class LocalProvider(StorageProvider):
    """Local file system storage provider over a single flat directory."""

    def __init__(self, config: StorageConfig):
        """Initialize local storage provider.

        Args:
            config: Storage configuration
        """
        self.config = config
        self.base_path = Path(config.local_base_path).resolve()

    async def open_writer(self, key: str) -> LocalFileWriter:
        """Start a streamed write; the file appears under ``key`` only on commit."""
        final_path = self._safe_path(key)
        writer = LocalFileWriter(self.base_path, key, final_path)
        return await writer.open()

    async def stream_download(
        self,
        key: str,
        chunk_size: Optional[int] = None
    ) -> AsyncIterator[bytes]:
        """Stream download file from local storage."""
        file_path = self._safe_path(key)
        size = chunk_size or self.config.chunk_size
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                while True:
                    chunk = await f.read(size)
                    if not chunk:
                        break
                    yield chunk
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {key}") from e
        except OSError as e:
            raise StorageError(f"Failed to stream download {key}: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete file from local storage.

        Unlink is the only step, so of two racing deletes exactly one wins.
        """
        file_path = self._safe_path(key)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
        logger.info("local_file_deleted", key=key)
        return True

    async def list_objects(self) -> list[StorageObject]:
        """List regular files directly inside the base directory."""
        try:
            names = await aiofiles.os.listdir(self.base_path)
        except OSError as e:
            raise StorageError(f"Failed to list {self.base_path}: {e}") from e

        objects: list[StorageObject] = []
        for name in names:
            try:
                st = await aiofiles.os.stat(self.base_path / name)
            except FileNotFoundError:
                # removed between listdir and stat
                continue
            except OSError as e:
                raise StorageError(f"Failed to stat {name}: {e}") from e
            if not stat_module.S_ISREG(st.st_mode):
                continue
            objects.append(self._to_object(name, st))
        return objects

    async def get_metadata(self, key: str) -> StorageObject:
        """Get file metadata from local storage."""
        file_path = self._safe_path(key)
        try:
            st = await aiofiles.os.stat(file_path)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {key}") from e
        except OSError as e:
            raise StorageError(f"Failed to get metadata for {key}: {e}") from e
        if not stat_module.S_ISREG(st.st_mode):
            raise NotFoundError(f"File not found: {key}")
        return self._to_object(key, st)

    async def health_check(self) -> bool:
        """Check the base directory exists and is writable."""
        probe = self.base_path / f"{TEMP_PREFIX}health_check{TEMP_SUFFIX}"
        try:
            async with aiofiles.open(probe, "wb") as f:
                await f.write(b"")
            await aiofiles.os.remove(probe)
        except OSError as e:
            logger.error("local_storage_health_check_failed", path=str(self.base_path), error=str(e))
            return False
        logger.info("local_storage_health_check_passed", path=str(self.base_path))
        return True

    def _safe_path(self, key: str) -> Path:
        """Resolve ``key`` inside the base directory (raises ValidationError)."""
        return safe_join(self.base_path, key)

    @staticmethod
    def _to_object(key: str, st) -> StorageObject:
        return StorageObject(
            key=key,
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            content_type=guess_content_type(key),
        )


async def build_local_provider(config: StorageConfig) -> LocalProvider:
    """Build local storage provider.

    Args:
        config: Storage configuration

    Returns:
        Configured local provider instance
    """
    provider = LocalProvider(config)

    if not await provider.health_check():
        raise StorageError(f"Failed to access local storage at {provider.base_path}")

    return provider
