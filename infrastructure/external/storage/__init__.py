"""Storage service entry point and lifecycle management."""
from typing import Optional

from core.config import UploadConfig
from core.logging_config import get_logger
from .base import StorageProvider, StorageWriter
from .config import StorageConfig, StorageType
from .factory import create_provider, register_provider
from .models import StorageObject, WriteResult
from .exceptions import (
    StorageError,
    NotFoundError,
    ConfigurationError,
    ValidationError
)
from .utils import guess_content_type, safe_join

logger = get_logger(__name__)


def get_storage_config(upload_config: UploadConfig) -> StorageConfig:
    """Derive the storage configuration from the resolved upload config.

    Args:
        upload_config: Immutable upload configuration

    Returns:
        Storage configuration instance
    """
    return StorageConfig(
        type=StorageType.LOCAL,
        local_base_path=str(upload_config.upload_dir),
    )


async def init_storage_client(config: StorageConfig) -> StorageProvider:
    """Create the storage provider for ``config``.

    The caller owns the returned instance (the app keeps it on ``app.state``).
    """
    try:
        provider = await create_provider(config)
    except Exception as e:
        logger.error("storage_init_failed", provider=str(config.type), error=str(e))
        raise

    logger.info(
        "storage_initialized",
        provider=str(config.type),
        base_path=config.local_base_path,
    )
    return provider


async def shutdown_storage_client(provider: Optional[StorageProvider]) -> None:
    """Release storage resources. Local storage holds none."""
    if provider is None:
        return
    close = getattr(provider, "aclose", None)
    if callable(close):
        await close()
    logger.info("storage_shutdown")


__all__ = [
    # Lifecycle
    "get_storage_config",
    "init_storage_client",
    "shutdown_storage_client",
    "create_provider",
    "register_provider",

    # Configuration
    "StorageConfig",
    "StorageType",

    # Base types
    "StorageProvider",
    "StorageWriter",

    # Models
    "StorageObject",
    "WriteResult",

    # Exceptions
    "StorageError",
    "NotFoundError",
    "ConfigurationError",
    "ValidationError",

    # Utils
    "guess_content_type",
    "safe_join",
]
