"""Storage configuration models."""
from enum import Enum
from pydantic import BaseModel, ConfigDict


class StorageType(str, Enum):
    """Storage provider types."""
    LOCAL = "local"


class StorageConfig(BaseModel):
    """Storage configuration model."""
    model_config = ConfigDict(use_enum_values=True, frozen=True)

    type: StorageType = StorageType.LOCAL

    # Local specific
    local_base_path: str = "uploads"

    # Size of the chunks handed out by stream_download
    chunk_size: int = 64 * 1024
