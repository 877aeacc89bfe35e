"""
Data transfer objects between the application and presentation layers
"""
from pydantic import BaseModel, Field, model_serializer
from datetime import datetime, timezone

from domain.stored_file import StoredFile


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, tuple):
                return tuple(convert(v) for v in value)
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class MessageDTO(DTOBase):
    """Plain confirmation message."""
    message: str


class UploadResponseDTO(DTOBase):
    """Returned after a successful upload."""
    message: str = "File uploaded successfully"
    file: str = Field(..., description="Generated storage name")
    url: str = Field(..., description="Public URL of the stored file")


class StoredFileDTO(DTOBase):
    """One entry of the file listing."""
    name: str
    size: int = Field(..., ge=0, description="Size in bytes")
    mtime: datetime = Field(..., description="Last modification time (UTC)")
    url: str

    @classmethod
    def from_entity(cls, stored: StoredFile) -> "StoredFileDTO":
        return cls(
            name=stored.name,
            size=stored.size,
            mtime=stored.modified_at,
            url=stored.url or "",
        )
