"""Storage data transfer objects."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class StorageObject(BaseModel):
    """Storage object metadata."""
    key: str
    size: int
    last_modified: datetime
    content_type: Optional[str] = None


class WriteResult(BaseModel):
    """Result of a committed streamed write."""
    key: str
    size: int
    content_type: Optional[str] = None
