"""Stored file domain exports."""
from .entity import StoredFile
from .rules import (
    DEFAULT_ALLOWED_EXTENSIONS,
    SVG_EXTENSION,
    file_extension,
    generate_storage_name,
    is_allowed_extension,
    validate_storage_name,
)

__all__ = [
    "StoredFile",
    "DEFAULT_ALLOWED_EXTENSIONS",
    "SVG_EXTENSION",
    "file_extension",
    "generate_storage_name",
    "is_allowed_extension",
    "validate_storage_name",
]
