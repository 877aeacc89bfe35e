"""Storage utility functions."""
import mimetypes
from pathlib import Path

from .exceptions import ValidationError


def guess_content_type(filename: str) -> str:
    """Guess content type from filename.

    Args:
        filename: File name or path

    Returns:
        MIME type string
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def safe_join(base: Path, key: str) -> Path:
    """Join a flat key onto ``base`` and refuse anything that leaves it.

    Args:
        base: Resolved base directory
        key: Plain file name

    Returns:
        Resolved path directly inside ``base``

    Raises:
        ValidationError: If the key is empty, nested or escapes base
    """
    if not key or "\x00" in key:
        raise ValidationError(f"Invalid key: {key!r}")

    full_path = (base / key).resolve()

    try:
        full_path.relative_to(base)
    except ValueError:
        raise ValidationError(f"Path escapes base directory: {key}")

    # The store is flat; nested keys are not addressable
    if full_path.parent != base:
        raise ValidationError(f"Nested keys are not supported: {key}")

    return full_path
