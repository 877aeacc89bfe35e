"""Naming and extension rules for stored files."""
from __future__ import annotations

import os
import uuid
from typing import Iterable

from domain.common.exceptions import InvalidFileNameException

DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")
SVG_EXTENSION = ".svg"

_FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


def file_extension(filename: str) -> str:
    """Return the lowercased extension of ``filename`` including the dot.

    Browsers on some platforms send the full client path, so only the last
    path segment is considered.
    """
    base = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    _, ext = os.path.splitext(base)
    return ext.lower()


def is_allowed_extension(filename: str, allowed: Iterable[str]) -> bool:
    ext = file_extension(filename)
    return bool(ext) and ext in {a.lower() for a in allowed}


def generate_storage_name(original_filename: str) -> str:
    """Build ``<uuid4><ext>`` for an upload, keeping only the normalized extension."""
    return f"{uuid.uuid4()}{file_extension(original_filename)}"


def validate_storage_name(name: str) -> str:
    """Reject anything that is not a plain file name inside the storage directory."""
    if not name or not name.strip():
        raise InvalidFileNameException(name or "", reason="File name is required")
    if name in {".", ".."}:
        raise InvalidFileNameException(name)
    if any(ch in name for ch in _FORBIDDEN_NAME_CHARS):
        raise InvalidFileNameException(name)
    if len(name) > 255:
        raise InvalidFileNameException(name, reason="File name too long")
    return name
