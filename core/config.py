"""
Configuration - environment driven settings and the immutable upload config
"""
from __future__ import annotations

import json
import math
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.stored_file import DEFAULT_ALLOWED_EXTENSIONS, SVG_EXTENSION


DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

# Same unreserved set as encodeURIComponent
_URL_SAFE = "!~*'()"

_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)([KMG]?B?)", re.IGNORECASE)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_SIZE_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
}


def parse_file_size(expr: object) -> int:
    """Convert a human size expression such as ``"10MB"`` into bytes.

    Grammar: ``<number>[KMG]?B?`` (case-insensitive, binary multipliers).
    A bare ``K``/``M``/``G`` without the trailing ``B`` counts as bytes.
    Anything else falls back to the leading integer of the expression and
    finally to 10 MiB. Never raises and always returns a positive integer.
    """
    text = str(expr if expr is not None else "").strip()

    match = _SIZE_PATTERN.fullmatch(text)
    if match:
        value = float(match.group(1)) * _SIZE_MULTIPLIERS.get(match.group(2).upper(), 1)
        if not math.isfinite(value):
            return DEFAULT_MAX_FILE_SIZE
        size = int(math.floor(value + 0.5))
        return size if size > 0 else DEFAULT_MAX_FILE_SIZE

    leading = _LEADING_INT.match(text)
    if leading:
        size = int(leading.group(1))
        if size > 0:
            return size
    return DEFAULT_MAX_FILE_SIZE


class UploadConfig(BaseModel):
    """Process-wide upload configuration, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    upload_dir: Path
    max_file_size: int = Field(gt=0)
    max_file_size_raw: str
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    secret: Optional[str] = None
    public_host: str

    def public_url(self, name: str) -> str:
        return f"{self.public_host}/files/{quote(name, safe=_URL_SAFE)}"

    def ensure_upload_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir


class Settings(BaseSettings):
    """Service settings (environment variables or .env)."""

    PROJECT_NAME: str = Field(default="imagedrop")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)

    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)

    UPLOAD_DIR: str = Field(default="uploads")
    MAX_FILE_SIZE: str = Field(default="10MB")
    PUBLIC_HOST: Optional[str] = Field(default=None, description="Defaults to http://localhost:<PORT>")
    UPLOAD_SECRET: Optional[str] = Field(default=None, description="Shared secret for upload/delete")
    ALLOW_SVG: bool = Field(default=False)

    # JSON list or comma separated
    CORS_ORIGINS: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("MAX_FILE_SIZE", mode="before")
    @classmethod
    def _coerce_max_file_size(cls, v):
        if v is None:
            return "10MB"
        return str(v).strip()

    @field_validator("PUBLIC_HOST", "UPLOAD_SECRET", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("PUBLIC_HOST")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v

    @property
    def public_host(self) -> str:
        return self.PUBLIC_HOST or f"http://localhost:{self.PORT}"

    @property
    def allowed_extensions(self) -> tuple[str, ...]:
        if self.ALLOW_SVG:
            return DEFAULT_ALLOWED_EXTENSIONS + (SVG_EXTENSION,)
        return DEFAULT_ALLOWED_EXTENSIONS

    @property
    def cors_origins(self) -> list[str]:
        raw = (self.CORS_ORIGINS or "").strip()
        if not raw:
            return []
        if raw.startswith("[") and raw.endswith("]"):
            try:
                arr = json.loads(raw)
            except ValueError:
                arr = None
            if isinstance(arr, list):
                return [str(item).strip() for item in arr if str(item).strip()]
        return [item.strip() for item in raw.split(",") if item.strip()]

    def upload_config(self) -> UploadConfig:
        return UploadConfig(
            upload_dir=Path(self.UPLOAD_DIR),
            max_file_size=parse_file_size(self.MAX_FILE_SIZE),
            max_file_size_raw=self.MAX_FILE_SIZE,
            allowed_extensions=self.allowed_extensions,
            secret=self.UPLOAD_SECRET,
            public_host=self.public_host,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
