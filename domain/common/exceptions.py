"""Domain-level business exceptions shared by the domain and infrastructure layers.

The core layer only maps these to HTTP responses; nothing here depends on core.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base class for every business exception."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class UnauthorizedException(BusinessException):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code=BusinessCode.UNAUTHORIZED,
            message=message,
            error_type="Unauthorized",
        )


class NoFileUploadedException(BusinessException):
    def __init__(self, field_name: str = "file"):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message="No file uploaded",
            error_type="NoFileUploaded",
            field=field_name,
        )


class UnsupportedFileTypeException(BusinessException):
    def __init__(self, filename: str, allowed: Optional[list[str]] = None):
        details: dict = {"filename": filename}
        if allowed is not None:
            details["allowed_extensions"] = allowed
        super().__init__(
            code=BusinessCode.UNSUPPORTED_FILE_TYPE,
            message="Only image files are allowed!",
            error_type="UnsupportedFileType",
            details=details,
            field="file",
        )


class FileTooLargeException(BusinessException):
    def __init__(self, max_size: int, max_size_human: str, size: Optional[int] = None):
        details: dict = {"max_size": max_size, "max_size_human": max_size_human}
        if size is not None:
            details["size"] = size
        super().__init__(
            code=BusinessCode.FILE_TOO_LARGE,
            message=f"File too large. Max size is {max_size} bytes ({max_size_human}).",
            error_type="FileTooLarge",
            details=details,
            field="file",
        )


class InvalidFileNameException(BusinessException):
    def __init__(self, filename: str, reason: str = "Invalid file name"):
        super().__init__(
            code=BusinessCode.INVALID_FILE_NAME,
            message=reason,
            error_type="InvalidFileName",
            details={"filename": filename},
            field="filename",
        )


class MalformedUploadException(BusinessException):
    def __init__(self, reason: str):
        super().__init__(
            code=BusinessCode.MALFORMED_UPLOAD,
            message=reason,
            error_type="MalformedUpload",
        )


class StoredFileNotFoundException(BusinessException):
    def __init__(self, filename: Optional[str] = None):
        details = {"filename": filename} if filename is not None else None
        super().__init__(
            code=BusinessCode.FILE_NOT_FOUND,
            message="File not found",
            error_type="FileNotFound",
            details=details,
        )


class StorageFailureException(BusinessException):
    """Unexpected filesystem failure surfaced to the client as a 500."""

    def __init__(self, message: str, operation: Optional[str] = None):
        details = {"operation": operation} if operation else None
        super().__init__(
            code=BusinessCode.STORAGE_ERROR,
            message=message,
            error_type="StorageFailure",
            details=details,
        )
