"""
Shared business codes used across layers (Domain/Core/API).

This package exposes BusinessCode at `shared.codes` so the exception
handlers and the domain exceptions agree on a single numbering.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes (single source of truth)."""

    # Success
    SUCCESS = 0

    # Parameter errors (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003
    UNSUPPORTED_FILE_TYPE = 10004
    INVALID_FILE_NAME = 10005
    MALFORMED_UPLOAD = 10006
    FILE_TOO_LARGE = 10007

    # Business errors (2xxxx)
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006  # Generic resource not found
    FILE_NOT_FOUND = 20007

    # Authorization errors (3xxxx)
    PERMISSION_ERROR = 30000
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    SERVICE_UNAVAILABLE = 40003
    STORAGE_ERROR = 40004


__all__ = ["BusinessCode"]
