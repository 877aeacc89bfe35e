"""
Error response body shared by every exception handler
"""
from typing import Optional
from pydantic import BaseModel, Field, field_serializer
from datetime import datetime, timezone


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""
    error: str
    code: int
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        """UTC ISO8601 with a trailing Z."""
        ts = timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        else:
            ts = ts.astimezone(timezone.utc)
        return ts.isoformat().replace("+00:00", "Z")


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None
) -> ErrorResponse:
    """
    Build an error body.

    Args:
        code: business code
        message: human readable message, exposed as ``error``
        error_type: error type name
        details: structured details
        field: offending input field
        request_id: request id from RequestIDMiddleware

    Returns:
        ErrorResponse
    """
    return ErrorResponse(
        error=message,
        code=code,
        type=error_type,
        details=details,
        field=field,
        request_id=request_id,
    )
