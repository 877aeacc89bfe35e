"""Authentication port for write operations."""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Authenticator(Protocol):
    """Decides whether a presented credential may perform writes.

    Handlers only see this interface, so the shared-secret check can be
    swapped for HMAC signatures or expiring tokens.
    """

    def verify(self, credential: Optional[str]) -> bool: ...
