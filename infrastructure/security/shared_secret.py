"""Shared-secret authenticator for write operations."""
from __future__ import annotations

import secrets
from typing import Optional

from application.ports.auth import Authenticator


class SharedSecretAuthenticator(Authenticator):
    """Constant-time comparison against one configured secret.

    With no secret configured nothing authenticates.
    """

    def __init__(self, secret: Optional[str]):
        self._secret = secret

    def verify(self, credential: Optional[str]) -> bool:
        if not self._secret or credential is None:
            return False
        return secrets.compare_digest(
            credential.encode("utf-8"), self._secret.encode("utf-8")
        )
