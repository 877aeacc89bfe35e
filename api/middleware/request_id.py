"""
Request ID middleware

Reuses or generates a trace id per request and exposes it through
contextvars so every structlog record carries it.
"""
import uuid

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class RequestIDMiddleware:
    """
    Pure ASGI so upload bodies stream straight through to the endpoint.

    1. read X-Request-ID or generate one
    2. bind it (plus client ip, method, path) to the structlog context
    3. echo it back in the response headers
    """

    HEADER_NAME = "X-Request-ID"

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        client_ip = self._get_client_ip(scope, headers)

        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["client_ip"] = client_ip

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client_ip=client_ip,
            method=scope.get("method"),
            path=scope.get("path"),
        )

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[self.HEADER_NAME] = request_id
            await send(message)

        await self.app(scope, receive, send_wrapper)

    @staticmethod
    def _get_client_ip(scope: Scope, headers: Headers) -> str:
        """Prefer proxy headers, fall back to the socket peer."""
        forwarded = headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = headers.get("X-Real-IP")
        if real_ip:
            return real_ip
        client = scope.get("client")
        return client[0] if client else "unknown"
