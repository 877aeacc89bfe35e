"""
Access log middleware

Logs one record when a request starts and one when its response starts,
with the elapsed time. Request bodies are never read here, so uploads keep
streaming and multipart payloads never reach the logs.
"""
import time

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logging_config import get_logger


logger = get_logger(__name__)


class LoggingMiddleware:
    """Request/response logging with duration and X-Process-Time."""

    SKIP_PATHS = {"/health", "/favicon.ico"}

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_info = self._request_info(scope)
        logger.info("request_started", **request_info)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                duration = time.time() - start_time
                MutableHeaders(scope=message)["X-Process-Time"] = f"{duration:.3f}"
                self._log_response(message["status"], duration, request_info)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=time.time() - start_time,
                error=str(exc),
                error_type=type(exc).__name__,
                **request_info,
                exc_info=True,
            )
            raise

    @staticmethod
    def _request_info(scope: Scope) -> dict:
        headers = Headers(scope=scope)
        info = {
            "method": scope["method"],
            "path": scope["path"],
        }
        query = scope.get("query_string", b"")
        if query:
            info["query"] = query.decode("latin-1")
        content_length = headers.get("content-length")
        if content_length:
            info["content_length"] = content_length
        user_agent = headers.get("user-agent")
        if user_agent:
            info["user_agent"] = user_agent
        return info

    @staticmethod
    def _log_response(status_code: int, duration: float, request_info: dict) -> None:
        log_data = {"status_code": status_code, "duration": duration, **request_info}
        if status_code < 400:
            logger.info("request_completed", **log_data)
        elif status_code < 500:
            logger.warning("request_client_error", **log_data)
        else:
            logger.error("request_server_error", **log_data)
