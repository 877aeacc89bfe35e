"""Incremental multipart/form-data parsing over the raw request stream.

Starlette's ``request.form()`` spools the whole file before the endpoint sees
it; this drives ``python_multipart`` chunk by chunk instead and yields framework
independent events, so size limits apply while the body is still arriving.
"""
from __future__ import annotations

from typing import AsyncIterator, Optional

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request

from application.ports.upload import PartData, PartFinished, PartStarted, UploadEvent
from domain.common.exceptions import MalformedUploadException


def _decode(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def content_length(request: Request) -> Optional[int]:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


class _PartCollector:
    """Parser callbacks; queues events until the caller drains them."""

    def __init__(self) -> None:
        self.events: list[UploadEvent] = []
        self.finished = False
        self._header_field = b""
        self._header_value = b""
        self._headers: dict[bytes, bytes] = {}

    def on_part_begin(self) -> None:
        self._headers = {}

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        disposition = self._headers.get(b"content-disposition")
        if disposition is None:
            raise MalformedUploadException("Missing Content-Disposition header in multipart part")
        _, options = parse_options_header(disposition)
        if b"name" not in options:
            raise MalformedUploadException("Multipart part without a field name")
        filename = options.get(b"filename")
        content_type = self._headers.get(b"content-type")
        self.events.append(
            PartStarted(
                field_name=_decode(options[b"name"]),
                filename=_decode(filename) if filename is not None else None,
                content_type=_decode(content_type) if content_type is not None else None,
            )
        )

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if end > start:
            self.events.append(PartData(data=bytes(data[start:end])))

    def on_part_end(self) -> None:
        self.events.append(PartFinished())

    def on_end(self) -> None:
        self.finished = True

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_end": self.on_end,
        }

    def drain(self) -> list[UploadEvent]:
        events, self.events = self.events, []
        return events


def _boundary(request: Request) -> bytes:
    content_type, params = parse_options_header(request.headers.get("content-type", ""))
    if content_type != b"multipart/form-data":
        raise MalformedUploadException("Expected a multipart/form-data request body")
    boundary = params.get(b"boundary")
    if not boundary:
        raise MalformedUploadException("Missing boundary in multipart/form-data content type")
    return boundary


async def iter_multipart(request: Request) -> AsyncIterator[UploadEvent]:
    """Yield upload events as the request body arrives."""
    collector = _PartCollector()
    parser = MultipartParser(_boundary(request), collector.callbacks())

    try:
        async for chunk in request.stream():
            if chunk:
                parser.write(chunk)
            for event in collector.drain():
                yield event
        parser.finalize()
    except MultipartParseError as exc:
        raise MalformedUploadException(f"Malformed multipart body: {exc}") from exc

    for event in collector.drain():
        yield event

    if not collector.finished:
        raise MalformedUploadException("Multipart body ended before the closing boundary")
