"""Public retrieval of stored files."""
from __future__ import annotations

from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse

from api.dependencies import get_stored_file_service
from application.services.stored_file_service import StoredFileService

router = APIRouter(tags=["files"])

DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def _chain(first: bytes, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    yield first
    async for chunk in rest:
        yield chunk


@router.api_route(
    "/files/{filename:path}",
    methods=["GET", "HEAD"],
    summary="Fetch a stored file",
)
async def get_file(
    filename: str,
    request: Request,
    service: StoredFileService = Depends(get_stored_file_service),
):
    stored = await service.get_file(filename)
    headers = {"Content-Length": str(stored.size)}
    media_type = stored.content_type or DEFAULT_CONTENT_TYPE

    if request.method == "HEAD":
        return Response(headers=headers, media_type=media_type)

    # Reading the first chunk opens the file, so a delete racing this request
    # surfaces here as a 404 rather than after the response has started
    chunks = service.iter_content(stored.name)
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = b""

    return StreamingResponse(_chain(first, chunks), media_type=media_type, headers=headers)
