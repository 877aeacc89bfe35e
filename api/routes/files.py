"""File listing and deletion routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_stored_file_service, require_upload_secret
from application.dto import MessageDTO, StoredFileDTO
from application.services.stored_file_service import StoredFileService

router = APIRouter(prefix="/api/files", tags=["files"])


@router.get("", summary="List stored files, newest first", response_model=list[StoredFileDTO])
async def list_files(service: StoredFileService = Depends(get_stored_file_service)):
    return await service.list_files()


# ``:path`` so names with encoded slashes reach the handler and get a 400 instead of a routing 404
@router.delete(
    "/{filename:path}",
    summary="Delete a stored file",
    response_model=MessageDTO,
    dependencies=[Depends(require_upload_secret)],
)
async def delete_file(
    filename: str,
    service: StoredFileService = Depends(get_stored_file_service),
):
    await service.delete_file(filename)
    return MessageDTO(message="File deleted successfully")
