"""Upload route."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_stored_file_service, require_upload_secret
from api.utils.multipart import content_length, iter_multipart
from application.dto import UploadResponseDTO
from application.services.stored_file_service import UPLOAD_FIELD, StoredFileService

# Room for boundaries and part headers around the file itself
MULTIPART_OVERHEAD = 16 * 1024

router = APIRouter(tags=["upload"])


@router.post(
    "/upload",
    summary="Upload one image",
    response_model=UploadResponseDTO,
    dependencies=[Depends(require_upload_secret)],
)
async def upload_file(
    request: Request,
    service: StoredFileService = Depends(get_stored_file_service),
):
    """Stream a single multipart ``file`` field into storage.

    The body is read here rather than through ``UploadFile`` so the size
    limit applies before the upload is fully buffered.
    """
    service.check_declared_size(content_length(request), overhead=MULTIPART_OVERHEAD)
    return await service.store_upload(iter_multipart(request), field_name=UPLOAD_FIELD)
