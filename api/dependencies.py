"""
API dependencies - shared secret authentication and service wiring
"""
from typing import Optional

from fastapi import Depends, Header, Request

from application.ports.auth import Authenticator
from application.ports.storage import StoragePort
from application.services.stored_file_service import StoredFileService
from core.config import UploadConfig
from domain.common.exceptions import UnauthorizedException
from infrastructure.adapters.storage_port import StorageProviderPortAdapter

SECRET_HEADER = "x-upload-secret"


def get_upload_config(request: Request) -> UploadConfig:
    return request.app.state.upload_config


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


async def get_storage_port(request: Request) -> StoragePort:
    # Provider is created in the app lifespan
    return StorageProviderPortAdapter(request.app.state.storage)


async def get_stored_file_service(
    config: UploadConfig = Depends(get_upload_config),
    storage: StoragePort = Depends(get_storage_port),
) -> StoredFileService:
    return StoredFileService(config=config, storage=storage)


async def require_upload_secret(
    x_upload_secret: Optional[str] = Header(
        None,
        alias=SECRET_HEADER,
        description="Shared secret required for upload and delete",
    ),
    authenticator: Authenticator = Depends(get_authenticator),
) -> None:
    """Reject the request unless the shared secret header matches."""
    if not authenticator.verify(x_upload_secret):
        raise UnauthorizedException()
