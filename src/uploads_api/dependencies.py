from typing import Optional

from fastapi import Request

from uploads_api.schemas import Category, StoredFile
from uploads_api.uploads import UploadDependency, UploadService


def get_upload_service(request: Request) -> UploadService:
    """Upload service built by `create_app`."""
    return request.app.state.upload_service


def accept_single(category: Category, field_name: str) -> UploadDependency:
    """`Depends`-ready single-file upload step bound to the app's upload service."""
    async def dependency(request: Request) -> Optional[StoredFile]:
        service = get_upload_service(request)
        return await service.handler_for(category).single(field_name)(request)

    return dependency
