import logging
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    status
)

from uploads_api.dependencies import accept_single, get_upload_service
from uploads_api.schemas import (
    AVATAR_FIELD,
    POST_FIELD,
    Category,
    DeleteFileResponse,
    StoredFile,
    StoredFileResponse,
)
from uploads_api.uploads import UploadService

logger = logging.getLogger(__name__)

router = APIRouter()


def _stored_response(stored: Optional[StoredFile], field_name: str) -> StoredFileResponse:
    if stored is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"No file provided under field '{field_name}'"
        )
    return StoredFileResponse(
        file=stored,
        message=f"File stored at: {stored.location}",
    )


@router.post("/uploads/avatar", response_model=StoredFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_avatar(
    stored: Optional[StoredFile] = Depends(accept_single(Category.PROFILES, AVATAR_FIELD)),
) -> StoredFileResponse:
    """
    Upload a user avatar.

    Expects a multipart body with a single file under the `avatar` field.
    The file is stored under the `profiles` category.

    Returns:
        StoredFileResponse: Location and metadata of the stored file
    """
    return _stored_response(stored, AVATAR_FIELD)


@router.post("/uploads/posts", response_model=StoredFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_post_attachment(
    stored: Optional[StoredFile] = Depends(accept_single(Category.POSTS, POST_FIELD)),
) -> StoredFileResponse:
    """
    Upload a post attachment.

    Expects a multipart body with a single file under the `post` field.
    The file is stored under the `posts` category.
    """
    return _stored_response(stored, POST_FIELD)


@router.delete("/uploads", response_model=DeleteFileResponse)
async def delete_upload(
    location: str = Query(..., min_length=1, description="Public location returned by an upload"),
    service: UploadService = Depends(get_upload_service),
) -> DeleteFileResponse:
    """
    Delete a previously uploaded file by its location.

    In S3 mode backend failures surface as 502. In local mode a failed removal
    is reported in the body with `deleted: false` and an `error` message.
    """
    result = await service.delete(location)

    if result.error:
        message = f"Could not delete file at: {location}"
    elif result.deleted:
        message = f"File deleted at: {location}"
    else:
        message = f"No file to delete at: {location}"

    return DeleteFileResponse(
        location=location,
        deleted=result.deleted,
        message=message,
        error=result.error,
    )
