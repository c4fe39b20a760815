"""
Upload handlers for avatars and post attachments.

`UploadService` is built once from the settings. It owns the storage backend
picked by `StorageFactory` and exposes one `UploadHandler` per category plus
the delete operation:

    service = UploadService.from_settings(settings)

    @router.post("/me/avatar")
    async def set_avatar(stored: StoredFile = Depends(service.avatar.single("avatar"))):
        ...
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request
from starlette.datastructures import FormData, UploadFile

from uploads_api.adapters.storage import BaseStorage, StorageFactory
from uploads_api.config.settings import Settings
from uploads_api.errors import UnexpectedFieldError
from uploads_api.schemas import Category, DeleteResult, StoredFile

logger = logging.getLogger(__name__)

UploadDependency = Callable[[Request], Awaitable[Optional[StoredFile]]]


def extract_single_file(form: FormData, field_name: str) -> Optional[UploadFile]:
    """Return the one file sent under `field_name`, or None if there is none.

    Raises:
        UnexpectedFieldError: a file came under another field, or more than one
            file came under `field_name`
    """
    found = None
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if key != field_name or found is not None:
            raise UnexpectedFieldError(key)
        found = value
    return found


class UploadHandler:
    """Accepts single-file uploads for one category."""

    def __init__(self, storage: BaseStorage, category: Category):
        self.storage = storage
        self.category = category

    def single(self, field_name: str) -> UploadDependency:
        """Build a request step accepting at most one file under `field_name`.

        The returned coroutine function can be used with `Depends`. On success
        the `StoredFile` is returned and also set on `request.state.file`; when
        the request carries no file, both are None.
        """
        async def accept_single(request: Request) -> Optional[StoredFile]:
            async with request.form() as form:
                upload = extract_single_file(form, field_name)
                if upload is None:
                    request.state.file = None
                    return None
                stored = await self.storage.save(upload, self.category, field_name, request)
            request.state.file = stored
            return stored

        accept_single.__name__ = f"accept_{self.category.value}_{field_name}"
        return accept_single


class UploadService:
    """Avatar and post upload handlers plus delete, over one storage backend."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage
        self.handlers: Dict[Category, UploadHandler] = {
            category: UploadHandler(storage, category) for category in Category
        }

    @classmethod
    def from_settings(cls, settings: Settings, s3_client=None) -> "UploadService":
        storage = StorageFactory.get_storage_backend(settings, s3_client=s3_client)
        logger.info("Upload service ready in %s mode", storage.mode)
        return cls(storage)

    @property
    def mode(self) -> str:
        return self.storage.mode

    @property
    def avatar(self) -> UploadHandler:
        return self.handlers[Category.PROFILES]

    @property
    def post(self) -> UploadHandler:
        return self.handlers[Category.POSTS]

    def handler_for(self, category: Category) -> UploadHandler:
        return self.handlers[category]

    async def delete(self, location: str) -> DeleteResult:
        """Delete a previously stored file by its public location."""
        logger.info("Deleting file at %s (%s mode)", location, self.mode)
        return await self.storage.delete(location)
