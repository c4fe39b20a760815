"""
Storage backends for uploaded files.

Two implementations share one interface: `S3Storage` streams uploads to a
bucket with public-read visibility, `LocalStorage` writes them under the
public directory served at `/public`. `StorageFactory` picks one from the
settings once, at startup.
"""

import asyncio
import logging
import os
import random
import time
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Optional
from urllib.parse import quote, unquote, urlsplit

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from uploads_api.config.settings import LOCAL_MODE, S3_MODE, Settings
from uploads_api.errors import FileTooLargeError, StorageBackendError, StorageConfigurationError
from uploads_api.s3.delete_objects import delete_s3_object
from uploads_api.s3.write_objects import PUBLIC_READ_ACL, upload_s3_object
from uploads_api.schemas import Category, DeleteResult, StoredFile
from uploads_api.utils.decorators import async_log_execution_time

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
PUBLIC_URL_PREFIX = "/public/"
UPLOADS_DIR_NAME = "uploads"


def file_extension(original_name: Optional[str]) -> str:
    """Extension of the client supplied name, dot included ("" when absent)."""
    if not original_name:
        return ""
    return os.path.splitext(os.path.basename(original_name))[1]


def generate_filename(field_name: str, original_name: Optional[str]) -> str:
    """Build `{field}_{unix_millis}-{random}{ext}`.

    The random suffix keeps names distinct when two uploads land in the same
    millisecond.
    """
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field_name}_{unique_suffix}{file_extension(original_name)}"


class BaseStorage:
    """Base class for storage backends (to be extended by specific implementations)"""

    mode: str = ""

    def __init__(self, max_upload_bytes: int):
        self.max_upload_bytes = max_upload_bytes

    async def save(
        self,
        upload: UploadFile,
        category: Category,
        field_name: str,
        request: Request,
    ) -> StoredFile:
        raise NotImplementedError

    async def delete(self, location: str) -> DeleteResult:
        raise NotImplementedError

    async def _measure_upload(self, upload: UploadFile, field_name: str) -> int:
        """Read the upload once to check its size, then rewind it.

        Raises:
            FileTooLargeError: as soon as more than `max_upload_bytes` were read
        """
        size = 0
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > self.max_upload_bytes:
                raise FileTooLargeError(field_name, self.max_upload_bytes)
        await upload.seek(0)
        return size


class LocalStorage(BaseStorage):
    """Stores uploads under `<public_dir>/uploads/<category>`."""

    mode = LOCAL_MODE

    def __init__(self, public_dir: str, max_upload_bytes: int):
        super().__init__(max_upload_bytes)
        self.public_dir = Path(public_dir)
        logger.info("LocalStorage initialized at: %s", self.public_dir / UPLOADS_DIR_NAME)

    def category_dir(self, category: Category) -> Path:
        return self.public_dir / UPLOADS_DIR_NAME / category.value

    @async_log_execution_time
    async def save(
        self,
        upload: UploadFile,
        category: Category,
        field_name: str,
        request: Request,
    ) -> StoredFile:
        directory = self.category_dir(category)
        filename = generate_filename(field_name, upload.filename)
        destination = directory / filename
        try:
            size = await run_in_threadpool(self._write_upload, upload.file, destination, field_name)
        except FileTooLargeError:
            logger.warning("Rejected %s upload for field '%s': over %d bytes", category.value, field_name, self.max_upload_bytes)
            raise
        except asyncio.CancelledError:
            # The worker thread finishes the copy even when the request is cancelled.
            destination.unlink(missing_ok=True)
            raise

        location = self.public_url(request, category, filename)
        logger.info("Stored %s file %s (%d bytes)", category.value, destination, size)
        return StoredFile(
            category=category,
            key=f"{UPLOADS_DIR_NAME}/{category.value}/{filename}",
            filename=filename,
            extension=file_extension(upload.filename),
            location=location,
            field_name=field_name,
            original_name=upload.filename,
            content_type=upload.content_type or "application/octet-stream",
            size=size,
            backend=self.mode,
        )

    def _write_upload(self, source: BinaryIO, destination: Path, field_name: str) -> int:
        """Copy `source` to `destination` in chunks, returning the byte count.

        Runs in a worker thread. A partially written file is removed before
        any error propagates.
        """
        # Idempotent; concurrent first uploads may both attempt it.
        destination.parent.mkdir(parents=True, exist_ok=True)

        size = 0
        try:
            with open(destination, "wb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_upload_bytes:
                        raise FileTooLargeError(field_name, self.max_upload_bytes)
                    out.write(chunk)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise
        return size

    @staticmethod
    def public_url(request: Request, category: Category, filename: str) -> str:
        """URL of a stored file as seen by the client that uploaded it."""
        host = request.headers.get("host") or request.url.netloc
        return f"{request.url.scheme}://{host}{PUBLIC_URL_PREFIX}{UPLOADS_DIR_NAME}/{category.value}/{filename}"

    def resolve_location(self, location: str) -> Optional[Path]:
        """Map a public location back to a path inside the public directory.

        Returns None when the location does not point into `/public/`.
        """
        path = urlsplit(location).path
        index = path.find(PUBLIC_URL_PREFIX)
        if index == -1:
            return None
        relative = unquote(path[index + len(PUBLIC_URL_PREFIX):])
        root = self.public_dir.resolve()
        target = (root / relative).resolve()
        if target == root or not target.is_relative_to(root):
            logger.warning("Refusing to delete outside the public directory: %s", location)
            return None
        return target

    async def delete(self, location: str) -> DeleteResult:
        """Remove the file behind `location`.

        Missing files and locations outside `/public/` are no-ops. Filesystem
        errors are logged and reported in the result, never raised.
        """
        return await run_in_threadpool(self._delete_file, location)

    def _delete_file(self, location: str) -> DeleteResult:
        try:
            target = self.resolve_location(location)
            if target is None:
                logger.info("No local file behind location, nothing to delete: %s", location)
                return DeleteResult(location=location)

            key = target.relative_to(self.public_dir.resolve()).as_posix()
            if not target.is_file():
                logger.info("File already absent: %s", target)
                return DeleteResult(location=location, key=key)

            target.unlink()
            logger.info("Deleted local file: %s", target)
            return DeleteResult(location=location, key=key, deleted=True)
        except OSError as e:
            logger.error("Error deleting local file for %s: %s", location, e)
            return DeleteResult(location=location, error=str(e))


class S3Storage(BaseStorage):
    """Streams uploads to an S3 bucket as public-read objects."""

    mode = S3_MODE

    def __init__(
        self,
        bucket_name: str,
        max_upload_bytes: int,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        s3_client: Optional["S3Client"] = None,
    ):
        super().__init__(max_upload_bytes)
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.s3 = s3_client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

        logger.info("S3Storage initialized")
        logger.info("  Bucket: %s", self.bucket_name)
        logger.info("  Region: %s", self.region)
        logger.info("  Endpoint: %s", self.endpoint_url)

    @classmethod
    def from_settings(cls, settings: Settings, s3_client: Optional["S3Client"] = None) -> "S3Storage":
        if s3_client is None:
            s3_client = boto3.client(
                "s3",
                region_name=settings.aws_region,
                endpoint_url=settings.aws_endpoint_url,
                aws_access_key_id=settings.aws_iam_user_key,
                aws_secret_access_key=settings.aws_iam_user_secret,
            )
        return cls(
            bucket_name=settings.aws_bucket_name,
            max_upload_bytes=settings.max_upload_bytes,
            region=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
            s3_client=s3_client,
        )

    def public_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quote(key)}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quote(key)}"

    @staticmethod
    def key_from_location(location: str) -> str:
        """Object key = the last two path segments of the location."""
        return unquote("/".join(location.split("/")[-2:]))

    @async_log_execution_time
    async def save(
        self,
        upload: UploadFile,
        category: Category,
        field_name: str,
        request: Request,
    ) -> StoredFile:
        # Checked before the transfer starts so oversize files never reach the bucket.
        try:
            size = await self._measure_upload(upload, field_name)
        except FileTooLargeError:
            logger.warning("Rejected %s upload for field '%s': over %d bytes", category.value, field_name, self.max_upload_bytes)
            raise

        filename = generate_filename(field_name, upload.filename)
        key = f"{category.value}/{filename}"
        content_type = upload.content_type or "application/octet-stream"
        try:
            await run_in_threadpool(
                upload_s3_object,
                bucket_name=self.bucket_name,
                object_key=key,
                fileobj=upload.file,
                content_type=content_type,
                metadata={"fieldName": field_name},
                acl=PUBLIC_READ_ACL,
                s3_client=self.s3,
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            logger.error("Error uploading %s to bucket %s: %s", key, self.bucket_name, e)
            raise StorageBackendError(f"Failed to upload file to object storage: {e}") from e

        location = self.public_url(key)
        logger.info("Uploaded %s to S3 as %s (%d bytes)", upload.filename, key, size)
        return StoredFile(
            category=category,
            key=key,
            filename=filename,
            extension=file_extension(upload.filename),
            location=location,
            field_name=field_name,
            original_name=upload.filename,
            content_type=content_type,
            size=size,
            backend=self.mode,
        )

    async def delete(self, location: str) -> DeleteResult:
        """Delete the object behind `location`.

        Existence is not checked first. Backend failures are raised as
        `StorageBackendError`.
        """
        key = self.key_from_location(location)
        try:
            response = await run_in_threadpool(
                delete_s3_object,
                bucket_name=self.bucket_name,
                object_key=key,
                s3_client=self.s3,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error deleting %s from bucket %s: %s", key, self.bucket_name, e)
            raise StorageBackendError(f"Failed to delete file from object storage: {e}") from e

        logger.info("Deleted %s from bucket %s", key, self.bucket_name)
        return DeleteResult(location=location, key=key, deleted=True, acknowledgment=response)


class StorageFactory:
    """Factory to initialize the correct storage backend from the cloud credentials"""

    @staticmethod
    def get_storage_backend(settings: Settings, s3_client: Optional["S3Client"] = None) -> BaseStorage:
        if settings.using_s3:
            logger.info("All cloud credentials present, using S3 storage")
            return S3Storage.from_settings(settings, s3_client=s3_client)

        if settings.has_partial_cloud_credentials:
            missing = ", ".join(settings.missing_cloud_credentials)
            if settings.storage_strict_config:
                raise StorageConfigurationError(
                    f"Incomplete cloud storage configuration, missing: {missing}"
                )
            logger.warning("Incomplete cloud storage configuration (missing: %s), falling back to local storage", missing)

        logger.info("Using local storage under %s", settings.public_dir)
        return LocalStorage(public_dir=settings.public_dir, max_upload_bytes=settings.max_upload_bytes)
