"""Upload errors and the FastAPI handlers that turn them into responses."""
import logging

import pydantic
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Base class for errors surfaced to the caller of an upload or delete."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FileTooLargeError(UploadError):
    """Raised when an uploaded file exceeds the per-file size limit."""

    status_code = status.HTTP_413_CONTENT_TOO_LARGE

    def __init__(self, field_name: str, limit_bytes: int):
        self.field_name = field_name
        self.limit_bytes = limit_bytes
        super().__init__(f"File too large: field '{field_name}' exceeds the {limit_bytes} byte limit")


class UnexpectedFieldError(UploadError):
    """Raised when a file arrives under the wrong field, or more than once."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Unexpected file field: '{field_name}'")


class StorageBackendError(UploadError):
    """Raised when the object store rejects or fails a request."""

    status_code = status.HTTP_502_BAD_GATEWAY


class StorageConfigurationError(Exception):
    """Raised at startup when storage settings cannot select a backend."""


async def handle_upload_errors(request: Request, exc: UploadError) -> JSONResponse:
    logger.warning("Upload request failed (%s %s): %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates out of a route."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=jsonable_encoder({
            "detail": [
                {
                    "msg": error["msg"],
                    "input": error.get("input"),
                }
                for error in errors
            ]
        }),
    )
