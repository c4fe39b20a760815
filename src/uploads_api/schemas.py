####################################
# --- Request/response schemas --- #
####################################

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

AVATAR_FIELD = "avatar"
POST_FIELD = "post"


class Category(str, Enum):
    """Upload classification; doubles as the storage key prefix / subdirectory."""
    PROFILES = "profiles"
    POSTS = "posts"


class StoredFile(BaseModel):
    """A file persisted by one of the storage backends."""
    category: Category = Field(description="Upload category the file was stored under.")
    key: str = Field(
        description="Backend key: the object key in S3, the path under the public directory locally.",
        json_schema_extra={"example": "profiles/avatar_1718000000000-123456789.png"},
    )
    filename: str = Field(
        description="Generated file name.",
        json_schema_extra={"example": "avatar_1718000000000-123456789.png"},
    )
    extension: str = Field(description="Extension of the original file name, including the dot.")
    location: str = Field(
        description="Public URL of the stored file.",
        json_schema_extra={"example": "http://localhost:8000/public/uploads/profiles/avatar_1718000000000-123456789.png"},
    )
    field_name: str = Field(description="Multipart field the file arrived under.")
    original_name: Optional[str] = Field(None, description="File name supplied by the client.")
    content_type: str = Field("application/octet-stream", description="MIME type supplied by the client.")
    size: int = Field(description="The size of the file in bytes.", ge=0)
    backend: str = Field(description="Storage backend that persisted the file: `s3` or `local`.")


class DeleteResult(BaseModel):
    """Outcome of a delete; backend failures that are not raised land in `error`."""
    location: str
    key: Optional[str] = None
    deleted: bool = False
    acknowledgment: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StoredFileResponse(BaseModel):
    """Response model for `POST /v1/uploads/avatar` and `POST /v1/uploads/posts`."""
    file: StoredFile
    message: str = Field(description="A message about the operation.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "file": {
                    "category": "profiles",
                    "key": "profiles/avatar_1718000000000-123456789.png",
                    "filename": "avatar_1718000000000-123456789.png",
                    "extension": ".png",
                    "location": "http://localhost:8000/public/uploads/profiles/avatar_1718000000000-123456789.png",
                    "field_name": "avatar",
                    "original_name": "me.png",
                    "content_type": "image/png",
                    "size": 20480,
                    "backend": "local",
                },
                "message": "File stored at: http://localhost:8000/public/uploads/profiles/avatar_1718000000000-123456789.png",
            }
        }
    )


class DeleteFileResponse(BaseModel):
    """Response model for `DELETE /v1/uploads`."""
    location: str
    deleted: bool
    message: str
    error: Optional[str] = None
