"""
Storage module data models.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from shared.models import OperationResult, utc_now_iso


DEFAULT_MIME_TYPE = "application/octet-stream"
TEXT_MIME_TYPE = "text/plain;charset=UTF-8"


class StoredFile(BaseModel):
    """
    A file held by the blob store.

    Identity is ``bucket/path``. Content is kept base64-encoded.
    """

    id: str
    name: str
    bucket: str
    path: str
    size: int = Field(..., ge=0, description="Decoded size in bytes")
    mime_type: str = DEFAULT_MIME_TYPE
    data: str = Field(..., description="Base64-encoded content")
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    user_id: Optional[str] = Field(None, description="Uploader, when signed in")

    @property
    def full_path(self) -> str:
        return f"{self.bucket}/{self.path}"


class FileObject(BaseModel):
    """Entry returned by StorageBucket.list."""

    id: str
    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class BucketInfo(BaseModel):
    id: str
    name: str
    public: bool = False


class StorageResponse(OperationResult):
    """Result of a storage call. ``data`` depends on the operation."""

    data: Any = None
