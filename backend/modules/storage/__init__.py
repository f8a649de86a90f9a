"""
Storage module.

Named-bucket blob storage with base64 content and synthetic URLs.

Public API:
- IStorageService: Interface for bucket management
- StorageService, StorageBucket: Emulator implementation
- StoredFile, FileObject, BucketInfo, StorageResponse: Models
- Storage exceptions: ResourceExistsError, ObjectNotFoundError, etc.
"""

from .interfaces import IStorageService
from .service import StorageBucket, StorageService, encode_body
from .models import BucketInfo, FileObject, StorageResponse, StoredFile
from .exceptions import (
    BucketExistsError,
    BucketNotFoundError,
    ObjectNotFoundError,
    ResourceExistsError,
)

__all__ = [
    # Interface
    "IStorageService",
    # Implementation
    "StorageService",
    "StorageBucket",
    "encode_body",
    # Models
    "BucketInfo",
    "FileObject",
    "StorageResponse",
    "StoredFile",
    # Exceptions
    "BucketExistsError",
    "BucketNotFoundError",
    "ObjectNotFoundError",
    "ResourceExistsError",
]
