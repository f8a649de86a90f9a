"""
Storage module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import StorageResponse
from .service import StorageBucket


@runtime_checkable
class IStorageService(Protocol):
    """
    Interface for bucket management.

    File operations live on the StorageBucket returned by from_().
    """

    def from_(self, bucket: str) -> StorageBucket:
        ...

    async def list_buckets(self) -> StorageResponse:
        ...

    async def create_bucket(self, name: str, *, public: bool = False) -> StorageResponse:
        """
        Create an empty bucket.

        Returns:
            StorageResponse; BucketExistsError if the name is taken
        """
        ...

    async def delete_bucket(self, name: str) -> StorageResponse:
        ...

    def current_user_id(self) -> Optional[str]:
        ...
