"""
Storage module exceptions.
"""

from shared.exceptions import ConflictError, NotFoundError


class ResourceExistsError(ConflictError):
    """Raised when uploading over an existing file without upsert."""

    def __init__(self, full_path: str):
        super().__init__(
            "The resource already exists",
            code="RESOURCE_EXISTS",
            details={"path": full_path},
        )


class ObjectNotFoundError(NotFoundError):
    """Raised when downloading a path that holds no file."""

    def __init__(self, full_path: str):
        super().__init__(
            "Object not found",
            code="OBJECT_NOT_FOUND",
            details={"path": full_path},
        )


class BucketExistsError(ConflictError):
    def __init__(self, name: str):
        super().__init__("Bucket already exists", code="BUCKET_EXISTS", details={"bucket": name})


class BucketNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__("Bucket not found", code="BUCKET_NOT_FOUND", details={"bucket": name})
