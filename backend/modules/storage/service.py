"""
Blob store implementation.

Files live in memory under their ``bucket/path`` identity. URLs are pure
templates over the configured storage base URL; no access control is
simulated.
"""

import base64
import logging
import time
from typing import Callable, Optional, Union

from shared.config import Settings, get_settings
from shared.faults import FaultInjector
from shared.ids import generate_id
from shared.latency import (
    DOWNLOAD_DELAY_MS,
    READ_DELAY_MS,
    UPLOAD_DELAY_MS,
    URL_DELAY_MS,
    WRITE_DELAY_MS,
    Latency,
)
from shared.models import utc_now_iso

from .exceptions import (
    BucketExistsError,
    BucketNotFoundError,
    ObjectNotFoundError,
    ResourceExistsError,
)
from .models import (
    DEFAULT_MIME_TYPE,
    TEXT_MIME_TYPE,
    BucketInfo,
    FileObject,
    StorageResponse,
    StoredFile,
)

logger = logging.getLogger(__name__)

FileBody = Union[bytes, bytearray, memoryview, str]


def encode_body(body: FileBody) -> tuple[str, int]:
    """
    Base64-encode an upload body.

    Text is encoded as UTF-8 first.

    Returns:
        Tuple of (base64 text, size in bytes)
    """
    raw = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    return base64.b64encode(raw).decode("ascii"), len(raw)


class StorageBucket:
    """File operations scoped to one bucket."""

    def __init__(self, service: "StorageService", name: str):
        self._service = service
        self.name = name

    def _full_path(self, path: str) -> str:
        return f"{self.name}/{path}"

    async def upload(
        self,
        path: str,
        data: FileBody,
        *,
        content_type: Optional[str] = None,
        upsert: bool = False,
    ) -> StorageResponse:
        """
        Store a file.

        Returns:
            StorageResponse with data {"path": path}, or
            ResourceExistsError when the path is taken and upsert is False
        """
        svc = self._service
        await svc.latency.wait(UPLOAD_DELAY_MS)
        error = svc.faults.get("storage", f"{self.name}.upload")
        if error:
            return StorageResponse(error=error)

        full_path = self._full_path(path)
        existing = svc.files.get(full_path)
        if existing is not None and not upsert:
            return StorageResponse(error=ResourceExistsError(full_path))

        encoded, size = encode_body(data)
        now = utc_now_iso()
        default_type = TEXT_MIME_TYPE if isinstance(data, str) else DEFAULT_MIME_TYPE
        svc.files[full_path] = StoredFile(
            id=existing.id if existing else generate_id("file"),
            name=path.split("/")[-1] or "file",
            bucket=self.name,
            path=path,
            size=size,
            mime_type=content_type or default_type,
            data=encoded,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            user_id=svc.current_user_id(),
        )
        logger.debug(f"[Storage] Uploaded {full_path} ({size} bytes)")
        return StorageResponse(data={"path": path})

    async def download(self, path: str) -> StorageResponse:
        """Return the file content as bytes, or ObjectNotFoundError."""
        svc = self._service
        await svc.latency.wait(DOWNLOAD_DELAY_MS)
        error = svc.faults.get("storage", f"{self.name}.download")
        if error:
            return StorageResponse(error=error)

        full_path = self._full_path(path)
        stored = svc.files.get(full_path)
        if stored is None:
            return StorageResponse(error=ObjectNotFoundError(full_path))

        logger.debug(f"[Storage] Downloaded {full_path}")
        return StorageResponse(data=base64.b64decode(stored.data))

    async def remove(self, paths: list[str]) -> StorageResponse:
        """Delete files. data lists only the paths that existed."""
        svc = self._service
        await svc.latency.wait(WRITE_DELAY_MS)
        error = svc.faults.get("storage", f"{self.name}.remove")
        if error:
            return StorageResponse(error=error)

        removed = []
        for path in paths:
            if svc.files.pop(self._full_path(path), None) is not None:
                removed.append({"path": path})
        logger.debug(f"[Storage] Removed {len(removed)} of {len(paths)} files from {self.name}")
        return StorageResponse(data=removed)

    async def list(
        self,
        path: str = "",
        *,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> StorageResponse:
        """List files whose path starts with ``path``."""
        svc = self._service
        await svc.latency.wait(READ_DELAY_MS)
        error = svc.faults.get("storage", f"{self.name}.list")
        if error:
            return StorageResponse(error=error)

        prefix = self._full_path(path)
        entries = [
            FileObject(
                id=f.id,
                name=f.name,
                metadata={"size": f.size, "mimetype": f.mime_type, "created_at": f.created_at},
            )
            for full_path, f in svc.files.items()
            if full_path.startswith(prefix)
        ]
        end = offset + limit if limit is not None else None
        return StorageResponse(data=entries[offset:end])

    def get_public_url(self, path: str) -> str:
        return f"{self._service.settings.emulator_storage_url}/{self.name}/{path}"

    async def create_signed_url(self, path: str, expires_in: int) -> StorageResponse:
        await self._service.latency.wait(URL_DELAY_MS)
        signed_url = (
            f"{self.get_public_url(path)}"
            f"?token=mock-signed-{int(time.time() * 1000)}&expires={expires_in}"
        )
        return StorageResponse(data={"signed_url": signed_url})


class StorageService:
    """
    Named buckets of files.

    Args:
        user_id_provider: Returns the signed-in user's id (or None);
            uploads are tagged with it so deleting a user removes their files.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        latency: Optional[Latency] = None,
        faults: Optional[FaultInjector] = None,
        user_id_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.settings = settings or get_settings()
        self.latency = latency or Latency(self.settings)
        self.faults = faults or FaultInjector()
        self._user_id_provider = user_id_provider
        self.files: dict[str, StoredFile] = {}
        self.buckets: dict[str, BucketInfo] = {}
        self._add_default_buckets()

    def _add_default_buckets(self) -> None:
        for name in self.settings.emulator_default_buckets:
            self.buckets[name] = BucketInfo(id=f"bucket-{name}", name=name)

    def current_user_id(self) -> Optional[str]:
        return self._user_id_provider() if self._user_id_provider else None

    def from_(self, bucket: str) -> StorageBucket:
        """Open a bucket, creating it implicitly if unknown."""
        if bucket not in self.buckets:
            self.buckets[bucket] = BucketInfo(id=f"bucket-{bucket}", name=bucket)
        return StorageBucket(self, bucket)

    async def list_buckets(self) -> StorageResponse:
        await self.latency.wait(URL_DELAY_MS)
        return StorageResponse(data=list(self.buckets.values()))

    async def create_bucket(self, name: str, *, public: bool = False) -> StorageResponse:
        await self.latency.wait(READ_DELAY_MS)
        if name in self.buckets:
            return StorageResponse(error=BucketExistsError(name))
        self.buckets[name] = BucketInfo(id=f"bucket-{name}", name=name, public=public)
        logger.debug(f"[Storage] Created bucket {name} (public={public})")
        return StorageResponse(data={"name": name})

    async def delete_bucket(self, name: str) -> StorageResponse:
        """Delete a bucket and every file in it."""
        await self.latency.wait(READ_DELAY_MS)
        if name not in self.buckets:
            return StorageResponse(error=BucketNotFoundError(name))
        prefix = f"{name}/"
        for full_path in [k for k in self.files if k.startswith(prefix)]:
            del self.files[full_path]
        del self.buckets[name]
        logger.debug(f"[Storage] Deleted bucket {name}")
        return StorageResponse()

    # -------------------------------------------------------------------------
    # Emulator control
    # -------------------------------------------------------------------------

    def seed(self, files: list[dict]) -> None:
        """
        Add files directly.

        Each entry needs bucket, path and data (bytes or text); mime_type
        and user_id are optional.
        """
        for entry in files:
            encoded, size = encode_body(entry["data"])
            path = entry["path"]
            stored = StoredFile(
                id=generate_id("file"),
                name=path.split("/")[-1] or "file",
                bucket=entry["bucket"],
                path=path,
                size=size,
                mime_type=entry.get("mime_type") or DEFAULT_MIME_TYPE,
                data=encoded,
                user_id=entry.get("user_id"),
            )
            self.from_(stored.bucket)
            self.files[stored.full_path] = stored
        logger.debug(f"[Storage] Seeded {len(files)} files")

    def get_files(self, bucket: Optional[str] = None) -> list[StoredFile]:
        return [f for f in self.files.values() if bucket is None or f.bucket == bucket]

    def delete_files_for_user(self, user_id: str) -> int:
        """Remove files uploaded by ``user_id`` or whose path mentions it."""
        doomed = [
            key for key, f in self.files.items()
            if f.user_id == user_id or user_id in f.path
        ]
        for key in doomed:
            del self.files[key]
        return len(doomed)

    def clear_files(self) -> None:
        self.files.clear()

    def reset(self) -> None:
        self.files.clear()
        self.buckets.clear()
        self._add_default_buckets()
