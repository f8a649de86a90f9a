"""
Persistent key-value store.

Durable backing for sessions, users and table rows. A thin wrapper over
local storage: either a plain dict (tests, ephemeral runs) or one text file
per key inside a directory. I/O failures are logged and degrade to
"nothing stored" so a corrupt cache means a cold start, not a crash.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import Settings, get_settings
from .exceptions import StorageIOError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@runtime_checkable
class KeyValueStore(Protocol):
    """Interface for the storage the emulator persists its documents to."""

    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        ...

    async def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...


class MemoryKeyValueStore:
    """Dict-backed store. State lives as long as the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileKeyValueStore:
    """
    Directory-backed store with one UTF-8 file per key.

    Keys are sanitised into file names; the directory is created lazily.
    """

    def __init__(self, directory: str | Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    async def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"[KeyValueStore] Failed to read {key}", exc_info=StorageIOError(key, str(e)))
            return None

    async def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            logger.error(f"[KeyValueStore] Failed to write {key}", exc_info=StorageIOError(key, str(e)))

    async def remove_item(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"[KeyValueStore] Failed to remove {key}", exc_info=StorageIOError(key, str(e)))


def create_key_value_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Build the store selected by configuration.

    Returns:
        FileKeyValueStore when EMULATOR_STORAGE_DIR is set, otherwise
        a MemoryKeyValueStore.
    """
    settings = settings or get_settings()
    if settings.emulator_storage_dir:
        return FileKeyValueStore(settings.emulator_storage_dir)
    return MemoryKeyValueStore()
